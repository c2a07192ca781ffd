from typing import Dict, Any
from urllib.parse import urlparse
from fastapi import Request, HTTPException
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
import os
import time
import hashlib
import logging
from payconnect.utils.security import SESSION_HEADER

logger = logging.getLogger(__name__)

def _session_key_from_request(req: Request) -> str:
    # Priorité: session (hashée) puis IP
    session_id = req.headers.get(SESSION_HEADER)
    path = req.url.path
    if session_id:
        h = hashlib.sha256(session_id.encode("utf-8")).hexdigest()[:16]
        return f"session:{h}:{path}"
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{path}"

def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request):
        # Forcer le fallback mémoire en DEV si demandé
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _session_key_from_request(request)
            store = getattr(request.app.state, "_rl_store", {})
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        # Respecter le flag global
        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return
        if getattr(FastAPILimiter, "redis", None) is None:
            return

        async def _identifier(req: Request) -> str:
            return _session_key_from_request(req)
        try:
            return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request)
        except HTTPException:
            raise
        except Exception:
            # Redis indisponible: pas de 429 en prod; en dev, activer LOCAL_RATE_LIMIT_FALLBACK=1
            logger.warning("utils.rate_limit limiter unavailable path=%s", request.url.path)
            return
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
    backend = "redis" if limiter_ready else None

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
    }

    if backend == "redis":
        redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
        if redis_url:
            p = urlparse(redis_url)
            info["redis"] = {
                "scheme": p.scheme,
                "host": p.hostname,
                "port": p.port,
            }

    return info
