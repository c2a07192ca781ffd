"""
Clients HTTP (httpx) vers le backend commerce.
- get_commerce_client(): API projet (paniers, paiements, commandes), authentifiée en OAuth client_credentials.
- get_session_client(): API des sessions, même jeton.
Les instances sont créées à la demande puis réutilisées (une par processus).
Le jeton est mis en cache jusqu'à son expiration (expires_in) et renouvelé une fois sur 401.
"""
from typing import Any, Dict, Optional
import logging
import threading
import time
import httpx

from payconnect.config import (
    COMMERCE_API_URL,
    COMMERCE_AUTH_URL,
    COMMERCE_SESSION_URL,
    COMMERCE_PROJECT_KEY,
    COMMERCE_CLIENT_ID,
    COMMERCE_CLIENT_SECRET,
    COMMERCE_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

# Marge avant expiration: le jeton est renouvelé un peu avant d'être refusé
TOKEN_EXPIRY_MARGIN_SECONDS = 60

_commerce_client: Optional[httpx.Client] = None
_session_client: Optional[httpx.Client] = None
_clients_lock = threading.Lock()


def fetch_access_token() -> Dict[str, Any]:
    """
    Obtient un jeton OAuth (grant client_credentials) auprès du serveur d'auth commerce.
    Retourne la réponse du serveur (access_token, expires_in).
    Lève RuntimeError si la configuration est incomplète ou si le serveur refuse.
    """
    if not (COMMERCE_AUTH_URL and COMMERCE_CLIENT_ID and COMMERCE_CLIENT_SECRET):
        raise RuntimeError("COMMERCE_AUTH_URL / COMMERCE_CLIENT_ID / COMMERCE_CLIENT_SECRET manquants")
    resp = httpx.post(
        f"{COMMERCE_AUTH_URL}/oauth/token",
        data={"grant_type": "client_credentials"},
        auth=(COMMERCE_CLIENT_ID, COMMERCE_CLIENT_SECRET),
        timeout=COMMERCE_TIMEOUT_SECONDS,
    )
    if resp.status_code >= 400:
        raise RuntimeError(f"OAuth commerce refusé ({resp.status_code}): {resp.text}")
    return resp.json()


class CommerceAuth(httpx.Auth):
    """
    Bearer OAuth avec cache du jeton.
    - Jeton demandé au premier appel, réutilisé jusqu'à expires_in - marge
    - Réponse 401: jeton invalidé, renouvelé, requête rejouée une seule fois
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._expires_at: Optional[float] = None

    def _valid_token(self) -> Optional[str]:
        if self._token is None:
            return None
        if self._expires_at is not None and time.monotonic() >= self._expires_at:
            return None
        return self._token

    def _refresh(self) -> str:
        payload = fetch_access_token()
        self._token = payload["access_token"]
        expires_in = payload.get("expires_in")
        self._expires_at = (
            time.monotonic() + max(float(expires_in) - TOKEN_EXPIRY_MARGIN_SECONDS, 0.0)
            if expires_in is not None
            else None
        )
        logger.info("infra.commerce_client token refreshed expires_in=%s", expires_in)
        return self._token

    def get_token(self) -> str:
        with self._lock:
            return self._valid_token() or self._refresh()

    def invalidate(self, stale_token: str) -> None:
        with self._lock:
            # Un autre thread a pu renouveler entre-temps
            if self._token == stale_token:
                self._token = None
                self._expires_at = None

    def auth_flow(self, request: httpx.Request):
        token = self.get_token()
        request.headers["Authorization"] = f"Bearer {token}"
        response = yield request
        if response.status_code == 401:
            logger.warning("infra.commerce_client 401, token renewal url=%s", request.url)
            self.invalidate(token)
            request.headers["Authorization"] = f"Bearer {self.get_token()}"
            yield request


def _build_client(base_url: str) -> httpx.Client:
    return httpx.Client(
        base_url=base_url,
        auth=CommerceAuth(),
        headers={"Accept": "application/json"},
        timeout=COMMERCE_TIMEOUT_SECONDS,
    )


def get_commerce_client() -> httpx.Client:
    global _commerce_client
    if not COMMERCE_API_URL or not COMMERCE_PROJECT_KEY:
        raise RuntimeError("COMMERCE_API_URL / COMMERCE_PROJECT_KEY manquants pour get_commerce_client()")
    if _commerce_client is None:
        with _clients_lock:
            if _commerce_client is None:
                _commerce_client = _build_client(f"{COMMERCE_API_URL}/{COMMERCE_PROJECT_KEY}")
    return _commerce_client


def get_session_client() -> httpx.Client:
    global _session_client
    if not COMMERCE_SESSION_URL or not COMMERCE_PROJECT_KEY:
        raise RuntimeError("COMMERCE_SESSION_URL / COMMERCE_PROJECT_KEY manquants pour get_session_client()")
    if _session_client is None:
        with _clients_lock:
            if _session_client is None:
                _session_client = _build_client(f"{COMMERCE_SESSION_URL}/{COMMERCE_PROJECT_KEY}")
    return _session_client


def close_clients() -> None:
    """Ferme les clients ouverts (appelé à l'arrêt de l'application)."""
    global _commerce_client, _session_client
    with _clients_lock:
        for client in (_commerce_client, _session_client):
            if client is not None:
                try:
                    client.close()
                except Exception:
                    logger.exception("infra.commerce_client.close_clients failed")
        _commerce_client = None
        _session_client = None
