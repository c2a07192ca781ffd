"""
Gestionnaires d’exceptions enregistrés par la factory.
- HTTPException: corps JSON FastAPI standard {"detail": ...}.
- PaymentError: corps {"status": "ERROR", "code", "detail"} avec le code HTTP porté par l'erreur.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from payconnect.errors import PaymentError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(PaymentError)
    async def payment_error_handler(request: Request, exc: PaymentError):
        """
        Le SDK PayPal a déjà capturé les fonds quand la capture arrive ici:
        un échec est journalisé en warning pour traitement opérationnel.
        """
        logger.warning(
            "app_setup.exceptions payment error path=%s code=%s detail=%s",
            request.url.path, exc.code, exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "ERROR", "code": exc.code, "detail": exc.message},
        )
