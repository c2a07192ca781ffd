"""
Erreurs du flux de paiement.
- ProviderValidationError: saisie refusée par le SDK du fournisseur (avant tout appel backend).
- ContextError: aucune session/panier résolvable pour la requête.
- NotFoundError: ressource absente côté backend commerce.
- BackendRejectionError: réponse non-2xx du backend (conflit de version, création refusée...).
L'annulation du wallet n'est pas une erreur: c'est un état terminal silencieux.
"""
from typing import Any, Dict, List, Optional


class PaymentError(Exception):
    status_code = 500
    code = "PaymentError"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ProviderValidationError(PaymentError):
    status_code = 400
    code = "ProviderValidationError"

    def __init__(self, message: str = "", *, provider_code: Optional[str] = None):
        super().__init__(message)
        self.provider_code = provider_code


class ContextError(PaymentError):
    status_code = 400
    code = "ContextError"


class NotFoundError(PaymentError):
    status_code = 404
    code = "NotFoundError"


class BackendRejectionError(PaymentError):
    status_code = 502
    code = "BackendRejectionError"

    def __init__(self, message: str = "", *, errors: Optional[List[Dict[str, Any]]] = None, backend_status: Optional[int] = None):
        self.errors = list(errors or [])
        self.backend_status = backend_status
        super().__init__(self._with_details(message, self.errors))

    @staticmethod
    def _with_details(message: str, errors: List[Dict[str, Any]]) -> str:
        # "<message>: <sous-erreur 1>, <sous-erreur 2>"
        details = [str(e.get("message") or e.get("code") or "") for e in errors if isinstance(e, dict)]
        details = [d for d in details if d]
        if details:
            return f"{message}: {', '.join(details)}"
        return message

    @classmethod
    def from_response(cls, response, fallback: str = "Backend request failed") -> "BackendRejectionError":
        """
        Construit l'erreur depuis une réponse HTTP du backend.
        - Lit body.message et body.errors[*] si le corps est du JSON.
        - Sinon, retombe sur le texte brut de la réponse.
        """
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or (response.text or "").strip() or fallback
        return cls(message, errors=body.get("errors") or [], backend_status=response.status_code)
