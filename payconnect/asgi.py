"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, uvicorn (ou gunicorn + uvicorn workers) importe `payconnect.asgi:app`.
- Toute la configuration FastAPI est centralisée dans payconnect.app_setup.factory.
"""

from payconnect.app_setup.factory import create_app

app = create_app()
