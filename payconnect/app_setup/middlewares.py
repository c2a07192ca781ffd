"""
Middlewares transverses de l’application.
- CORSMiddleware: la boutique (autre domaine) appelle le connecteur depuis le navigateur.
- TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from payconnect.config import CORS_ORIGINS, ALLOWED_HOSTS

def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
