"""
Registre central des routers (API PayPal/opérations, health).
"""
from fastapi import FastAPI
from payconnect.paypal import views as paypal_views
from payconnect.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API
    app.include_router(paypal_views.router)
    # Health & monitoring
    app.include_router(health_router)
