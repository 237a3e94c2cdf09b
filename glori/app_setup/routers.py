"""
Registre central des routers (API v1 panier, health).
"""
from fastapi import FastAPI
from glori.cart.views import router as cart_router
from glori.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(cart_router)
    # Health & monitoring
    app.include_router(health_router)
