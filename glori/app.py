# module glori.app
from fastapi import FastAPI

from glori.app_setup.lifespan import lifespan
from glori.app_setup.middlewares import register_basic_middlewares, register_security_middleware
from glori.app_setup.exception_handlers import register_exception_handlers
from glori.app_setup.routers import register_routers

def create_app() -> FastAPI:
    """
    Crée et configure l'instance FastAPI.
    Étapes:
      1) register_basic_middlewares: CORS, TrustedHost.
      2) register_security_middleware: en-têtes de sécurité + CSRF (sessions cookie).
      3) register_exception_handlers: erreurs du panier -> JSON avec code HTTP dédié.
      4) register_routers: API panier et health.
    """
    app = FastAPI(title="Glori Cart API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app

# App globale
app = create_app()
