from .router import client_router, router

__all__ = ["router", "client_router"]
