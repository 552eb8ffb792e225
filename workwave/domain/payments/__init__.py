from .router import router
from .webhooks import router as webhook_router

__all__ = ["router", "webhook_router"]
