from .auth import router as auth_router
from .misc import router as misc_router
from .protected import router as protected_router

__all__ = [
    "auth_router",
    "misc_router",
    "protected_router",
]
