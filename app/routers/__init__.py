# Routers package
from . import appointments_router
from . import assistant_router
from . import doctors_router

__all__ = [
    "appointments_router",
    "assistant_router",
    "doctors_router",
]
