# src/routers/__init__.py
from .ballots.main import router as ballots_router
from .masterlist.main import router as masterlist_router
__all__ = [
    "ballots_router",
    "masterlist_router",
           ]
