"""
API Routes Package

This module exports the FastAPI routers for the junction simulator.
"""

from .simulation_routes import router as simulation_router

__all__ = [
    "simulation_router",
]
