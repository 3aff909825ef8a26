"""
API Routes Module

This module contains all API endpoint implementations organized by function:
- readings.py: Reading ingestion endpoints
- buildings.py: Building registry endpoints
- scenarios.py: Drift scenario listing and preview
- simulate.py: Simulator run endpoint

All routers are combined in main.py to create the complete API.
"""

from .readings import router as readings_router
from .buildings import router as buildings_router
from .scenarios import router as scenarios_router
from .simulate import router as simulate_router

__all__ = [
    "readings_router",
    "buildings_router",
    "scenarios_router",
    "simulate_router",
]
