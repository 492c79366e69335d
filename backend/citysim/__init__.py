"""
City Junction Simulator
Backend Application Package

Live model of traffic conditions at a small set of road junctions:
sensor drift, priority lane selection, history snapshots and operator
controls, served over a FastAPI backend.
"""

__version__ = "1.0.0"
