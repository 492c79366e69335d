"""
Simulation Routes - Junction simulation query and control endpoints

Endpoints:
- GET /api/state - Current junctions, metrics, mode and smart flag
- GET /api/history - Recent snapshots (limit 1-120, default 20)
- GET /api/config - Current mode, smart flag and available modes
- POST /api/step - Advance the simulation one period
- POST /api/override - Pin a junction's green light to an approach
- POST /api/mode - Switch traffic mode
- POST /api/smart-mode - Toggle adaptive optimisation
"""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

from citysim.exceptions import InvalidArgumentError, NotFoundError
from citysim.simulation import get_simulation_engine
from citysim.simulation.engine import DEFAULT_HISTORY_LIMIT
from citysim.simulation.history import HISTORY_CAPACITY

router = APIRouter(prefix="/api", tags=["simulation"])


# ============================================
# Request Models
# ============================================

class OverrideRequest(BaseModel):
    """Request body for a manual signal override"""
    id: str = Field(description="Junction ID")
    approach: str = Field(description="Approach to hold green")
    durationSeconds: Optional[float] = Field(
        default=None,
        description="Override length in seconds (default 90)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": "junction-1",
                "approach": "north",
                "durationSeconds": 90
            }
        }


class ModeRequest(BaseModel):
    """Request body for switching traffic mode"""
    mode: Optional[str] = Field(
        default=None,
        description="normal, rush_hour or emergency"
    )


class SmartModeRequest(BaseModel):
    """Request body for toggling smart mode (value is coerced to bool)"""
    enabled: Any = False


def clamp_history_limit(limit: Optional[int]) -> int:
    """Missing or zero limit means the default; otherwise clamp to 1-120"""
    return max(1, min(HISTORY_CAPACITY, limit or DEFAULT_HISTORY_LIMIT))


# ============================================
# Query Endpoints
# ============================================

@router.get("/state", response_model=Dict[str, Any])
async def get_state():
    """
    Get current simulation state

    Returns all junctions with readings, city metrics, mode and smart flag.
    """
    return get_simulation_engine().get_state()


@router.get("/history", response_model=Dict[str, Any])
async def get_history(limit: Optional[int] = Query(default=None)):
    """
    Get recent snapshots in chronological order
    """
    engine = get_simulation_engine()
    return {"history": engine.get_history(clamp_history_limit(limit))}


@router.get("/config", response_model=Dict[str, Any])
async def get_config():
    """Get current mode, smart flag and available modes"""
    return get_simulation_engine().get_config()


# ============================================
# Control Endpoints
# ============================================

@router.post("/step", response_model=Dict[str, Any])
async def step_simulation():
    """
    Advance the simulation one period immediately

    Returns the state after the step.
    """
    engine = get_simulation_engine()
    engine.step()
    return engine.get_state()


@router.post("/override", response_model=Dict[str, Any])
async def override_signal(request: OverrideRequest):
    """
    Manually pin a junction's green light

    Automatic priority selection is suspended for the junction until the
    override expires.
    """
    engine = get_simulation_engine()

    try:
        override = engine.override_signal(
            request.id,
            request.approach,
            request.durationSeconds
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return {"override": override.to_dict()}


@router.post("/mode", response_model=Dict[str, Any])
async def set_mode(request: ModeRequest):
    """Switch traffic mode (normal, rush_hour, emergency)"""
    engine = get_simulation_engine()

    try:
        result = engine.set_mode(request.mode)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return {"mode": result["mode"]}


@router.post("/smart-mode", response_model=Dict[str, Any])
async def set_smart_mode(request: SmartModeRequest):
    """Enable or disable adaptive signal optimisation"""
    return get_simulation_engine().set_smart_mode(request.enabled)
