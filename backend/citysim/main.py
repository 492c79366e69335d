"""
City Junction Simulator
Main FastAPI Application Entry Point

This is the main entry point for the backend server.
It loads configuration, initializes the simulation engine and starts the
periodic step scheduler.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events - startup and shutdown"""
    # Startup
    print("=" * 60)
    print("[STARTUP] City Junction Simulator")
    print("=" * 60)

    from citysim.config import load_settings
    settings = load_settings()
    print("[OK] Configuration loaded")

    from citysim.simulation import init_simulation_engine, init_step_scheduler
    engine = init_simulation_engine(
        junctions=settings.junctions,
        seed=settings.seed,
        history_capacity=settings.history_capacity,
        mode=settings.mode,
        smart_mode=settings.smart_mode
    )
    print("[OK] Simulation engine initialized")

    scheduler = init_step_scheduler(engine, settings.step_interval_ms)
    await scheduler.start()

    print("=" * 60)
    print(f"[SERVER] Ready on port {settings.port}")
    print("=" * 60)

    yield

    # Shutdown
    print("[SHUTDOWN] Shutting down...")
    await scheduler.stop()
    print("[SHUTDOWN] Complete")


# Create FastAPI application
app = FastAPI(
    title="City Junction Simulator API",
    description="Live traffic conditions, history and signal control for city junctions",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ============================================
# Include API Routers
# ============================================

from citysim.api import simulation_router

# Simulation routes: /api/state, /api/history, /api/override, /api/mode, ...
app.include_router(simulation_router)


# ============================================
# Root Endpoints
# ============================================

@app.get("/", tags=["root"])
async def root():
    """Root endpoint - API information"""
    return {
        "name": "City Junction Simulator",
        "version": "1.0.0",
        "status": "operational",
        "documentation": "/docs",
        "endpoints": {
            "state": "/api/state",
            "history": "/api/history",
            "config": "/api/config",
            "step": "/api/step",
            "override": "/api/override",
            "mode": "/api/mode",
            "smart_mode": "/api/smart-mode"
        }
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "updatedAt": int(time.time() * 1000)
    }


# ============================================
# Entry Point
# ============================================

if __name__ == "__main__":
    import uvicorn
    from citysim.config import load_settings

    uvicorn.run(
        "citysim.main:app",
        host="0.0.0.0",
        port=load_settings().port,
        log_level="info"
    )
