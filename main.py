"""
Cadence Behavioral Authentication API

FastAPI application exposing the engine operations:
- POST /users/{user_id}/score → ConfidenceAssessment
- POST /users/{user_id}/profile → ProfileSummary
- POST /users/{user_id}/assess → Assessment (score + update, atomic)
- GET /users/{user_id}/profile → ProfileSummary
- GET /users/{user_id}/history → List[ConfidenceRecord]
- GET /users/{user_id}/learning-phase → {"learning_phase": bool}

The caller authenticates requests and enforces the recommended action.
"""

from contextlib import asynccontextmanager
import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, status

from cadence import BehavioralEngine, InputContractError
from cadence.schemas.inputs import TelemetryPayload
from cadence.schemas.outputs import (
    Assessment,
    ConfidenceAssessment,
    ConfidenceRecord,
    ProfileSummary,
)
from persistence.store import InMemoryProfileStore, ProfileStore


load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# =============================================================================
# Application State
# =============================================================================

class AppState:
    """Application state container."""
    engine: Optional[BehavioralEngine] = None


state = AppState()


def build_store() -> ProfileStore:
    """Select the profile store from PROFILE_STORE (memory | redis)."""
    backend = os.getenv("PROFILE_STORE", "memory").lower()
    if backend == "redis":
        from persistence.redis_store import RedisProfileStore
        return RedisProfileStore()
    if backend != "memory":
        logger.warning(f"Unknown PROFILE_STORE '{backend}', using in-memory store")
    return InMemoryProfileStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Cadence API...")
    state.engine = BehavioralEngine(store=build_store())
    logger.info("Cadence engine ready")

    yield

    logger.info("Shutting down Cadence API...")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Cadence",
    description="Continuous behavioral authentication engine",
    version=API_VERSION,
    lifespan=lifespan,
)


def _contract_error(e: InputContractError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=str(e)
    )


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": API_VERSION}


# =============================================================================
# Scoring Endpoints
# =============================================================================

@app.post("/users/{user_id}/score", response_model=ConfidenceAssessment)
def score(user_id: str, payload: TelemetryPayload):
    """
    Score telemetry against the current baseline.

    - Records the result in the user's history
    - Never modifies the baseline
    """
    try:
        return state.engine.score(user_id, payload)
    except InputContractError as e:
        raise _contract_error(e)
    except Exception as e:
        logger.error(f"Score error for {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error during scoring"
        )


@app.post("/users/{user_id}/assess", response_model=Assessment)
def assess(user_id: str, payload: TelemetryPayload):
    """
    Continuous authentication check.

    Scores against the current baseline, then absorbs the telemetry,
    as one atomic unit per user.
    """
    try:
        return state.engine.assess(user_id, payload)
    except InputContractError as e:
        raise _contract_error(e)
    except Exception as e:
        logger.error(f"Assess error for {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error during assessment"
        )


# =============================================================================
# Profile Endpoints
# =============================================================================

@app.post("/users/{user_id}/profile", response_model=ProfileSummary)
def update_profile(user_id: str, payload: TelemetryPayload):
    """Absorb telemetry into the user's baseline."""
    try:
        return state.engine.update_profile(user_id, payload)
    except InputContractError as e:
        raise _contract_error(e)
    except Exception as e:
        logger.error(f"Profile update error for {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error updating profile"
        )


@app.get("/users/{user_id}/profile", response_model=ProfileSummary)
def get_profile(user_id: str):
    """Current baseline summary."""
    try:
        summary = state.engine.get_profile(user_id)
    except InputContractError as e:
        raise _contract_error(e)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No behavioral profile for {user_id}"
        )
    return summary


@app.get("/users/{user_id}/history", response_model=List[ConfidenceRecord])
def get_history(user_id: str):
    """Scoring history, oldest first."""
    try:
        return state.engine.get_history(user_id)
    except InputContractError as e:
        raise _contract_error(e)


@app.get("/users/{user_id}/learning-phase")
def learning_phase(user_id: str):
    """Whether the user's baseline is still bootstrapping."""
    try:
        return {"learning_phase": state.engine.is_learning_phase(user_id)}
    except InputContractError as e:
        raise _contract_error(e)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
