"""Pydantic schemas for the API."""

from firerisk_api.schemas.analysis import (
    AnalysisRequest,
    AnalysisResponse,
    DeploymentResponse,
    FireArea,
    FireDangerRequest,
    FireDangerResponse,
    RiskCellSchema,
)
from firerisk_api.schemas.simulation import SimulationCreate, SimulationResponse

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "DeploymentResponse",
    "FireArea",
    "FireDangerRequest",
    "FireDangerResponse",
    "RiskCellSchema",
    "SimulationCreate",
    "SimulationResponse",
]
