# src/api/models.py - v1
"""API-level models: PredictionRequest, PredictionResult."""

from __future__ import annotations

from pydantic import BaseModel, Field

from enpensent.core.models import PatternMatch, TemporalSignature
from enpensent.fusion.models import HybridPrediction
from enpensent.matching.matcher import MatchOptions, MatchSummary


class PredictionRequest(BaseModel):
    """Input for facade.predict()."""

    domain: str
    signature: TemporalSignature
    current_position: int = Field(ge=0)
    total_expected_length: int = Field(ge=0)
    current_state: str = ""
    options: MatchOptions | None = None
    request_id: str | None = None


class PredictionResult(BaseModel):
    """Return value of facade.predict()."""

    request_id: str
    domain: str
    pool_size: int = 0
    pool_degraded: bool = False
    matches: list[PatternMatch] = Field(default_factory=list)
    summary: MatchSummary
    prediction: HybridPrediction
