"""
Scoring and Optimizer Policies

The fit-score weights and the optimizer knobs are configuration, not
constants. Each has a small set of named presets; a request picks one
preset per kind and it applies to the whole candidate batch.
"""

from typing import Dict
from pydantic import BaseModel, Field, model_validator

from .exceptions import UnknownPresetError


class ScoringWeights(BaseModel):
    """Weights of the three fit sub-scores. Must sum to 1.0."""
    name: str = "custom"
    competency: float = Field(ge=0.0, le=1.0)
    interest: float = Field(ge=0.0, le=1.0)
    progress: float = Field(ge=0.0, le=1.0)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_sum(self):
        total = self.competency + self.interest + self.progress
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"scoring weights must sum to 1.0, got {total:.4f}")
        return self


class OptimizerPolicy(BaseModel):
    """Knobs of the greedy set optimizer."""
    name: str = "custom"
    priority_limit: int = Field(default=3, ge=0)  # graduation picks in phase 1
    diversity_cap: int = Field(default=3, ge=1)   # courses per subdomain in phase 2
    credit_floor: float = Field(default=36.0, ge=0.0)
    new_skill_cap: int = Field(default=5, ge=1)
    threshold_base: float = Field(default=0.5, ge=0.0, le=1.0)

    class Config:
        frozen = True


# =============================================================================
# PRESETS
# =============================================================================

BALANCED = ScoringWeights(name="balanced", competency=0.4, interest=0.3, progress=0.3)

# Recent-success signal dominates; used for elective exploration and when a
# prior term is supplied to seed interests.
INTEREST_LED = ScoringWeights(name="interest_led", competency=0.2, interest=0.6, progress=0.2)

DIVERSE = OptimizerPolicy(name="diverse", diversity_cap=3)
RELAXED = OptimizerPolicy(name="relaxed", diversity_cap=10)

SCORING_PRESETS: Dict[str, ScoringWeights] = {
    BALANCED.name: BALANCED,
    INTEREST_LED.name: INTEREST_LED,
}

OPTIMIZER_PRESETS: Dict[str, OptimizerPolicy] = {
    DIVERSE.name: DIVERSE,
    RELAXED.name: RELAXED,
}

DEFAULT_SCORING_PRESET = BALANCED.name
DEFAULT_OPTIMIZER_PRESET = DIVERSE.name


def get_scoring_weights(name: str) -> ScoringWeights:
    try:
        return SCORING_PRESETS[name]
    except KeyError:
        raise UnknownPresetError(
            f"unknown scoring preset {name!r}; expected one of {sorted(SCORING_PRESETS)}"
        ) from None


def get_optimizer_policy(name: str) -> OptimizerPolicy:
    try:
        return OPTIMIZER_PRESETS[name]
    except KeyError:
        raise UnknownPresetError(
            f"unknown optimizer preset {name!r}; expected one of {sorted(OPTIMIZER_PRESETS)}"
        ) from None
