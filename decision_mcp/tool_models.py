from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from decision_engine.config import MIN_ITERATIONS, NUM_RUNS, TOOL_MAX_ITERATIONS

DecisionModelName = Literal["auto", "hiring", "additive"]


class ErrorDetail(BaseModel):
    code: str
    message: str


class VariableSpec(BaseModel):
    base: float
    min: float
    max: float
    label: Optional[str] = None

    @model_validator(mode="after")
    def _check_range(self) -> "VariableSpec":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class AnalyzeDecisionRequest(BaseModel):
    decision_name: str
    variables: dict[str, VariableSpec] = Field(min_length=1)
    model: DecisionModelName = "auto"


class AssumptionInput(BaseModel):
    id: Optional[str] = None
    name: str
    mean: float
    std: float = Field(ge=0)
    weight: float = Field(ge=0)
    direction: Literal["positive", "negative"]
    enabled: bool


class RunDecisionMcRequest(BaseModel):
    iterations: int = Field(default=NUM_RUNS, ge=MIN_ITERATIONS, le=TOOL_MAX_ITERATIONS)
    threshold: float = 0.0
    assumptions: list[AssumptionInput] = Field(min_length=1)
    seed: Optional[int] = None


class SimulationSummary(BaseModel):
    threshold: float
    enabledCount: int


class RunDecisionMcOutput(BaseModel):
    iterations: int
    probabilitySuccess: float
    label: Literal["LOW", "MEDIUM", "HIGH"]
    summary: SimulationSummary


class PercentileOutput(BaseModel):
    mean: float
    median: float
    p10: float
    p90: float
    prob_positive: float


class BucketOutput(BaseModel):
    value: float
    label: str
    emoji: str


class SensitivityRowOutput(BaseModel):
    variable: str
    base: float
    min: float
    max: float
    outcome_at_low: float
    outcome_at_high: float
    impact_percent: float


class AnalyzeDecisionOutput(BaseModel):
    decision_name: str
    model: str
    results: PercentileOutput
    buckets: dict[str, BucketOutput]
    sensitivity: list[SensitivityRowOutput]
