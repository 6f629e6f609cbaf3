"""Pydantic models shared by the agents, the stores and the orchestrator."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogKind = Literal["info", "agent", "success", "error", "warning", "system"]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Idea(BaseModel):
    """App idea produced by the scout; handed read-only to every builder."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    problem: str
    solution: str
    stack: str
    monetization: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class BuildArtifacts(BaseModel):
    """Raw outputs of the four parallel builders."""
    ui_code: str
    logic_code: str
    configs: str
    growth_plan: str

    @property
    def combined_code(self) -> str:
        return f"{self.ui_code}\n\n{self.logic_code}"


class ReviewResult(BaseModel):
    """Advisory QA verdict."""
    raw: str
    approved: bool = False


class ProjectRecord(BaseModel):
    """Unit of persistence; one per completed cycle."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    idea: str = ""
    code: str = ""
    configs: str = ""
    growth_plan: str = Field(default="", alias="growthPlan")
    stack: str = ""
    # Only set on rows read back from the store (epoch milliseconds)
    timestamp: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class OperationResult(BaseModel):
    """First entry of the store's ``result`` array."""
    model_config = ConfigDict(extra="allow")

    success: bool = True
    results: List[Dict[str, Any]] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)


class LogEvent(BaseModel):
    """Observation emitted to the caller-supplied sink."""
    message: str
    kind: LogKind = "info"
    timestamp: str = Field(default_factory=utc_now_iso)


class CycleResult(BaseModel):
    """Payload returned by the closer for a completed cycle."""
    status: Literal["COMPLETED"] = "COMPLETED"
    timestamp: str = Field(default_factory=utc_now_iso)
    project: ProjectRecord


class FactoryReport(BaseModel):
    """Summary returned when the cycle driver exits."""
    cycles_completed: int = 0
    reason: Literal["stopped", "failed", "max_cycles"]
    error: Optional[str] = None
