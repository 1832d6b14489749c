"""
Record models owned by the metrics, error and experiment components.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorRecord(BaseModel):
    """A captured exception with its contextual metadata."""
    message: str = Field(description="Error message")
    stack: Optional[str] = Field(default=None, description="Formatted traceback, if available")
    timestamp: int = Field(description="Milliseconds since epoch")
    user_id: Optional[int] = Field(default=None, alias="userId", description="User id snapshot at capture")
    context: Dict[str, Any] = Field(default_factory=dict, description="Caller context plus url and user agent")

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass
class MetricSummary:
    """Aggregate over one metric's rolling window."""
    avg: float
    min: float
    max: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "avg": self.avg,
            "min": self.min,
            "max": self.max,
            "count": self.count
        }


@dataclass
class ExperimentAssignment:
    """Session-local enrollment state for one experiment."""
    variant: str
    enrolled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"variant": self.variant, "enrolled": self.enrolled}
