"""View kinds and the classifier's response schema."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ViewType(str, Enum):
    """Layouts the classifier can choose between."""

    PLAIN = "Plain"
    KEY_VALUE = "KeyValue"
    JSON = "Json"
    EXTERNAL_TOOL = "ExternalTool"


@dataclass(frozen=True)
class ViewKind:
    """A built-in view, or an external tool identified by name."""

    type: ViewType
    tool: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type is ViewType.EXTERNAL_TOOL and not self.tool:
            raise ValueError("ExternalTool view requires a tool name")
        if self.type is not ViewType.EXTERNAL_TOOL and self.tool is not None:
            raise ValueError(f"{self.type.value} view does not take a tool name")

    @classmethod
    def external(cls, tool: str) -> "ViewKind":
        return cls(ViewType.EXTERNAL_TOOL, tool)

    @property
    def is_external(self) -> bool:
        return self.type is ViewType.EXTERNAL_TOOL

    @property
    def name(self) -> str:
        if self.is_external:
            return f"External: {self.tool}"
        return self.type.value


PLAIN = ViewKind(ViewType.PLAIN)
KEY_VALUE = ViewKind(ViewType.KEY_VALUE)
JSON = ViewKind(ViewType.JSON)


@dataclass(frozen=True)
class AnalysisResult:
    view: ViewKind
    summary: str


class ModelResponse(BaseModel):
    """JSON object the model is asked to answer with."""

    view: str = Field(..., description="Plain, KeyValue, Json or ExternalTool")
    tool: Optional[str] = Field(
        default=None, description="External tool name when view is ExternalTool"
    )


__all__ = [
    "AnalysisResult",
    "JSON",
    "KEY_VALUE",
    "ModelResponse",
    "PLAIN",
    "ViewKind",
    "ViewType",
]
