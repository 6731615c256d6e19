from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _ResultModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ErrorInfo(_ResultModel):
    type: str
    message: str
    details: dict[str, Any] | None = None


class CommandMeta(_ResultModel):
    duration_ms: int = Field(..., alias="durationMs")


class CommandResult(_ResultModel):
    ok: bool
    command: str
    data: Any | None = None
    warnings: list[str] = Field(default_factory=list)
    meta: CommandMeta
    error: ErrorInfo | None = None
