"""Guidance step models consumed by the UI."""

from typing import Literal

from pydantic import BaseModel, Field


class TroubleshootingTip(BaseModel):
    """A known issue and how to get past it."""

    issue: str
    solution: str
    prevention_tip: str | None = None


class GuidanceStep(BaseModel):
    """One human-readable instruction block."""

    id: str
    title: str
    description: str
    instructions: list[str] = Field(min_length=1)
    expected_outcome: str
    troubleshooting: list[TroubleshootingTip] = Field(default_factory=list)
    estimated_minutes: int = Field(gt=0)
    difficulty: Literal["easy", "medium", "hard"] = "easy"
    prerequisites: list[str] = Field(default_factory=list)
