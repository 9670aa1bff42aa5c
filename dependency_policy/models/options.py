"""Options controlling how a policy check is reported."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class Verbosity(Enum):
    """Output verbosity levels."""

    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"


class CheckOptions(BaseModel):
    """Options for a policy check run."""

    model_config = {"extra": "forbid"}

    format: Literal["terminal", "markdown", "json"] = Field(
        default="terminal",
        description="Output format for the report",
    )
    verbosity: Verbosity = Field(
        default=Verbosity.NORMAL,
        description="Output verbosity level (quiet, normal, verbose)",
    )
