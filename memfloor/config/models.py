"""Pydantic models for memfloor configuration."""

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class ReportingUnit(str, Enum):
    """Granularity at which limits are reported."""

    BYTE = "B"
    KILOBYTE = "K"
    MEGABYTE = "M"

    @property
    def size(self) -> int:
        """Number of bytes in one unit."""
        return {
            ReportingUnit.BYTE: 1,
            ReportingUnit.KILOBYTE: 1024,
            ReportingUnit.MEGABYTE: 1024 * 1024,
        }[self]

    @classmethod
    def parse(cls, value: str) -> "ReportingUnit":
        """Parse a unit letter, case-insensitively.

        Raises:
            ValueError: If value is not B, K or M.
        """
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(f"unit must be B, K or M, not {value}") from None


class ProbeConfig(BaseModel):
    """Search behaviour configuration."""

    unit: ReportingUnit = ReportingUnit.BYTE
    capture_stdin: bool = False
    passthrough_output: bool = False
    verbose: bool = False
    shortcut: bool = Field(
        default=True,
        description="Jump the first candidate to 32 TiB on 64-bit limit ranges",
    )

    @field_validator("unit", mode="before")
    @classmethod
    def parse_unit(cls, v: Any) -> Any:
        """Accept lower-case unit letters."""
        if isinstance(v, str):
            return ReportingUnit.parse(v)
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: Literal["json", "text"] = "text"


class MemfloorConfig(BaseModel):
    """Complete memfloor configuration."""

    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tmpdir: Path | None = Field(
        default=None,
        description="Directory for the captured stdin file (defaults to $TMPDIR)",
    )
