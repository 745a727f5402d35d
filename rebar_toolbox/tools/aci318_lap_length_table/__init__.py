"""ACI 318-14 development and lap splice length table."""
from __future__ import annotations

from typing import Any

from .config import ConfigurationError, UnknownPreset, UnsupportedCodeEdition, resolve_config
from .models import EvaluationConfig, LengthTableRow
from .table import LapLengthTable, build_table, round_up_to


def __getattr__(name: str) -> Any:
    if name == "TOOL":
        from .tool import TOOL

        return TOOL
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "TOOL",
    "ConfigurationError",
    "EvaluationConfig",
    "LapLengthTable",
    "LengthTableRow",
    "UnknownPreset",
    "UnsupportedCodeEdition",
    "build_table",
    "resolve_config",
    "round_up_to",
]
