from __future__ import annotations

from typing import Any, Mapping, Optional

from loguru import logger

from .models import (
    ConfigurationError,
    EvaluationConfig,
    UnknownPreset,
    UnsupportedCodeEdition,
    normalize_keys,
)

__all__ = [
    "ConfigurationError",
    "UnknownPreset",
    "UnsupportedCodeEdition",
    "normalize_keys",
    "resolve_config",
]


def resolve_config(inputs: Optional[Mapping[str, Any]] = None, **overrides: Any) -> EvaluationConfig:
    """
    Build an EvaluationConfig from global defaults, the selected preset and
    caller fields, later sources winning field by field. A caller-supplied
    `rebar_list` replaces the preset catalog as a whole.

    Raises UnknownPreset / UnsupportedCodeEdition for a bad preset or edition,
    pydantic.ValidationError for out-of-range values.
    """
    caller = {**(inputs or {}), **overrides}
    logger.debug(f"Resolving lap length config overrides={sorted(normalize_keys(caller))}")

    cfg = EvaluationConfig.model_validate(caller)
    if cfg.code_edition != "318-14":
        logger.warning(f"Code edition {cfg.code_edition} selected; ACI 318-14 provisions are applied")
    return cfg
