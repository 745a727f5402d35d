from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, confloat, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .presets import CODE_EDITIONS, DEFAULT_PRESET, GLOBAL_DEFAULTS, PRESETS

CodeEdition = Literal["318-14", "318-11"]


class ConfigurationError(Exception):
    """
    Raised when a lap length table configuration cannot be constructed.

    Propagates out of model validation as-is rather than as a ValidationError.
    """


class UnknownPreset(ConfigurationError):
    pass


class UnsupportedCodeEdition(ConfigurationError):
    pass


class BarSize(NamedTuple):
    label: str
    diameter: float


class EvaluationConfig(BaseModel):
    """
    Fully resolved inputs for one lap length table.

    Lengths, diameters and strengths are in inches/psi when `is_metric` is
    false and mm/MPa otherwise; the flag also selects the 318M constants.
    Field names are accepted in snake_case or in the camelCase used by the
    external interface (`isMetric`, `rebarList`, ...). Unrecognized keys are
    kept in `model_extra` and otherwise ignored.

    However the model is built, fields are layered global defaults, then the
    named preset, then the caller's values.
    """
    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )

    preset: str = Field(DEFAULT_PRESET, description="Preset that seeded the catalog and materials")
    code_edition: CodeEdition = Field(GLOBAL_DEFAULTS["code_edition"], description="ACI 318 edition")
    is_metric: bool = Field(False, description="Use ACI 318M (mm, MPa) constants")

    # always supplied by the preset layer
    fc: confloat(gt=0) = Field(description="Specified concrete compressive strength f'c", json_schema_extra={"units": "psi | MPa"})
    fy: confloat(gt=0) = Field(description="Reinforcement yield strength fy", json_schema_extra={"units": "psi | MPa"})
    rebar_list: Tuple[BarSize, ...] = Field(min_length=1, description="Ordered (label, diameter) catalog; defines row order")

    # Detailing conditions
    lightweight_concrete: bool = Field(False, description="Lightweight concrete (λ = 0.75)")
    epoxy_coated_rebar: bool = Field(False, description="Epoxy-coated or zinc and epoxy dual-coated bars")
    epoxy_cover_satisfied: bool = Field(False, description="Epoxy bars with cover >= 3db and clear spacing >= 6db (ψe = 1.2)")
    hooked_cover_satisfied: bool = Field(False, description="Hooked bar side/extension cover per Table 25.4.3.2 (ψc = 0.7)")
    hooked_confinement_satisfied: bool = Field(False, description="Hooked bar enclosed by ties/stirrups per Table 25.4.3.2 (ψr = 0.8)")
    compression_confinement_satisfied: bool = Field(False, description="Compression bar enclosed by spiral or ties per Table 25.4.9.3 (ψr = 0.75)")

    include_seismic_increase: bool = Field(False, description="Apply a uniform increase to tension development and hook lengths")
    seismic_increase_factor: confloat(gt=0) = Field(GLOBAL_DEFAULTS["seismic_increase_factor"], description="Multiplier used when include_seismic_increase is set")

    round_by: confloat(gt=0) = Field(GLOBAL_DEFAULTS["round_by"], description="Reported lengths round up to the next multiple of this value")
    area_precision: int = Field(GLOBAL_DEFAULTS["area_precision"], ge=0, description="Decimal places kept for bar area")

    @field_validator("rebar_list")
    @classmethod
    def _positive_diameters(cls, v: Tuple[BarSize, ...]) -> Tuple[BarSize, ...]:
        for bar in v:
            if bar.diameter <= 0:
                raise ValueError(f"Bar {bar.label!r} has non-positive diameter {bar.diameter}")
        return v

    @model_validator(mode="before")
    @classmethod
    def _layer_preset(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        caller = normalize_keys(data)

        preset = caller.get("preset", DEFAULT_PRESET)
        if not isinstance(preset, str) or preset not in PRESETS:
            raise UnknownPreset(f"Preset undefined: {preset!r}")
        if "code_edition" in caller and caller["code_edition"] not in CODE_EDITIONS:
            raise UnsupportedCodeEdition(f"Code edition not recognized or supported: {caller['code_edition']!r}")

        return {**GLOBAL_DEFAULTS, **PRESETS[preset], **caller, "preset": preset}

    @property
    def length_units(self) -> str:
        return "mm" if self.is_metric else "in"

    @property
    def stress_units(self) -> str:
        return "MPa" if self.is_metric else "psi"


def normalize_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Map camelCase aliases onto field names; unknown keys pass through untouched."""
    aliases = {
        field.alias: name
        for name, field in EvaluationConfig.model_fields.items()
        if field.alias and field.alias != name
    }
    return {aliases.get(k, k): v for k, v in raw.items()}


@dataclass(frozen=True)
class Applicable:
    length: float


@dataclass(frozen=True)
class NotApplicable:
    reason: str


SpliceLength = Union[Applicable, NotApplicable]


# ---------------------------------------------------------------------------
# Table rows
# ---------------------------------------------------------------------------

class _Row(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CoverPair(_Row):
    meets_cover: float
    does_not_meet_cover: float


class SpliceCoverPair(_Row):
    # None where the code does not permit a lap splice
    meets_cover: Optional[float]
    does_not_meet_cover: Optional[float]


class TensionTopResult(_Row):
    ldt: CoverPair
    lbt: SpliceCoverPair


class TensionOtherResult(_Row):
    ld: CoverPair
    lb: SpliceCoverPair


class CompressionResult(_Row):
    ldc: float
    lbc: Optional[float]


class TensionHookResult(_Row):
    ldh: float


class LengthTableRow(_Row):
    bar_size: str
    db: float
    area: float
    tension_top: TensionTopResult
    tension_other: TensionOtherResult
    compression: CompressionResult
    tension_hook: TensionHookResult
