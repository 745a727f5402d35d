from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd
from loguru import logger

from . import formulas as f
from .config import resolve_config
from .models import (
    Applicable,
    CompressionResult,
    CoverPair,
    EvaluationConfig,
    LengthTableRow,
    SpliceCoverPair,
    SpliceLength,
    TensionHookResult,
    TensionOtherResult,
    TensionTopResult,
)


def round_up_to(value: float, by: float) -> float:
    """
    Round up to the next multiple of `by` (5 -> next multiple of 5). Never rounds down.

    A quotient within float noise of a whole number counts as that whole
    number, so round_up_to(3 * 0.1, 0.1) stays at 0.3 instead of jumping to 0.4.
    """
    steps = value / by
    nearest = round(steps)
    if math.isclose(steps, nearest, rel_tol=1e-9, abs_tol=1e-9):
        return nearest * by
    return math.ceil(steps) * by


def _round_splice(result: SpliceLength, by: float) -> Optional[float]:
    if isinstance(result, Applicable):
        return round_up_to(result.length, by)
    return None


def calc_area(cfg: EvaluationConfig, db: float) -> float:
    return round(math.pi * db * db / 4.0, cfg.area_precision)


def build_row(cfg: EvaluationConfig, label: str, db: float) -> LengthTableRow:
    by = cfg.round_by

    def ld(is_top: bool) -> CoverPair:
        return CoverPair(
            meets_cover=round_up_to(f.calc_development_length(cfg, db, is_top, True), by),
            does_not_meet_cover=round_up_to(f.calc_development_length(cfg, db, is_top, False), by),
        )

    def lb(is_top: bool) -> SpliceCoverPair:
        return SpliceCoverPair(
            meets_cover=_round_splice(f.calc_splice_length(cfg, db, is_top, True), by),
            does_not_meet_cover=_round_splice(f.calc_splice_length(cfg, db, is_top, False), by),
        )

    return LengthTableRow(
        bar_size=label,
        db=db,
        area=calc_area(cfg, db),
        tension_top=TensionTopResult(ldt=ld(True), lbt=lb(True)),
        tension_other=TensionOtherResult(ld=ld(False), lb=lb(False)),
        compression=CompressionResult(
            ldc=round_up_to(f.calc_compression_development_length(cfg, db), by),
            lbc=_round_splice(f.calc_compression_splice_length(cfg, db), by),
        ),
        tension_hook=TensionHookResult(
            ldh=round_up_to(f.calc_hooked_development_length(cfg, db), by),
        ),
    )


def build_table(cfg: EvaluationConfig) -> List[LengthTableRow]:
    """One row per catalog entry, in catalog order."""
    rows = [build_row(cfg, bar.label, bar.diameter) for bar in cfg.rebar_list]
    logger.debug(f"Built lap length table: {len(rows)} rows, preset={cfg.preset}, round_by={cfg.round_by}")
    return rows


# Flattened column order used by the CSV/xlsx exports and the CLI printout
TABLE_COLUMNS = [
    ("bar_size", "Bar"),
    ("db", "db"),
    ("area", "Area"),
    ("tension_top.ldt.meets_cover", "Top Ld (cover met)"),
    ("tension_top.ldt.does_not_meet_cover", "Top Ld (other)"),
    ("tension_top.lbt.meets_cover", "Top Lb (cover met)"),
    ("tension_top.lbt.does_not_meet_cover", "Top Lb (other)"),
    ("tension_other.ld.meets_cover", "Ld (cover met)"),
    ("tension_other.ld.does_not_meet_cover", "Ld (other)"),
    ("tension_other.lb.meets_cover", "Lb (cover met)"),
    ("tension_other.lb.does_not_meet_cover", "Lb (other)"),
    ("compression.ldc", "Ldc"),
    ("compression.lbc", "Lbc"),
    ("tension_hook.ldh", "Ldh"),
]


def flatten_row(d: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Nested row dict -> {"tension_top.ldt.meets_cover": ..., ...}."""
    out: Dict[str, Any] = {}
    for k, v in d.items():
        key = f"{prefix}{k}"
        if isinstance(v, dict):
            out.update(flatten_row(v, prefix=f"{key}."))
        else:
            out[key] = v
    return out


def table_to_dataframe(rows: Sequence[Union[LengthTableRow, Dict[str, Any]]], labels: bool = False) -> pd.DataFrame:
    """One record per bar in TABLE_COLUMNS order; absent splice lengths become NaN."""
    records = [flatten_row(r.model_dump() if isinstance(r, LengthTableRow) else r) for r in rows]
    df = pd.DataFrame(records, columns=[c for c, _ in TABLE_COLUMNS])
    if labels:
        df = df.rename(columns=dict(TABLE_COLUMNS))
    return df


class LapLengthTable:
    """
    Development and splice length table for one configuration.

    >>> LapLengthTable(preset="softMetric", fc=35).get_table()[0].bar_size
    'No.10'
    """

    def __init__(self, inputs: Optional[Dict[str, Any]] = None, **overrides: Any) -> None:
        self.config = resolve_config(inputs, **overrides)

    def round_up_to(self, value: float, by: Optional[float] = None) -> float:
        return round_up_to(value, self.config.round_by if by is None else by)

    def get_table(self) -> List[LengthTableRow]:
        return build_table(self.config)

    def to_dataframe(self, labels: bool = False) -> pd.DataFrame:
        return table_to_dataframe(self.get_table(), labels=labels)
