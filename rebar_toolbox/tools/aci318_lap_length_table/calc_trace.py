"""
Audit trail for one lap length table run.

Each factor shared by the table is recorded as a CalcStep holding the code
clause, the equation, the equation with values substituted and the value
used downstream. The table itself is attached once all steps are recorded.
"""
from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CalcVariable(_Strict):
    symbol: str
    description: str
    value: float
    units: str = ""
    source: str  # input:<field> | step:<step_id>


class CodeReference(_Strict):
    type: Literal["code", "derived"] = "code"
    ref: str


class Rounding(_Strict):
    rule: Literal["none", "decimals"] = "none"
    decimals: int = 0


class CalcStep(_Strict):
    id: str
    section: str
    title: str
    output_symbol: str
    output_description: str
    equation: str
    substitution: str
    variables: List[CalcVariable]
    units: str
    value_unrounded: float
    rounding: Rounding
    value: float
    references: List[CodeReference]
    warnings: List[str] = Field(default_factory=list)


class TraceMeta(_Strict):
    tool_id: str
    tool_version: str
    timestamp: str
    units_system: Literal["US", "SI"]
    code_basis: str
    code_edition: str
    input_hash: str


class TraceInput(_Strict):
    id: str
    value: Union[bool, int, float, str]
    units: str = ""
    source: str  # user | preset:<name> | default
    notes: Optional[str] = None


class TraceAssumption(_Strict):
    id: str
    text: str


class TraceTable(_Strict):
    length_units: str
    area_units: str
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class TraceSummary(_Strict):
    key_outputs: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)


class CalcTrace(_Strict):
    meta: TraceMeta
    inputs: List[TraceInput] = Field(default_factory=list)
    assumptions: List[TraceAssumption] = Field(default_factory=list)
    steps: List[CalcStep] = Field(default_factory=list)
    lap_length_table: Optional[TraceTable] = None
    summary: TraceSummary = Field(default_factory=TraceSummary)

    @classmethod
    def new(cls, *, tool_id: str, tool_version: str, is_metric: bool, code_basis: str, code_edition: str, input_hash: str) -> "CalcTrace":
        return cls(meta=TraceMeta(
            tool_id=tool_id,
            tool_version=tool_version,
            timestamp=datetime.now().isoformat(timespec="seconds"),
            units_system="SI" if is_metric else "US",
            code_basis=code_basis,
            code_edition=code_edition,
            input_hash=input_hash,
        ))

    def add_input(self, id: str, value: Any, *, units: str = "", source: str = "default", notes: Optional[str] = None) -> None:
        self.inputs.append(TraceInput(id=id, value=value, units=units, source=source, notes=notes))

    def assume(self, id: str, text: str) -> None:
        self.assumptions.append(TraceAssumption(id=id, text=text))

    def warn(self, message: str) -> None:
        if message not in self.summary.warnings:
            self.summary.warnings.append(message)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def _fmt(value: float, units: str) -> str:
    if math.isnan(value) or math.isinf(value):
        text = str(value)
    else:
        text = f"{value:.12g}"
    return f"{text} {units}".strip()


def substitute(equation: str, variables: Sequence[CalcVariable]) -> str:
    """Replace symbols on the right of the first "=" with their values.

    One regex pass, longest symbol first, so an inserted number is never
    matched again and "fy" cannot clobber "fyt".
    """
    lhs, eq, rhs = equation.partition(" = ")
    if not eq:
        lhs, rhs = "", equation
    if not variables:
        return equation
    by_symbol = {v.symbol: v for v in variables}
    pattern = re.compile("|".join(re.escape(s) for s in sorted(by_symbol, key=len, reverse=True)))
    rhs = pattern.sub(lambda m: _fmt(by_symbol[m.group(0)].value, by_symbol[m.group(0)].units), rhs)
    return f"{lhs}{eq}{rhs}"


def compute_step(
    trace: CalcTrace,
    *,
    id: str,
    section: str,
    title: str,
    output_symbol: str,
    output_description: str,
    equation: str,
    variables: Sequence[Dict[str, Any]],
    compute_fn: Callable[[], float],
    units: str,
    references: Sequence[Dict[str, str]],
    decimals: Optional[int] = None,
    warnings: Optional[List[str]] = None,
) -> float:
    """
    Evaluate `compute_fn`, record it as a CalcStep and return the value the
    table uses. With `decimals` set the recorded value is rounded for
    display only; the unrounded value is still returned.
    """
    if not id or not section or not title:
        raise ValueError("compute_step requires non-empty id/section/title")
    if not references:
        raise ValueError(f"step {id!r} has no code reference")

    var_models = [CalcVariable(**v) for v in variables]
    value = float(compute_fn())
    rounding = Rounding(rule="decimals", decimals=decimals) if decimals is not None else Rounding()

    trace.steps.append(CalcStep(
        id=id,
        section=section,
        title=title,
        output_symbol=output_symbol,
        output_description=output_description,
        equation=equation,
        substitution=substitute(equation, var_models),
        variables=var_models,
        units=units,
        value_unrounded=value,
        rounding=rounding,
        value=round(value, decimals) if decimals is not None else value,
        references=[CodeReference(**r) for r in references],
        warnings=list(warnings or []),
    ))
    return value
