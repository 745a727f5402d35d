from __future__ import annotations

import traceback
from typing import Any, Dict, List, Optional

from loguru import logger

from rebar_toolbox.core.tool_base import ToolMeta

from .calc_steps import CODE_BASIS, add_assumptions, add_inputs, record_config_steps
from .calc_trace import CalcTrace, TraceTable
from .config import resolve_config
from .exports import export_all
from .logging_utils import get_run_logger, remove_run_logger_sink
from .models import EvaluationConfig, LengthTableRow
from .paths import TOOL_ID, compute_input_hash, create_run_dir
from .table import build_table


def _summary_text(cfg: EvaluationConfig, rows: List[LengthTableRow]) -> str:
    lu = cfg.length_units
    su = cfg.stress_units
    largest = rows[-1] if rows else None
    lines = [
        f"Preset: {cfg.preset}  |  Code edition: {cfg.code_edition}",
        f"f'c = {cfg.fc:g} {su}  |  fy = {cfg.fy:g} {su}",
        f"Bars tabulated: {len(rows)}  |  Lengths rounded up to {cfg.round_by:g} {lu}",
    ]
    if largest is not None:
        lb = largest.tension_other.lb.meets_cover
        lines.append(
            f"Last bar {largest.bar_size}: ℓd = {largest.tension_other.ld.meets_cover:g} {lu}, "
            f"ℓst = {'NP' if lb is None else f'{lb:g} {lu}'}, ℓdh = {largest.tension_hook.ldh:g} {lu}"
        )
    if cfg.include_seismic_increase:
        lines.append(f"Seismic increase ×{cfg.seismic_increase_factor:g} applied to ℓd and ℓdh")
    return "\n".join(lines)


class LapLengthTableTool:
    """Rebar development and lap splice length table.

    - run(): table only, no files written.
    - run_batch(): table plus the full calc package (report, trace, xlsx, csv).
    """

    meta = ToolMeta(
        id=TOOL_ID,
        name="ACI 318 Lap Length Table",
        category="Concrete",
        version="1.0.0",
        description="Development, hook and lap splice lengths for a bar catalog per ACI 318-14 / 318M-14 Chapter 25.",
    )

    InputModel = EvaluationConfig

    def default_inputs(self) -> dict:
        return resolve_config().model_dump(mode="json")

    def run(self, inputs: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        cfg = resolve_config(inputs)
        rows = build_table(cfg)
        return {
            "ok": True,
            "units": {"length": cfg.length_units, "area": f"{cfg.length_units}^2"},
            "rows": [r.model_dump() for r in rows],
        }

    def run_batch(self, inputs: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run the table and write the calc package.

        Invalid configurations raise before a run directory is created.
        """
        raw = dict(inputs or {})
        cfg = resolve_config(raw)
        inputs_norm = cfg.model_dump(mode="json")
        input_hash = compute_input_hash(inputs_norm)
        run_dir = create_run_dir(self.meta.id, input_hash)
        log, sink_id = get_run_logger(run_dir, self.meta.id, input_hash)

        try:
            with logger.contextualize(tool_id=self.meta.id, run_dir=str(run_dir)):
                log.info("Starting lap length table batch run")
                log.info(f"Inputs (resolved): {inputs_norm}")

                trace = CalcTrace.new(
                    tool_id=self.meta.id,
                    tool_version=self.meta.version,
                    is_metric=cfg.is_metric,
                    code_basis=CODE_BASIS,
                    code_edition=cfg.code_edition,
                    input_hash=input_hash,
                )
                add_inputs(trace, cfg, raw)
                add_assumptions(trace, cfg)
                record_config_steps(trace, cfg)

                rows = build_table(cfg)
                row_dicts = [r.model_dump() for r in rows]
                units = {"length": cfg.length_units, "area": f"{cfg.length_units}^2"}
                trace.lap_length_table = TraceTable(length_units=units["length"], area_units=units["area"], rows=row_dicts)

                not_permitted = [r.bar_size for r in rows if r.tension_other.lb.meets_cover is None]
                trace.summary.key_outputs = {
                    "bars": len(rows),
                    "length_units": cfg.length_units,
                    "splice_not_permitted": not_permitted,
                }
                if not_permitted:
                    log.info(f"Lap splices not permitted for: {', '.join(not_permitted)}")

                results: Dict[str, Any] = {
                    "ok": True,
                    "run_dir": str(run_dir),
                    "input_hash": input_hash,
                    "units": units,
                    "summary_text": _summary_text(cfg, rows),
                    "rows": row_dicts,
                }

                out_paths = export_all(trace, results, run_dir)
                results["outputs"] = {k: str(v) for k, v in out_paths.items()}

                log.info("Batch run complete")
                return results

        except Exception as e:
            log.exception("Batch run failed")
            return {
                "ok": False,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "error": str(e),
                "traceback": traceback.format_exc(),
            }

        finally:
            remove_run_logger_sink(sink_id)


TOOL = LapLengthTableTool()
