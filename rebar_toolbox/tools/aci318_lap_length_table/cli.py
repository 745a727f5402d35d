from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional

import pandas as pd
from loguru import logger
from pydantic import ValidationError

from rebar_toolbox.core.logging import configure_logging
from rebar_toolbox.core.settings import load_settings, save_settings

from .config import ConfigurationError, resolve_config
from .paths import TOOL_ID
from .presets import CODE_EDITIONS, PRESETS
from .table import build_table, table_to_dataframe

# cli dest -> config field, for options that only override when given
_FLAG_FIELDS = {
    "preset": "preset",
    "code_edition": "code_edition",
    "fc": "fc",
    "fy": "fy",
    "metric": "is_metric",
    "lightweight": "lightweight_concrete",
    "epoxy": "epoxy_coated_rebar",
    "epoxy_cover": "epoxy_cover_satisfied",
    "hooked_cover": "hooked_cover_satisfied",
    "hooked_confinement": "hooked_confinement_satisfied",
    "compression_confinement": "compression_confinement_satisfied",
    "seismic": "include_seismic_increase",
    "seismic_factor": "seismic_increase_factor",
    "round_by": "round_by",
    "area_precision": "area_precision",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rebar-laptable",
        description="Tabulate rebar development and lap splice lengths per ACI 318-14 / 318M-14.",
    )
    p.add_argument("--preset", choices=sorted(PRESETS), default=None)
    p.add_argument("--code-edition", choices=CODE_EDITIONS, default=None)
    p.add_argument("--fc", type=float, default=None, help="f'c in psi (MPa when metric)")
    p.add_argument("--fy", type=float, default=None, help="fy in psi (MPa when metric)")
    p.add_argument("--metric", action="store_true", default=None, help="use ACI 318M constants (mm, MPa)")

    g = p.add_argument_group("detailing conditions")
    g.add_argument("--lightweight", action="store_true", default=None)
    g.add_argument("--epoxy", action="store_true", default=None)
    g.add_argument("--epoxy-cover", action="store_true", default=None, help="epoxy bars with cover >= 3db, spacing >= 6db")
    g.add_argument("--hooked-cover", action="store_true", default=None)
    g.add_argument("--hooked-confinement", action="store_true", default=None)
    g.add_argument("--compression-confinement", action="store_true", default=None)
    g.add_argument("--seismic", action="store_true", default=None)
    g.add_argument("--seismic-factor", type=float, default=None)

    p.add_argument("--round-by", type=float, default=None)
    p.add_argument("--area-precision", type=int, default=None)
    p.add_argument("--export", action="store_true", help="write the calc package (html, json, xlsx, csv)")
    p.add_argument("--save", action="store_true", help="store these inputs as the defaults for later runs")
    p.add_argument("--log-level", default="WARNING")
    return p


def collect_inputs(args: argparse.Namespace, settings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Stored tool settings first, then whatever was given on the command line."""
    stored = (settings or {}).get(TOOL_ID, {})
    if not isinstance(stored, dict):
        logger.warning(f"Ignoring settings entry {TOOL_ID!r}: not an object")
        stored = {}
    inputs: Dict[str, Any] = dict(stored)
    for dest, field in _FLAG_FIELDS.items():
        value = getattr(args, dest)
        if value is not None:
            inputs[field] = value
    return inputs


def _print_table(df: pd.DataFrame) -> None:
    print(df.astype(object).where(df.notna(), "NP").to_string(index=False))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = load_settings()
    inputs = collect_inputs(args, settings)
    try:
        cfg = resolve_config(inputs)
    except (ConfigurationError, ValidationError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if args.save:
        save_settings({**settings, TOOL_ID: inputs})
        logger.info(f"Saved {TOOL_ID} settings: {sorted(inputs)}")

    if args.export:
        from .tool import TOOL

        res = TOOL.run_batch(inputs)
        if not res["ok"]:
            logger.error(f"Calc package failed: {res['error']}")
            return 1
        _print_table(table_to_dataframe(res["rows"], labels=True))
        print(f"\nCalc package: {res['run_dir']}")
        return 0

    _print_table(table_to_dataframe(build_table(cfg), labels=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
