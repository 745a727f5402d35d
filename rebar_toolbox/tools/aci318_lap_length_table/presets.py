"""
Built-in defaults and unit/material presets.

Both tables are read-only mappings populated once at import; catalogs are
tuples so nothing downstream can append to a shared preset.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

CODE_EDITIONS = ("318-14", "318-11")
DEFAULT_PRESET = "imperial"

GLOBAL_DEFAULTS: Mapping[str, Any] = MappingProxyType({
    "lightweight_concrete": False,
    "epoxy_coated_rebar": False,
    "epoxy_cover_satisfied": False,
    "hooked_cover_satisfied": False,
    "hooked_confinement_satisfied": False,
    "compression_confinement_satisfied": False,
    "code_edition": "318-14",
    "is_metric": False,
    "preset": DEFAULT_PRESET,
    "round_by": 1,
    "area_precision": 2,
    "include_seismic_increase": False,
    "seismic_increase_factor": 1.25,
})

# ASTM A615 inch-pound bar designations, nominal diameter in inches
_IMPERIAL_BARS = (
    ("#3", 0.375),
    ("#4", 0.500),
    ("#5", 0.625),
    ("#6", 0.750),
    ("#7", 0.875),
    ("#8", 1.000),
    ("#9", 1.128),
    ("#10", 1.270),
    ("#11", 1.410),
    ("#14", 1.693),
    ("#18", 2.257),
)

# ASTM A615M soft-metric designations, nominal diameter in mm
_SOFT_METRIC_BARS = (
    ("No.10", 9.52),
    ("No.13", 12.7),
    ("No.16", 15.8),
    ("No.19", 19.05),
    ("No.22", 22.225),
    ("No.25", 25.4),
    ("No.29", 28.65),
    ("No.32", 32.25),
    ("No.36", 35.81),
    ("No.43", 43.0),
    ("No.57", 57.33),
)

_HARD_METRIC_BARS = tuple((str(d), float(d)) for d in (8, 10, 12, 14, 16, 20, 25, 28, 32, 40, 50))

PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType({
    "imperial": MappingProxyType({
        "rebar_list": _IMPERIAL_BARS,
        "fy": 60000.0,
        "fc": 4000.0,
    }),
    "softMetric": MappingProxyType({
        "rebar_list": _SOFT_METRIC_BARS,
        "fy": 420.0,
        "fc": 30.0,
        "is_metric": True,
        "area_precision": 0,
    }),
    "hardMetric": MappingProxyType({
        "rebar_list": _HARD_METRIC_BARS,
        "fy": 420.0,
        "fc": 30.0,
        "is_metric": True,
        "area_precision": 0,
    }),
})
