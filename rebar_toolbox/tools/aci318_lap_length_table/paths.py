from __future__ import annotations

import hashlib
import json
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from rebar_toolbox.core.paths import user_data_dir

TOOL_ID = "aci318_lap_length_table"


def create_run_dir(tool_id: str = TOOL_ID, input_hash: Optional[str] = None) -> Path:
    """Create a fresh calc package directory.

    Location:
      <user data dir>/<tool_id>/runs/YYYYMMDD_HHMMSS_<short_hash>/

    The suffix mixes the input hash with a time/pid seed so repeated runs of
    the same inputs never collide.
    """
    root = user_data_dir() / tool_id / "runs"
    root.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    seed = f"{ts}:{os.getpid()}:{time.time_ns()}"
    rand = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:8]
    short = f"{input_hash[:6]}{rand[:2]}" if input_hash else rand

    run_dir = root / f"{ts}_{short}"
    run_dir.mkdir(parents=True, exist_ok=False)
    return run_dir


def _normalize(o: Any) -> Any:
    if isinstance(o, dict):
        return {str(k): _normalize(o[k]) for k in sorted(o.keys(), key=str)}
    if isinstance(o, (list, tuple)):
        return [_normalize(x) for x in o]
    if isinstance(o, float):
        # stable float repr across platforms
        return float(f"{o:.12g}")
    return o


def compute_input_hash(inputs: Dict[str, Any]) -> str:
    """Deterministic hash of normalized, key-sorted inputs."""
    payload = json.dumps(_normalize(inputs), sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]
