"""Calc trace content for a lap length table run: inputs, assumptions and configuration-level factors."""
from __future__ import annotations

from typing import Any, Dict, Mapping

from . import formulas as f
from .calc_trace import CalcTrace, compute_step
from .config import normalize_keys
from .models import EvaluationConfig
from .presets import PRESETS

CODE_BASIS = "ACI 318-14 / ACI 318M-14 Chapter 25"


def _input_source(name: str, caller: Mapping[str, Any], cfg: EvaluationConfig) -> str:
    if name in caller:
        return "user"
    if name in PRESETS[cfg.preset]:
        return f"preset:{cfg.preset}"
    return "default"


def add_inputs(trace: CalcTrace, cfg: EvaluationConfig, raw_inputs: Mapping[str, Any]) -> None:
    caller = normalize_keys(raw_inputs)
    units = {
        "fc": cfg.stress_units,
        "fy": cfg.stress_units,
        "round_by": cfg.length_units,
        "rebar_list": cfg.length_units,
    }
    for name in EvaluationConfig.model_fields:
        value = getattr(cfg, name)
        if name == "rebar_list":
            value = ", ".join(f"{b.label} ({b.diameter:g})" for b in value)
        trace.add_input(name, value, units=units.get(name, ""), source=_input_source(name, caller, cfg))
    for name, value in (cfg.model_extra or {}).items():
        trace.add_input(name, str(value), source="user", notes="Not used by this tool")


def add_assumptions(trace: CalcTrace, cfg: EvaluationConfig) -> None:
    trace.assume("A1", "Straight bar development lengths use the simplified two-tier coefficients of Table 25.4.2.2; (cb + Ktr)/db is not evaluated.")
    trace.assume("A2", "Tension lap splices are reported as Class B (1.3 ℓd) per Table 25.5.2.1 and omitted for bars larger than No. 11 (No. 36).")
    trace.assume("A3", "Reported lengths are rounded up to the next multiple of the rounding increment; bar areas are rounded to the stated precision.")
    trace.assume("A4", "The 25.4.2.1 and 25.5.2.1 absolute minimums (12 in / 300 mm) are not applied to the tabulated ℓd and ℓst values.")
    if cfg.code_edition != "318-14":
        trace.assume("A5", f"Edition {cfg.code_edition} requested; lengths are computed with ACI 318-14 provisions.")
        trace.warn(f"{cfg.code_edition} requested but ACI 318-14 provisions were applied.")
    if cfg.include_seismic_increase:
        trace.assume("A6", f"Tension development and hook lengths are increased by {cfg.seismic_increase_factor:g} for seismic detailing.")


def record_config_steps(trace: CalcTrace, cfg: EvaluationConfig) -> Dict[str, float]:
    """Trace the factors shared by every bar in the table. Returns them keyed by step id."""
    stress = cfg.stress_units
    cap = f.SQRT_FC_CAP_METRIC if cfg.is_metric else f.SQRT_FC_CAP_IMPERIAL
    out: Dict[str, float] = {}

    out["sqrt_fc"] = compute_step(
        trace,
        id="sqrt_fc",
        section="Materials",
        title="Limit √f'c for development length calculations",
        output_symbol="√f'c",
        output_description="Capped square root of f'c",
        equation=f"√f'c = min(sqrt(f'c), {cap:g})",
        variables=[{"symbol": "f'c", "description": "Concrete compressive strength", "value": cfg.fc, "units": stress, "source": "input:fc"}],
        compute_fn=lambda: f.calc_sqrt_fc(cfg),
        units=f"{stress}^0.5",
        decimals=3,
        references=[{"type": "code", "ref": "ACI 318-14 25.4.1.4"}],
    )

    out["lambda"] = compute_step(
        trace,
        id="lambda",
        section="Modification factors",
        title="Lightweight concrete factor λ",
        output_symbol="λ",
        output_description="Lightweight concrete factor (straight, hooked and compression bars)",
        equation="λ = 0.75 if LW else 1.0",
        variables=[{"symbol": "LW", "description": "Lightweight concrete?", "value": float(cfg.lightweight_concrete), "units": "", "source": "input:lightweight_concrete"}],
        compute_fn=lambda: f.calc_lambda_factor(cfg),
        units="",
        references=[{"type": "code", "ref": "ACI 318-14 Table 25.4.2.4 (λ)"}, {"type": "code", "ref": "ACI 318-14 Table 25.4.3.2 (λ)"}],
    )

    out["psi_e"] = compute_step(
        trace,
        id="psi_e",
        section="Modification factors",
        title="Epoxy coating factor ψe (straight bars)",
        output_symbol="ψe",
        output_description="Epoxy factor; ψt·ψe is limited to 1.7",
        equation="ψe = 1.0 if not EP else (1.2 if COV else 1.5)",
        variables=[
            {"symbol": "EP", "description": "Epoxy-coated?", "value": float(cfg.epoxy_coated_rebar), "units": "", "source": "input:epoxy_coated_rebar"},
            {"symbol": "COV", "description": "Cover >= 3db and spacing >= 6db?", "value": float(cfg.epoxy_cover_satisfied), "units": "", "source": "input:epoxy_cover_satisfied"},
        ],
        compute_fn=lambda: f.calc_epoxy_factor(cfg),
        units="",
        references=[{"type": "code", "ref": "ACI 318-14 Table 25.4.2.4 (ψe)"}],
    )

    out["psi_te_top"] = compute_step(
        trace,
        id="psi_te_top",
        section="Modification factors",
        title="Combined casting position and epoxy factor, top bars",
        output_symbol="ψtψe",
        output_description="Product of ψt = 1.3 and ψe, not greater than 1.7",
        equation="ψtψe = min(1.7, 1.3 × ψe)",
        variables=[{"symbol": "ψe", "description": "Epoxy factor", "value": out["psi_e"], "units": "", "source": "step:psi_e"}],
        compute_fn=lambda: f.calc_combined_position_and_epoxy_factors(cfg, True),
        units="",
        references=[{"type": "code", "ref": "ACI 318-14 Table 25.4.2.4 (ψt, ψe)"}],
    )

    out["psi_e_hook"] = compute_step(
        trace,
        id="psi_e_hook",
        section="Modification factors",
        title="Epoxy coating factor ψe (hooked bars)",
        output_symbol="ψe,h",
        output_description="Hooked bar epoxy factor",
        equation="ψe,h = 1.2 if EP else 1.0",
        variables=[{"symbol": "EP", "description": "Epoxy-coated?", "value": float(cfg.epoxy_coated_rebar), "units": "", "source": "input:epoxy_coated_rebar"}],
        compute_fn=lambda: f.calc_hooked_epoxy_factor(cfg),
        units="",
        references=[{"type": "code", "ref": "ACI 318-14 Table 25.4.3.2 (ψe)"}],
    )

    out["psi_r_comp"] = compute_step(
        trace,
        id="psi_r_comp",
        section="Modification factors",
        title="Confining reinforcement factor ψr (compression bars)",
        output_symbol="ψr,c",
        output_description="Compression bar confinement factor",
        equation="ψr,c = 0.75 if CONF else 1.0",
        variables=[{"symbol": "CONF", "description": "Enclosed by spiral or ties?", "value": float(cfg.compression_confinement_satisfied), "units": "", "source": "input:compression_confinement_satisfied"}],
        compute_fn=lambda: f.calc_compression_confinement_factor(cfg),
        units="",
        references=[{"type": "code", "ref": "ACI 318-14 Table 25.4.9.3 (ψr)"}],
    )

    fy_break = 420 if cfg.is_metric else 60000
    coef_eq = "0.071 × fy if fy <= 420 else 0.13 × fy - 24" if cfg.is_metric else "0.0005 × fy if fy <= 60000 else 0.0009 × fy - 24"
    out["lsc_coef"] = compute_step(
        trace,
        id="lsc_coef",
        section="Compression lap splices",
        title="Compression lap splice coefficient",
        output_symbol="k_sc",
        output_description="ℓsc = k_sc × db before the minimum",
        equation=f"k_sc = {coef_eq}",
        variables=[{"symbol": "fy", "description": "Yield strength", "value": cfg.fy, "units": stress, "source": "input:fy"}],
        compute_fn=lambda: f.calc_compression_splice_coefficient(cfg),
        units="",
        references=[{"type": "code", "ref": "ACI 318-14 25.5.5.1"}],
        warnings=[f"fy above {fy_break} {stress}: upper branch of 25.5.5.1 governs"] if cfg.fy > fy_break else None,
    )

    fc_low = 21 if cfg.is_metric else 3000
    out["lsc_increase"] = compute_step(
        trace,
        id="lsc_increase",
        section="Compression lap splices",
        title="Low-strength concrete increase for compression splices",
        output_symbol="β_sc",
        output_description="Increase on ℓsc when f'c is below the code threshold",
        equation=f"β_sc = 1.33 if f'c < {fc_low} else 1.0",
        variables=[{"symbol": "f'c", "description": "Concrete compressive strength", "value": cfg.fc, "units": stress, "source": "input:fc"}],
        compute_fn=lambda: f.calc_compression_splice_increase_factor(cfg),
        units="",
        references=[{"type": "code", "ref": "ACI 318-14 25.5.5.2"}],
    )

    out["seismic"] = compute_step(
        trace,
        id="seismic",
        section="Modification factors",
        title="Seismic increase on tension development and hook lengths",
        output_symbol="β_E",
        output_description="Uniform multiplier on ℓd and ℓdh",
        equation="β_E = F if SEIS else 1.0",
        variables=[
            {"symbol": "SEIS", "description": "Seismic increase enabled?", "value": float(cfg.include_seismic_increase), "units": "", "source": "input:include_seismic_increase"},
            {"symbol": "F", "description": "Seismic increase factor", "value": cfg.seismic_increase_factor, "units": "", "source": "input:seismic_increase_factor"},
        ],
        compute_fn=lambda: f.seismic_multiplier(cfg),
        units="",
        references=[{"type": "derived", "ref": "Project seismic detailing requirement"}],
    )
    return out
