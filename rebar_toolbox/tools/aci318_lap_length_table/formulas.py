"""
ACI 318-14 / 318M-14 Chapter 25 development and splice length provisions.

Every function is a pure function of an EvaluationConfig and the bar
parameters passed in. Units follow `cfg.is_metric`: in/psi or mm/MPa.
"""
from __future__ import annotations

import math

from .models import Applicable, EvaluationConfig, NotApplicable, SpliceLength

SQRT_FC_CAP_METRIC = 8.3
SQRT_FC_CAP_IMPERIAL = 100.0

# Bars larger than these may not be lap spliced (25.5.1.1)
SPLICE_CUTOFF_METRIC = 36.0
SPLICE_CUTOFF_IMPERIAL = 1.41

# No. 36 / No. 11 and smaller for hooked ψc and ψr
HOOK_FACTOR_CUTOFF_METRIC = 35.81
HOOK_FACTOR_CUTOFF_IMPERIAL = 1.41

COMBINED_EPOXY_POSITION_MAX = 1.7
SPLICE_CLASS_B_FACTOR = 1.3


def calc_sqrt_fc(cfg: EvaluationConfig) -> float:
    """√f'c limited per ACI 318-14 25.4.1.4."""
    cap = SQRT_FC_CAP_METRIC if cfg.is_metric else SQRT_FC_CAP_IMPERIAL
    return min(cap, math.sqrt(cfg.fc))


# ---------------------------------------------------------------------------
# Modification factors, straight bars in tension (Table 25.4.2.4)
# ---------------------------------------------------------------------------

def calc_lambda_factor(cfg: EvaluationConfig) -> float:
    return 0.75 if cfg.lightweight_concrete else 1.0


def calc_epoxy_factor(cfg: EvaluationConfig) -> float:
    if cfg.epoxy_coated_rebar:
        return 1.2 if cfg.epoxy_cover_satisfied else 1.5
    return 1.0


def calc_size_factor(cfg: EvaluationConfig, db: float) -> float:
    """ψs; informational, the Table 25.4.2.2 coefficients already account for bar size."""
    threshold = 22.0 if cfg.is_metric else 0.875
    return 1.0 if db >= threshold else 0.8


def calc_position_factor(is_top: bool) -> float:
    return 1.3 if is_top else 1.0


def calc_combined_position_and_epoxy_factors(cfg: EvaluationConfig, is_top: bool) -> float:
    """ψt·ψe, which the code caps at 1.7."""
    return min(COMBINED_EPOXY_POSITION_MAX, calc_epoxy_factor(cfg) * calc_position_factor(is_top))


# ---------------------------------------------------------------------------
# Hooked bars in tension (Table 25.4.3.2)
# ---------------------------------------------------------------------------

def calc_hooked_lambda_factor(cfg: EvaluationConfig) -> float:
    return 0.75 if cfg.lightweight_concrete else 1.0


def calc_hooked_epoxy_factor(cfg: EvaluationConfig) -> float:
    return 1.2 if cfg.epoxy_coated_rebar else 1.0


def _hook_cutoff(cfg: EvaluationConfig) -> float:
    return HOOK_FACTOR_CUTOFF_METRIC if cfg.is_metric else HOOK_FACTOR_CUTOFF_IMPERIAL


def calc_hooked_cover_factor(cfg: EvaluationConfig, db: float) -> float:
    if cfg.hooked_cover_satisfied and db <= _hook_cutoff(cfg):
        return 0.7
    return 1.0


def calc_hooked_confinement_factor(cfg: EvaluationConfig, db: float) -> float:
    if cfg.hooked_confinement_satisfied and db <= _hook_cutoff(cfg):
        return 0.8
    return 1.0


# ---------------------------------------------------------------------------
# Bars in compression (Table 25.4.9.3)
# ---------------------------------------------------------------------------

def calc_compression_lambda_factor(cfg: EvaluationConfig) -> float:
    return 0.75 if cfg.lightweight_concrete else 1.0


def calc_compression_confinement_factor(cfg: EvaluationConfig) -> float:
    return 0.75 if cfg.compression_confinement_satisfied else 1.0


# ---------------------------------------------------------------------------
# Lengths
# ---------------------------------------------------------------------------

def development_length_coefficient(cfg: EvaluationConfig, db: float, meets_cover: bool) -> float:
    """
    Denominator coefficient of ACI 318-14 / 318M-14 Table 25.4.2.2.

    Cover/spacing condition met:      fy·ψtψe / (25 λ√f'c) db  (No. 6 and smaller), /20 otherwise
    Other cases:                  3·fy·ψtψe / (50 λ√f'c) db  (No. 6 and smaller), /40 otherwise
    The metric table uses 2.1 / 1.7 and 1.4 / 1.1.
    """
    small_bar = db <= (19.05 if cfg.is_metric else 0.75)
    if meets_cover:
        if small_bar:
            return 2.1 if cfg.is_metric else 25.0
        return 1.7 if cfg.is_metric else 20.0
    if small_bar:
        return 1.4 if cfg.is_metric else 50.0 / 3.0
    return 1.1 if cfg.is_metric else 40.0 / 3.0


def seismic_multiplier(cfg: EvaluationConfig) -> float:
    return cfg.seismic_increase_factor if cfg.include_seismic_increase else 1.0


def calc_development_length(cfg: EvaluationConfig, db: float, is_top: bool, meets_cover: bool) -> float:
    """Straight bar tension development length ℓd, ACI 318-14 Table 25.4.2.2."""
    k = development_length_coefficient(cfg, db, meets_cover)
    psi_te = calc_combined_position_and_epoxy_factors(cfg, is_top)
    ld = db * cfg.fy * psi_te / (k * calc_lambda_factor(cfg) * calc_sqrt_fc(cfg))
    return ld * seismic_multiplier(cfg)


def splice_cutoff(cfg: EvaluationConfig) -> float:
    return SPLICE_CUTOFF_METRIC if cfg.is_metric else SPLICE_CUTOFF_IMPERIAL


def calc_splice_length(cfg: EvaluationConfig, db: float, is_top: bool, meets_cover: bool) -> SpliceLength:
    """Class B tension lap splice ℓst = 1.3 ℓd, ACI 318-14 Table 25.5.2.1."""
    if db > splice_cutoff(cfg):
        return NotApplicable(f"Lap splices not permitted for db > {splice_cutoff(cfg)} {cfg.length_units} (25.5.1.1)")
    return Applicable(SPLICE_CLASS_B_FACTOR * calc_development_length(cfg, db, is_top, meets_cover))


def calc_hooked_development_length(cfg: EvaluationConfig, db: float) -> float:
    """
    Standard hook development length ℓdh, ACI 318-14 25.4.3.1:

        ℓdh = fy ψe ψc ψr / (50 λ √f'c) · db          (in, psi)
        ℓdh = 0.24 fy ψe ψc ψr / (λ √f'c) · db        (mm, MPa)

    not less than the larger of 8db and 6 in (150 mm).
    """
    factor = (1.0 / 0.24) if cfg.is_metric else 50.0
    floor = max(150.0 if cfg.is_metric else 6.0, 8.0 * db)
    psi_e = calc_hooked_epoxy_factor(cfg)
    psi_c = calc_hooked_cover_factor(cfg, db)
    psi_r = calc_hooked_confinement_factor(cfg, db)
    ldh = cfg.fy * db * psi_e * psi_c * psi_r / (factor * calc_hooked_lambda_factor(cfg) * calc_sqrt_fc(cfg))
    ldh *= seismic_multiplier(cfg)
    return max(floor, ldh)


def calc_compression_development_length(cfg: EvaluationConfig, db: float) -> float:
    """
    Compression development length ℓdc, ACI 318-14 25.4.9.2: the greater of
    fy ψr db / (50 λ √f'c) and 0.0003 fy ψr db (0.24 and 0.043 in 318M),
    not less than 8 in (200 mm).
    """
    f1 = (1.0 / 0.24) if cfg.is_metric else 50.0
    f2 = 0.043 if cfg.is_metric else 0.0003
    psi_r = calc_compression_confinement_factor(cfg)
    ldc = max(
        cfg.fy * psi_r * db / (f1 * calc_compression_lambda_factor(cfg) * calc_sqrt_fc(cfg)),
        f2 * cfg.fy * psi_r * db,
    )
    return max(ldc, 200.0 if cfg.is_metric else 8.0)


def calc_compression_splice_coefficient(cfg: EvaluationConfig) -> float:
    """Multiplier on db for compression lap splices, ACI 318-14 25.5.5.1."""
    if cfg.is_metric:
        return 0.071 * cfg.fy if cfg.fy <= 420 else 0.13 * cfg.fy - 24
    return 0.0005 * cfg.fy if cfg.fy <= 60000 else 0.0009 * cfg.fy - 24


def calc_compression_splice_increase_factor(cfg: EvaluationConfig) -> float:
    """One-third increase when f'c < 3000 psi (21 MPa), ACI 318-14 25.5.5.2."""
    return 1.33 if cfg.fc < (21 if cfg.is_metric else 3000) else 1.0


def calc_compression_splice_length(cfg: EvaluationConfig, db: float) -> SpliceLength:
    """Compression lap splice length ℓsc, ACI 318-14 25.5.5."""
    if db > splice_cutoff(cfg):
        return NotApplicable(f"Lap splices not permitted for db > {splice_cutoff(cfg)} {cfg.length_units} (25.5.1.1)")
    minimum = 300.0 if cfg.is_metric else 12.0
    lsc = max(calc_compression_splice_coefficient(cfg) * db, minimum)
    return Applicable(lsc * calc_compression_splice_increase_factor(cfg))
