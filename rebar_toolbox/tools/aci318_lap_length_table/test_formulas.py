from __future__ import annotations

import math

import pytest

from . import formulas as f
from .config import resolve_config
from .models import Applicable, NotApplicable
from .table import round_up_to


def _ru(value: float) -> float:
    return round_up_to(value, 1)


def test_round_up_to() -> None:
    assert round_up_to(20.4, 1) == 21
    assert round_up_to(20.0, 1) == 20
    assert round_up_to(22, 5) == 25
    assert round_up_to(21.7, 10) == 30
    assert round_up_to(30, 5) == 30


@pytest.mark.parametrize("by", [1, 5, 10, 25, 0.1, 0.125, 0.5, 2.5])
def test_round_up_to_lands_on_next_multiple(by) -> None:
    for i in range(200):
        for value in (i * by, i * by + 0.3 * by, 0.37 * i * by + 0.001):
            got = round_up_to(value, by)
            assert got >= value or math.isclose(got, value, rel_tol=1e-9)
            assert got < value + by
            assert math.isclose(got / by, round(got / by), abs_tol=1e-9)


def test_round_up_to_ignores_float_noise() -> None:
    assert round_up_to(3 * 0.1, 0.1) == pytest.approx(0.3)
    assert round_up_to(0.7 + 0.1, 0.1) == pytest.approx(0.8)
    assert round_up_to(0.31, 0.1) == pytest.approx(0.4)


@pytest.mark.parametrize(
    "inputs, expected",
    [
        ({"fc": 4000}, 63.2),
        ({"fc": 6000}, 77.5),
        ({"fc": 30, "is_metric": True}, 5.5),
        ({"fc": 50, "is_metric": True}, 7.1),
    ],
)
def test_sqrt_fc(inputs, expected) -> None:
    assert f.calc_sqrt_fc(resolve_config(inputs)) == pytest.approx(expected, abs=0.05)


def test_sqrt_fc_is_capped() -> None:
    assert f.calc_sqrt_fc(resolve_config(fc=12000)) == 100
    assert f.calc_sqrt_fc(resolve_config(fc=82, isMetric=True)) == 8.3


def test_lambda_factors() -> None:
    normal = resolve_config(lightweightConcrete=False)
    light = resolve_config(lightweightConcrete=True)
    for fn in (f.calc_lambda_factor, f.calc_hooked_lambda_factor, f.calc_compression_lambda_factor):
        assert fn(normal) == 1.0
        assert fn(light) == 0.75


@pytest.mark.parametrize(
    "coated, cover, expected",
    [(False, False, 1.0), (True, False, 1.5), (True, True, 1.2), (False, True, 1.0)],
)
def test_epoxy_factor(coated, cover, expected) -> None:
    cfg = resolve_config(epoxyCoatedRebar=coated, epoxyCoverSatisfied=cover)
    assert f.calc_epoxy_factor(cfg) == expected


def test_size_factor() -> None:
    cfg = resolve_config(isMetric=False)
    assert f.calc_size_factor(cfg, 0.5) == 0.8
    assert f.calc_size_factor(cfg, 0.75) == 0.8
    assert f.calc_size_factor(cfg, 0.875) == 1.0

    cfg = resolve_config(isMetric=True)
    assert f.calc_size_factor(cfg, 10) == 0.8
    assert f.calc_size_factor(cfg, 16) == 0.8
    assert f.calc_size_factor(cfg, 22) == 1.0


def test_position_factor() -> None:
    assert f.calc_position_factor(True) == 1.3
    assert f.calc_position_factor(False) == 1.0


def test_combined_position_and_epoxy_factors() -> None:
    cfg = resolve_config(epoxyCoatedRebar=False)
    assert f.calc_combined_position_and_epoxy_factors(cfg, False) == 1.0
    assert f.calc_combined_position_and_epoxy_factors(cfg, True) == 1.3

    cfg = resolve_config(epoxyCoatedRebar=True, epoxyCoverSatisfied=False)
    assert f.calc_combined_position_and_epoxy_factors(cfg, False) == 1.5
    # 1.3 x 1.5 is limited to 1.7
    assert f.calc_combined_position_and_epoxy_factors(cfg, True) == 1.7

    cfg = resolve_config(epoxyCoatedRebar=True, epoxyCoverSatisfied=True)
    assert f.calc_combined_position_and_epoxy_factors(cfg, False) == 1.2
    assert f.calc_combined_position_and_epoxy_factors(cfg, True) == pytest.approx(1.56)


def test_hooked_epoxy_factor() -> None:
    assert f.calc_hooked_epoxy_factor(resolve_config(epoxyCoatedRebar=False)) == 1.0
    assert f.calc_hooked_epoxy_factor(resolve_config(epoxyCoatedRebar=True)) == 1.2


def test_hooked_cover_and_confinement_factors_stop_at_no_11() -> None:
    cfg = resolve_config(hookedCoverSatisfied=True, hookedConfinementSatisfied=True)
    assert f.calc_hooked_cover_factor(cfg, 1.41) == 0.7
    assert f.calc_hooked_confinement_factor(cfg, 1.41) == 0.8
    assert f.calc_hooked_cover_factor(cfg, 1.693) == 1.0
    assert f.calc_hooked_confinement_factor(cfg, 1.693) == 1.0

    off = resolve_config()
    assert f.calc_hooked_cover_factor(off, 0.5) == 1.0
    assert f.calc_hooked_confinement_factor(off, 0.5) == 1.0


def test_compression_confinement_factor() -> None:
    assert f.calc_compression_confinement_factor(resolve_config(compressionConfinementSatisfied=True)) == 0.75
    assert f.calc_compression_confinement_factor(resolve_config(compressionConfinementSatisfied=False)) == 1.0


# (db, is_top) -> rounded ℓd with the cover/spacing condition met
_LD_CASES = [(0.5, False), (0.5, True), (1.0, False), (1.0, True), (1.693, False), (1.693, True)]


@pytest.mark.parametrize(
    "inputs, expected",
    [
        ({"fc": 4000}, [19, 25, 48, 62, 81, 105]),
        ({"fc": 8000}, [14, 18, 34, 44, 57, 74]),
        ({"fc": 8000, "fy": 80000}, [18, 24, 45, 59, 76, 99]),
        ({"fc": 4000, "lightweightConcrete": True}, [26, 33, 64, 83, 108, 140]),
        ({"fc": 4000, "epoxyCoatedRebar": True, "epoxyCoverSatisfied": False}, [29, 33, 72, 81, 121, 137]),
        ({"fc": 4000, "epoxyCoatedRebar": True, "epoxyCoverSatisfied": True}, [23, 30, 57, 74, 97, 126]),
    ],
)
def test_tension_development_length(inputs, expected) -> None:
    cfg = resolve_config(inputs)
    got = [_ru(f.calc_development_length(cfg, db, is_top, True)) for db, is_top in _LD_CASES]
    assert got == expected


def test_development_length_other_cases_is_longer() -> None:
    cfg = resolve_config(fc=4000)
    # 3/50 vs 1/25 for No. 6 and smaller
    met = f.calc_development_length(cfg, 0.5, False, True)
    other = f.calc_development_length(cfg, 0.5, False, False)
    assert other == pytest.approx(met * 1.5)


def test_development_length_coefficient_threshold() -> None:
    imperial = resolve_config()
    assert f.development_length_coefficient(imperial, 0.75, True) == 25.0
    assert f.development_length_coefficient(imperial, 0.875, True) == 20.0
    metric = resolve_config(preset="softMetric")
    assert f.development_length_coefficient(metric, 19.05, True) == 2.1
    assert f.development_length_coefficient(metric, 22.225, False) == 1.1


def test_seismic_increase() -> None:
    base = resolve_config(fc=4000)
    seis = resolve_config(fc=4000, includeSeismicIncrease=True)
    assert f.seismic_multiplier(base) == 1.0
    assert f.seismic_multiplier(seis) == 1.25
    assert f.calc_development_length(seis, 0.5, False, True) == pytest.approx(
        1.25 * f.calc_development_length(base, 0.5, False, True)
    )
    # compression lengths are unaffected
    assert f.calc_compression_development_length(seis, 0.5) == f.calc_compression_development_length(base, 0.5)


@pytest.mark.parametrize(
    "inputs, expected",
    [
        ({"fc": 4000}, [10, 19, 33]),
        ({"fc": 8000}, [7, 14, 23]),
        ({"fc": 8000, "fy": 80000}, [9, 18, 31]),
        ({"fc": 4000, "lightweightConcrete": True}, [13, 26, 43]),
    ],
)
def test_hooked_development_length(inputs, expected) -> None:
    cfg = resolve_config(inputs)
    assert [_ru(f.calc_hooked_development_length(cfg, db)) for db in (0.5, 1.0, 1.693)] == expected


def test_hooked_development_length_minimum() -> None:
    cfg = resolve_config(fc=10000, fy=40000)
    # 8db governs for a #3: 8 x 0.375 = 3 in, so the 6 in floor applies
    assert f.calc_hooked_development_length(cfg, 0.375) == 6.0
    metric = resolve_config(preset="hardMetric", fc=80, fy=280)
    assert f.calc_hooked_development_length(metric, 8) == 150.0


def test_hooked_cover_factor_reduces_small_bars_only() -> None:
    cfg = resolve_config(fc=4000, hookedCoverSatisfied=True)
    assert _ru(f.calc_hooked_development_length(cfg, 0.5)) == 7
    assert _ru(f.calc_hooked_development_length(cfg, 1.693)) == 33


def test_compression_development_length() -> None:
    assert _ru(f.calc_compression_development_length(resolve_config(fc=4000), 0.5)) == 10
    assert _ru(f.calc_compression_development_length(resolve_config(fc=8000), 0.5)) == 9
    assert _ru(f.calc_compression_development_length(resolve_config(fc=4000, lightweightConcrete=True), 0.5)) == 13
    # 8 in floor
    assert f.calc_compression_development_length(resolve_config(fc=4000), 0.375) == 8.0


def test_compression_splice_length() -> None:
    res = f.calc_compression_splice_length(resolve_config(fy=60000), 0.5)
    assert isinstance(res, Applicable)
    assert _ru(res.length) == 15

    res = f.calc_compression_splice_length(resolve_config(fy=80000), 0.5)
    assert isinstance(res, Applicable)
    assert _ru(res.length) == 24


def test_compression_splice_minimum_and_low_strength_increase() -> None:
    # 0.0005 x 60000 x 0.375 = 11.25 in < 12 in minimum
    res = f.calc_compression_splice_length(resolve_config(fy=60000, fc=4000), 0.375)
    assert res == Applicable(12.0)
    res = f.calc_compression_splice_length(resolve_config(fy=60000, fc=2500), 0.375)
    assert isinstance(res, Applicable)
    assert res.length == pytest.approx(12.0 * 1.33)


def test_compression_splice_coefficient_metric() -> None:
    assert f.calc_compression_splice_coefficient(resolve_config(preset="hardMetric", fy=420)) == pytest.approx(29.82)
    assert f.calc_compression_splice_coefficient(resolve_config(preset="hardMetric", fy=520)) == pytest.approx(43.6)


def test_splice_not_permitted_for_large_bars() -> None:
    cfg = resolve_config()
    res = f.calc_splice_length(cfg, 1.693, False, True)
    assert isinstance(res, NotApplicable)
    assert "25.5.1.1" in res.reason
    assert isinstance(f.calc_compression_splice_length(cfg, 1.693), NotApplicable)

    # No. 11 is still permitted
    res = f.calc_splice_length(cfg, 1.41, False, True)
    assert isinstance(res, Applicable)
    assert res.length == pytest.approx(1.3 * f.calc_development_length(cfg, 1.41, False, True))

    metric = resolve_config(preset="softMetric")
    assert isinstance(f.calc_splice_length(metric, 35.81, True, False), Applicable)
    assert isinstance(f.calc_splice_length(metric, 43.0, True, False), NotApplicable)


def test_metric_lengths() -> None:
    cfg = resolve_config(preset="hardMetric")  # f'c 30 MPa, fy 420 MPa
    # 20 mm bar is above the 19.05 mm threshold: 420 x 20 / (1.7 x √30)
    assert f.calc_development_length(cfg, 20, False, True) == pytest.approx(902.13, rel=1e-3)
    assert _ru(f.calc_development_length(cfg, 20, False, True)) == 903
    assert _ru(f.calc_development_length(cfg, 16, False, True)) == 585
    # 0.24 x 420 x 20 / √30
    assert f.calc_hooked_development_length(cfg, 20) == pytest.approx(368.07, rel=1e-3)
    assert _ru(f.calc_hooked_development_length(cfg, 20)) == 369
    # 0.24 term governs over 0.043 x 420 x 20 = 361.2
    assert _ru(f.calc_compression_development_length(cfg, 20)) == 369
    res = f.calc_compression_splice_length(cfg, 20)
    assert isinstance(res, Applicable)
    assert res.length == pytest.approx(596.4)
    assert _ru(res.length) == 597
    # 300 mm minimum
    assert f.calc_compression_splice_length(cfg, 10) == Applicable(300.0)

    soft = resolve_config(preset="softMetric")
    # 0.24 x 420 x 9.52 / √30 = 175.2, clear of the 150 mm floor
    assert _ru(f.calc_hooked_development_length(soft, 9.52)) == 176
    assert _ru(f.calc_development_length(soft, 19.05, False, True)) == _ru(420 * 19.05 / (2.1 * math.sqrt(30)))


def test_hooked_confinement_factor_shortens_hook() -> None:
    base = resolve_config(fc=4000)
    confined = resolve_config(fc=4000, hookedConfinementSatisfied=True)
    assert _ru(f.calc_hooked_development_length(base, 0.5)) == 10
    # 9.49 x 0.8 = 7.59
    assert _ru(f.calc_hooked_development_length(confined, 0.5)) == 8
    assert f.calc_hooked_development_length(confined, 0.5) == pytest.approx(
        0.8 * f.calc_hooked_development_length(base, 0.5)
    )
    # No. 14 and larger get no ψr reduction
    assert _ru(f.calc_hooked_development_length(confined, 1.693)) == 33

    both = resolve_config(fc=4000, hookedCoverSatisfied=True, hookedConfinementSatisfied=True)
    # 9.49 x 0.7 x 0.8 = 5.31, under the 6 in floor
    assert f.calc_hooked_development_length(both, 0.5) == 6.0


def test_compression_confinement_shortens_ldc() -> None:
    base = resolve_config(fc=4000)
    confined = resolve_config(fc=4000, compressionConfinementSatisfied=True)
    assert _ru(f.calc_compression_development_length(base, 1.0)) == 19
    # max(18.97, 18.0) x 0.75
    assert f.calc_compression_development_length(confined, 1.0) == pytest.approx(
        0.75 * f.calc_compression_development_length(base, 1.0)
    )
    assert _ru(f.calc_compression_development_length(confined, 1.0)) == 15
    # 7.12 in is lifted to the 8 in floor
    assert f.calc_compression_development_length(confined, 0.5) == 8.0

    metric = resolve_config(preset="hardMetric", compressionConfinementSatisfied=True)
    assert _ru(f.calc_compression_development_length(metric, 20)) == 277
