import pandas as pd
import pytest

from bond_engine.bonds import Bond
from bond_engine.exceptions import ConvergenceError
from bond_engine.ytm import current_yield, solve_ytm, solve_ytm_bracketed, yield_curve, yield_curve_frame


@pytest.fixture(scope="module")
def scenario_bond():
    return Bond.initialize(
        face_value=100000,
        coupon_rate=0.06,
        maturity=5,
        price={"buy": 1.0},
        frequency=2,
        day_count="ACTUAL/365",
        currency="USD",
        today="2026-02-13",
    )


def test_par_bond_yields_its_coupon(scenario_bond):
    assert scenario_bond.ytm() == pytest.approx(0.06, abs=1e-9)
    assert scenario_bond.market_rate == pytest.approx(0.06, abs=1e-9)


def test_discount_and_premium(scenario_bond):
    discount = solve_ytm(scenario_bond, 0.95, 5)
    premium = solve_ytm(scenario_bond, 1.05, 5)
    assert discount > 0.06 > premium


def test_non_positive_maturity_short_circuits(scenario_bond):
    assert solve_ytm(scenario_bond, 0.9, 0) == 0.0
    assert solve_ytm(scenario_bond, 0.9, -1.5) == 0.0


def test_zero_iterations_returns_initial_guess(scenario_bond):
    bond = scenario_bond.with_market_rate(0.07)
    assert solve_ytm(bond, 1.0, 5, iterations=0) == pytest.approx(0.07)


def test_iteration_cap_returns_best_estimate(scenario_bond):
    one_step = solve_ytm(scenario_bond, 0.9, 5, iterations=1)
    full = solve_ytm(scenario_bond, 0.9, 5)
    assert one_step != full
    assert abs(one_step - full) < abs(scenario_bond.market_rate - full)


def test_bracketed_solver_agrees_with_newton(scenario_bond):
    for px in (0.9, 1.0, 1.1):
        assert solve_ytm_bracketed(scenario_bond, px, 5) == pytest.approx(solve_ytm(scenario_bond, px, 5), abs=1e-8)


def test_bracketed_solver_raises_without_root(scenario_bond):
    with pytest.raises(ConvergenceError):
        solve_ytm_bracketed(scenario_bond, 1.0, 5, lower=0.5, upper=1.0)


def test_current_yield():
    bond = Bond.initialize(face_value=1000, coupon_rate=0.06, maturity=3, price={"buy": 0.96}, today="2026-02-13")
    assert current_yield(bond) == pytest.approx(0.0625)
    assert bond.current_yield() == pytest.approx(0.0625)


def test_yield_curve_points(scenario_bond):
    curve = yield_curve(scenario_bond)
    assert len(curve) == 10
    assert curve[0].maturity_years == pytest.approx(0.5)
    assert curve[-1].maturity_years == pytest.approx(5.0)
    # a par quote yields the coupon at every whole-period maturity
    assert all(p.ytm == pytest.approx(0.06, abs=1e-9) for p in curve)
    assert curve == scenario_bond.yield_curve


def test_yield_curve_floor_is_one_period():
    bond = Bond.initialize(face_value=1000, coupon_rate=0.05, maturity=1, frequency=1, today="2026-02-13")
    curve = yield_curve(bond, points=4)
    assert [p.maturity_years for p in curve] == [1.0, 1.0, 1.0, 1.0]


def test_yield_curve_frame(scenario_bond):
    frame = yield_curve_frame(scenario_bond)
    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == ["maturity_years", "ytm"]
    assert frame["maturity_years"].is_monotonic_increasing
