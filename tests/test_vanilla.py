"""
Tests for Black-Scholes models and the vanilla option engines.
"""

import pytest
import numpy as np
from datetime import date

from xassetlib.curves import create_flat_curve
from xassetlib.engines import (
    AnalyticEuropeanEngine,
    BaroneAdesiWhaleyEngine,
    BlackScholesProcessBuilder,
    FdBlackScholesEngine,
    VanillaEngineKind,
    VanillaOptionEngineBuilder,
)
from xassetlib.errors import UnsupportedFeatureError
from xassetlib.instruments import AssetClass, ExerciseType, OptionType, VanillaOption
from xassetlib.market_state import EquityState, MarketState
from xassetlib.options import (
    barone_adesi_whaley_price,
    black_scholes_greeks,
    black_scholes_price,
    fd_black_scholes_price,
)

TODAY = date(2024, 1, 15)
EXPIRY = date(2025, 1, 15)


@pytest.fixture
def market():
    usd = create_flat_curve(TODAY, 0.05, currency="USD")
    eur = create_flat_curve(TODAY, 0.03, currency="EUR")
    state = MarketState(
        valuation_date=TODAY,
        discount_curves={"USD": usd, "EUR": eur},
        fx_spots={"EURUSD": 1.10},
        fx_volatilities={"EURUSD": 0.10},
    )
    state.add_equity(EquityState(
        name="SPX", currency="USD", spot=100.0,
        dividend_curve=create_flat_curve(TODAY, 0.02), volatility=0.20))
    return state


def equity_option(option_type="Call", strike=100.0, exercise=ExerciseType.EUROPEAN, quantity=1.0):
    return VanillaOption(AssetClass.EQ, "SPX", "USD", option_type, strike, EXPIRY, exercise, quantity)


class TestBlackScholesModels:
    """Tests for the closed form, BAW and finite difference solvers."""

    def test_put_call_parity(self):
        S, K, T, r, q, vol = 100.0, 95.0, 1.5, 0.04, 0.01, 0.25
        call = black_scholes_price(True, S, K, T, r, q, vol)
        put = black_scholes_price(False, S, K, T, r, q, vol)
        np.testing.assert_allclose(call - put, S * np.exp(-q * T) - K * np.exp(-r * T), rtol=1e-12)

    def test_zero_vol_is_discounted_intrinsic(self):
        price = black_scholes_price(True, 100.0, 90.0, 1.0, 0.05, 0.0, 0.0)
        forward = 100.0 * np.exp(0.05)
        assert price == pytest.approx(np.exp(-0.05) * (forward - 90.0))

    def test_delta_matches_finite_difference(self):
        S, K, T, r, q, vol = 100.0, 105.0, 1.0, 0.03, 0.01, 0.2
        greeks = black_scholes_greeks(True, S, K, T, r, q, vol)
        h = 1e-4
        fd = (black_scholes_price(True, S + h, K, T, r, q, vol)
              - black_scholes_price(True, S - h, K, T, r, q, vol)) / (2 * h)
        assert greeks['delta'] == pytest.approx(fd, rel=1e-6)

    def test_baw_put_above_european(self):
        S, K, T, r, q, vol = 100.0, 100.0, 1.0, 0.06, 0.0, 0.25
        european = black_scholes_price(False, S, K, T, r, q, vol)
        american, critical = barone_adesi_whaley_price(False, S, K, T, r, q, vol)
        assert american > european
        assert critical < K

    def test_baw_call_without_dividends_is_european(self):
        S, K, T, r, q, vol = 100.0, 100.0, 1.0, 0.06, 0.0, 0.25
        american, critical = barone_adesi_whaley_price(True, S, K, T, r, q, vol)
        assert american == pytest.approx(black_scholes_price(True, S, K, T, r, q, vol))
        assert np.isnan(critical)

    def test_baw_deep_in_the_money_put_exercised(self):
        american, critical = barone_adesi_whaley_price(False, 50.0, 100.0, 1.0, 0.08, 0.0, 0.2)
        assert 50.0 <= critical
        assert american == pytest.approx(50.0)

    def test_fd_european_matches_analytic(self):
        S, K, T, r, q, vol = 100.0, 100.0, 1.0, 0.05, 0.02, 0.2
        fd = fd_black_scholes_price(True, S, K, T, r, q, vol, time_steps=200, grid_points=401)
        analytic = black_scholes_price(True, S, K, T, r, q, vol)
        greeks = black_scholes_greeks(True, S, K, T, r, q, vol)
        assert fd['price'] == pytest.approx(analytic, rel=5e-3)
        assert fd['delta'] == pytest.approx(greeks['delta'], rel=1e-2)

    def test_fd_american_put_close_to_baw(self):
        S, K, T, r, q, vol = 100.0, 100.0, 1.0, 0.06, 0.0, 0.25
        fd = fd_black_scholes_price(False, S, K, T, r, q, vol, american=True,
                                    time_steps=200, grid_points=401)
        baw, _ = barone_adesi_whaley_price(False, S, K, T, r, q, vol)
        assert fd['price'] == pytest.approx(baw, rel=2e-2)
        assert fd['price'] >= black_scholes_price(False, S, K, T, r, q, vol)

    def test_fd_grid_validation(self):
        with pytest.raises(ValueError):
            fd_black_scholes_price(True, 100.0, 100.0, 1.0, 0.05, 0.0, 0.2, grid_points=3)


class TestVanillaOption:
    """Tests for the option instrument."""

    def test_parsing_and_payoff(self):
        option = VanillaOption("fx", "EUR", "USD", "put", 1.1, EXPIRY, "American")
        assert option.asset_class == AssetClass.FX
        assert option.option_type == OptionType.PUT
        assert option.exercise_type == ExerciseType.AMERICAN
        assert option.key == "EUR/USD"
        assert option.payoff(1.0) == pytest.approx(0.1)
        assert option.payoff(1.2) == 0.0

    def test_invalid_strike(self):
        with pytest.raises(ValueError):
            equity_option(strike=0.0)


class TestBlackScholesProcessBuilder:
    """Tests for process assembly from the market state."""

    def test_equity_process(self, market):
        process = BlackScholesProcessBuilder(market).build(equity_option())
        assert process.spot == 100.0
        assert process.volatility == 0.20
        assert process.risk_free_curve is market.discount_curve("USD")
        T, r, q = process.rates(EXPIRY)
        assert T == pytest.approx(366 / 365)
        assert r == pytest.approx(0.05)
        assert q == pytest.approx(0.02)

    def test_equity_forecast_curve(self, market):
        forecast = create_flat_curve(TODAY, 0.045)
        market.equity("SPX").forecast_curve = forecast
        process = BlackScholesProcessBuilder(market).build(equity_option())
        assert process.risk_free_curve is forecast

    def test_fx_process(self, market):
        option = VanillaOption(AssetClass.FX, "EUR", "USD", OptionType.CALL, 1.10, EXPIRY)
        process = BlackScholesProcessBuilder(market).build(option)
        assert process.spot == 1.10
        assert process.dividend_curve is market.discount_curve("EUR")
        assert process.risk_free_curve is market.discount_curve("USD")
        assert process.forward(EXPIRY) == pytest.approx(1.10 * np.exp(0.02 * 366 / 365))

    def test_inverted_fx_pair(self, market):
        option = VanillaOption(AssetClass.FX, "USD", "EUR", OptionType.CALL, 0.9, EXPIRY)
        process = BlackScholesProcessBuilder(market).build(option)
        assert process.spot == pytest.approx(1 / 1.10)
        assert process.volatility == 0.10

    def test_currency_mismatch(self, market):
        option = VanillaOption(AssetClass.EQ, "SPX", "EUR", OptionType.CALL, 100.0, EXPIRY)
        with pytest.raises(ValueError):
            BlackScholesProcessBuilder(market).build(option)


class TestVanillaEngines:
    """Tests for the engine strategies and the caching builder."""

    def test_analytic_parity(self, market):
        builder = VanillaOptionEngineBuilder(market)
        call = builder.price(equity_option("Call"))
        put = builder.price(equity_option("Put"))
        df = call["discountFactor"]
        assert call.value - put.value == pytest.approx(df * (call["forward"] - 100.0), rel=1e-10)

    def test_analytic_matches_closed_form(self, market):
        result = VanillaOptionEngineBuilder(market).price(equity_option(quantity=10.0))
        T = 366 / 365
        expected = black_scholes_price(True, 100.0, 100.0, T, 0.05, 0.02, 0.20)
        assert result.value == pytest.approx(10.0 * expected, rel=1e-10)

    def test_analytic_rejects_american(self, market):
        process = BlackScholesProcessBuilder(market).build(equity_option())
        with pytest.raises(UnsupportedFeatureError):
            AnalyticEuropeanEngine(process).calculate(equity_option(exercise=ExerciseType.AMERICAN))

    def test_baw_engine(self, market):
        process = BlackScholesProcessBuilder(market).build(equity_option())
        engine = BaroneAdesiWhaleyEngine(process)
        european = engine.calculate(equity_option("Put")).value
        american = engine.calculate(equity_option("Put", exercise=ExerciseType.AMERICAN))
        assert american.value >= european
        assert american["criticalPrice"] < 100.0

    def test_fd_engine(self, market):
        builder = VanillaOptionEngineBuilder(market, kind="FdBlackScholesVanillaEngine",
                                             time_steps=200, grid_points=401)
        assert builder.kind == VanillaEngineKind.FD_BLACK_SCHOLES
        fd = builder.price(equity_option()).value
        analytic = VanillaOptionEngineBuilder(market).price(equity_option()).value
        assert fd == pytest.approx(analytic, rel=5e-3)
        assert isinstance(builder.engine(equity_option()), FdBlackScholesEngine)

    def test_engine_cached_per_key(self, market):
        builder = VanillaOptionEngineBuilder(market, VanillaEngineKind.BARONE_ADESI_WHALEY)
        first = builder.engine(equity_option(strike=90.0))
        second = builder.engine(equity_option(strike=110.0))
        assert first is second
        assert len(builder) == 1

        builder.engine(VanillaOption(AssetClass.FX, "EUR", "USD", OptionType.PUT, 1.1, EXPIRY))
        assert len(builder) == 2

        builder.reset()
        assert len(builder) == 0
        assert builder.engine(equity_option()) is not first

    def test_unknown_kind(self, market):
        with pytest.raises(ValueError):
            VanillaOptionEngineBuilder(market, kind="MonteCarlo")
