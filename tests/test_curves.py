"""
Unit tests for curves module.
"""

from datetime import date
import numpy as np
import pytest

from xassetlib.conventions import DayCount, Frequency
from xassetlib.curves import (
    Curve,
    LinearInterpolator,
    CubicSplineInterpolator,
    LogLinearInterpolator,
    BackwardFlatInterpolator,
    SurvivalCurve,
    InterpolatedQuoteCurve,
    YoYInflationCurve,
    create_flat_curve,
    create_flat_survival_curve,
    create_interpolator,
)
from xassetlib.errors import ConfigurationError
from xassetlib.observable import Observer, SimpleQuote


class CountingObserver(Observer):
    def __init__(self):
        self.updates = 0

    def update(self):
        self.updates += 1


class TestInterpolators:
    """Tests for interpolation methods."""

    @pytest.fixture
    def sample_data(self):
        x = np.array([0.0, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0])
        y = np.array([0.050, 0.051, 0.052, 0.053, 0.050, 0.048, 0.045])
        return x, y

    def test_linear_interpolator(self, sample_data):
        x, y = sample_data
        interp = LinearInterpolator()
        interp.fit(x, y)

        assert abs(interp(0.0) - 0.050) < 1e-10
        assert abs(interp(1.0) - 0.053) < 1e-10
        assert abs(interp(0.125) - 0.0505) < 1e-10

    def test_flat_and_linear_extrapolation(self, sample_data):
        x, y = sample_data
        flat = LinearInterpolator()
        flat.fit(x, y)
        assert flat(20.0) == pytest.approx(0.045)
        assert flat.derivative(20.0) == 0.0

        linear = LinearInterpolator(extrapolation="linear")
        linear.fit(x, y)
        slope = (0.045 - 0.048) / 5.0
        assert linear(15.0) == pytest.approx(0.045 + 5.0 * slope)

    def test_cubic_spline_interpolator(self, sample_data):
        x, y = sample_data
        interp = CubicSplineInterpolator()
        interp.fit(x, y)

        assert abs(interp(1.0) - 0.053) < 1e-10
        assert interp.second_derivative(0.0) == pytest.approx(0.0, abs=1e-12)

    def test_log_linear_interpolator(self):
        times = np.array([0.0, 1.0, 2.0])
        dfs = np.exp(-0.05 * times)
        interp = LogLinearInterpolator()
        interp.fit(times, dfs)

        assert interp(1.5) == pytest.approx(np.exp(-0.075))
        assert interp.log_derivative(1.5) == pytest.approx(-0.05)

    def test_backward_flat(self):
        interp = BackwardFlatInterpolator()
        interp.fit(np.array([1.0, 2.0, 3.0]), np.array([10.0, 20.0, 30.0]))
        assert interp(1.5) == 20.0
        assert interp(2.0) == 20.0

    def test_fit_validation(self):
        interp = LinearInterpolator()
        with pytest.raises(ValueError):
            interp.fit(np.array([0.0, 0.0]), np.array([1.0, 2.0]))
        with pytest.raises(ValueError):
            interp.fit(np.array([0.0]), np.array([1.0]))
        with pytest.raises(RuntimeError):
            LinearInterpolator()(1.0)

    def test_factory(self):
        assert isinstance(create_interpolator("log-linear"), LogLinearInterpolator)
        with pytest.raises(ValueError):
            create_interpolator("akima")


class TestCurve:
    """Tests for Curve class."""

    @pytest.fixture
    def flat_curve(self):
        return create_flat_curve(date(2024, 1, 15), 0.05)

    def test_discount_factor(self, flat_curve):
        assert flat_curve.discount_factor(0.0) == 1.0
        assert flat_curve.discount_factor(2.0) == pytest.approx(np.exp(-0.10))

    def test_discount_by_date(self, flat_curve):
        d = date(2025, 1, 14)  # 365 days
        assert flat_curve.discount(d) == pytest.approx(np.exp(-0.05))

    def test_replacing_node(self, flat_curve):
        n = len(flat_curve)
        flat_curve.add_node(5.0, np.exp(-0.30))
        assert len(flat_curve) == n
        assert flat_curve.discount_factor(5.0) == pytest.approx(np.exp(-0.30))

    def test_instantaneous_forward_flat(self, flat_curve):
        assert flat_curve.instantaneous_forward(3.0) == pytest.approx(0.05)

    def test_add_node_notifies(self):
        curve = Curve(date(2024, 1, 15))
        observer = CountingObserver()
        curve.register_observer(observer)
        curve.add_node(1.0, 0.95)
        assert observer.updates == 1

    def test_invalid_node(self):
        curve = Curve(date(2024, 1, 15))
        with pytest.raises(ValueError):
            curve.add_node(1.0, -0.5)
        with pytest.raises(ValueError):
            curve.build()

    def test_short_tenor_flat_curve(self):
        curve = create_flat_curve(date(2024, 1, 15), 0.04, max_tenor_years=5)
        assert len(curve) == 6
        assert curve.discount_factor(10.0) == pytest.approx(np.exp(-0.40))


class TestSurvivalCurve:
    """Tests for SurvivalCurve."""

    def test_flat_hazard(self):
        curve = create_flat_survival_curve(date(2024, 1, 15), 0.02)
        assert curve.survival_probability(3.0) == pytest.approx(np.exp(-0.06))
        assert curve.hazard_rate(3.0) == pytest.approx(0.02)
        # flat hazard beyond the last pillar
        assert curve.survival_probability(60.0) == pytest.approx(np.exp(-1.2))

    def test_default_probability(self):
        curve = create_flat_survival_curve(date(2024, 1, 15), 0.02)
        dp = curve.default_probability(1.0, 2.0)
        assert dp == pytest.approx(np.exp(-0.02) - np.exp(-0.04))
        with pytest.raises(ValueError):
            curve.default_probability(2.0, 1.0)

    @pytest.mark.parametrize("max_tenor", [0.5, 5.0, 7.0, 30.0])
    def test_flat_hazard_short_max_tenor(self, max_tenor):
        curve = create_flat_survival_curve(date(2024, 1, 15), 0.03, max_tenor_years=max_tenor)
        times = curve._interpolator.times
        assert np.all(np.diff(times) > 0)
        assert times[-1] == max_tenor
        for t in (0.25, 2.0, 40.0):
            assert curve.survival_probability(t) == pytest.approx(np.exp(-0.03 * t))

    def test_validation(self):
        with pytest.raises(ValueError):
            SurvivalCurve(date(2024, 1, 15), [1.0, 2.0], [0.9, 0.95])
        with pytest.raises(ValueError):
            SurvivalCurve(date(2024, 1, 15), [1.0], [1.5])


class TestInterpolatedQuoteCurve:
    """Tests for the lazily recalculated quote curve."""

    @pytest.fixture
    def setup(self):
        ref = date(2024, 1, 15)
        dates = [date(2024, 1, 15), date(2025, 1, 15), date(2026, 1, 15)]
        quotes = [SimpleQuote(0.01), SimpleQuote(0.02), SimpleQuote(0.03)]
        curve = InterpolatedQuoteCurve(ref, dates, quotes)
        return curve, quotes

    def test_values(self, setup):
        curve, _ = setup
        t1 = curve.times()[1]
        assert curve.value(t1) == pytest.approx(0.02)
        assert curve(date(2025, 1, 15)) == pytest.approx(0.02)

    def test_single_recalculation_after_several_changes(self, setup):
        curve, quotes = setup
        curve.value(0.5)
        assert curve.recalculation_count == 1

        quotes[0].set_value(0.015)
        quotes[1].set_value(0.025)
        quotes[2].set_value(0.035)
        assert not curve.is_calculated
        assert curve.recalculation_count == 1

        curve.value(0.5)
        curve.value(1.5)
        assert curve.recalculation_count == 2
        np.testing.assert_allclose(curve.data(), [0.015, 0.025, 0.035])

    def test_unchanged_quote_does_not_notify(self, setup):
        curve, quotes = setup
        curve.value(0.5)
        quotes[0].set_value(0.01)
        assert curve.is_calculated

    def test_notification_forwarded(self, setup):
        curve, quotes = setup
        observer = CountingObserver()
        curve.register_observer(observer)
        quotes[1].set_value(0.05)
        assert observer.updates == 1

    def test_freeze(self, setup):
        curve, quotes = setup
        curve.value(0.5)
        curve.freeze()
        quotes[1].set_value(0.05)
        assert curve.data()[1] == pytest.approx(0.02)
        curve.unfreeze()
        assert curve.data()[1] == pytest.approx(0.05)

    def test_weak_observer_references(self, setup):
        _, quotes = setup
        observer = CountingObserver()
        quotes[0].register_observer(observer)
        count = quotes[0].observer_count
        del observer
        assert quotes[0].observer_count == count - 1

    def test_too_few_dates(self):
        with pytest.raises(ConfigurationError):
            InterpolatedQuoteCurve(date(2024, 1, 15), [date(2024, 1, 15)], [SimpleQuote(0.01)])

    def test_mismatched_quotes(self):
        with pytest.raises(ConfigurationError):
            InterpolatedQuoteCurve(
                date(2024, 1, 15),
                [date(2024, 1, 15), date(2025, 1, 15)],
                [SimpleQuote(0.01)]
            )

    def test_unsorted_dates(self):
        with pytest.raises(ConfigurationError):
            InterpolatedQuoteCurve(
                date(2024, 1, 15),
                [date(2025, 1, 15), date(2024, 1, 15)],
                [SimpleQuote(0.01), SimpleQuote(0.02)]
            )

    def test_invalid_quote_fails_on_read(self, setup):
        curve, quotes = setup
        quotes[1].set_value(None)
        with pytest.raises(ValueError):
            curve.value(0.5)
        assert not curve.is_calculated


class TestYoYInflationCurve:
    """Tests for the YoY inflation curve."""

    def test_dates_snapped_to_period_start(self):
        curve = YoYInflationCurve(
            date(2024, 3, 1),
            [date(2024, 5, 15), date(2025, 5, 15), date(2026, 5, 20)],
            [SimpleQuote(0.02), SimpleQuote(0.021), SimpleQuote(0.022)],
            frequency=Frequency.MONTHLY
        )
        assert curve.dates() == [date(2024, 5, 1), date(2025, 5, 1), date(2026, 5, 1)]
        assert curve.base_date() == date(2024, 5, 1)
        assert curve.max_date() == date(2026, 5, 31)

    def test_base_period_uses_observation_lag(self, caplog):
        with caplog.at_level("WARNING", logger="xassetlib.curves.quote_curve"):
            curve = YoYInflationCurve(
                date(2024, 6, 15),
                [date(2024, 3, 10), date(2025, 3, 10)],
                [SimpleQuote(0.02), SimpleQuote(0.021)],
                observation_lag="3M",
                frequency=Frequency.MONTHLY
            )
        assert curve.base_period() == (date(2024, 3, 1), date(2024, 3, 31))
        assert curve.base_date() == date(2024, 3, 1)
        assert "base period" not in caplog.text

        lagged = YoYInflationCurve(
            date(2024, 6, 15),
            [date(2024, 3, 10), date(2025, 3, 10)],
            [SimpleQuote(0.02), SimpleQuote(0.021)],
            observation_lag="2M",
            frequency=Frequency.QUARTERLY
        )
        assert lagged.base_period() == (date(2024, 4, 1), date(2024, 6, 30))

    def test_first_date_outside_base_period_warns(self, caplog):
        with caplog.at_level("WARNING", logger="xassetlib.curves.quote_curve"):
            YoYInflationCurve(
                date(2024, 6, 15),
                [date(2024, 8, 10), date(2025, 8, 10)],
                [SimpleQuote(0.02), SimpleQuote(0.021)],
                observation_lag="3M"
            )
        assert "outside the base period" in caplog.text

    def test_quarterly_snapping(self):
        curve = YoYInflationCurve(
            date(2024, 3, 1),
            [date(2024, 5, 15), date(2025, 8, 15)],
            [SimpleQuote(0.02), SimpleQuote(0.021)],
            frequency=Frequency.QUARTERLY
        )
        assert curve.dates() == [date(2024, 4, 1), date(2025, 7, 1)]

    def test_interpolated_index_keeps_dates(self):
        dates = [date(2024, 5, 15), date(2025, 5, 15)]
        curve = YoYInflationCurve(
            date(2024, 3, 1), dates,
            [SimpleQuote(0.02), SimpleQuote(0.021)],
            index_is_interpolated=True
        )
        assert curve.dates() == dates
        assert curve.max_date() == date(2025, 5, 15)

    def test_dates_collapsing_to_one_period_rejected(self):
        with pytest.raises(ConfigurationError):
            YoYInflationCurve(
                date(2024, 3, 1),
                [date(2024, 5, 10), date(2024, 5, 20)],
                [SimpleQuote(0.02), SimpleQuote(0.021)],
                frequency=Frequency.MONTHLY
            )

    def test_rates_below_minus_one_rejected(self):
        curve = YoYInflationCurve(
            date(2024, 3, 1),
            [date(2024, 5, 15), date(2025, 5, 15)],
            [SimpleQuote(0.02), SimpleQuote(-1.5)]
        )
        with pytest.raises(ValueError):
            curve.rates()
