# tests/unit/lobsim/test_order_generator.py
"""
Tests for RandomOrderGenerator pricing: Gaussian noise, news effect,
mean-reversion effect and the positive price floor.
"""

import numpy as np
import pytest

from lobsim.config import SimulationConfig
from lobsim.mean_reversion import MeanReversionTracker
from lobsim.news_bias import NewsBias
from lobsim.order import Side
from lobsim.order_generator import RandomOrderGenerator


@pytest.fixture
def generator(rng):
    return RandomOrderGenerator(rng)


@pytest.fixture
def quiet_generator(rng):
    """No price noise, so effects can be checked exactly."""
    return RandomOrderGenerator(rng, SimulationConfig(volatility=0.0))


class TestOrderShape:
    """Fields of a generated order."""

    def test_fields(self, generator):
        order = generator.generate(
            tick=12, current_price=100.0, news_bias=None, mean_reversion_bias=0.0, order_id=77
        )

        assert order.id == 77
        assert order.tick_placed == 12
        assert order.tick_taken is None
        assert order.side in (Side.BUY, Side.SELL)
        assert 1 <= order.quantity <= 10
        assert order.price > 0
        assert order.is_active

    def test_price_has_two_decimals(self, generator):
        for i in range(200):
            order = generator.generate(1, 100.0, None, 0.0, i)
            assert round(order.price, 2) == order.price

    def test_quantity_covers_full_range(self, generator):
        quantities = {generator.generate(1, 100.0, None, 0.0, i).quantity for i in range(1000)}
        assert quantities == set(range(1, 11))

    def test_both_sides_generated(self, generator):
        sides = [generator.generate(1, 100.0, None, 0.0, i).side for i in range(500)]
        buys = sides.count(Side.BUY)
        assert 175 < buys < 325, f"Side should be a fair coin, got {buys}/500 buys"

    def test_orders_per_tick_range(self, generator):
        counts = {generator.orders_per_tick() for _ in range(300)}
        assert counts == {1, 2, 3}

    def test_same_seed_same_orders(self):
        g1 = RandomOrderGenerator(np.random.default_rng(9))
        g2 = RandomOrderGenerator(np.random.default_rng(9))
        for i in range(50):
            o1 = g1.generate(3, 100.0, None, 0.01, i)
            o2 = g2.generate(3, 100.0, None, 0.01, i)
            assert (o1.side, o1.price, o1.quantity) == (o2.side, o2.price, o2.quantity)


class TestGaussianNoise:
    """Box-Muller draws are standard normal."""

    def test_moments(self, generator):
        draws = np.array([generator.gaussian() for _ in range(20000)])
        assert abs(draws.mean()) < 0.05
        assert abs(draws.std() - 1.0) < 0.05

    def test_price_spread_is_five_percent(self, generator):
        prices = np.array([generator.generate(1, 200.0, None, 0.0, i).price for i in range(20000)])
        assert prices.mean() == pytest.approx(200.0, abs=0.3)
        assert prices.std() == pytest.approx(10.0, rel=0.05)


class TestPriceEffects:
    """News and mean-reversion shifts with noise switched off."""

    def test_no_effects(self, quiet_generator):
        order = quiet_generator.generate(1, 100.0, None, 0.0, 1)
        assert order.price == 100.0

    def test_positive_news(self, quiet_generator):
        news = NewsBias(direction=1, start_tick=5, end_tick=10)
        order = quiet_generator.generate(7, 100.0, news, 0.0, 1)
        assert order.price == pytest.approx(102.0)

    def test_negative_news(self, quiet_generator):
        news = NewsBias(direction=-1, start_tick=5, end_tick=10)
        order = quiet_generator.generate(10, 50.0, news, 0.0, 1)
        assert order.price == pytest.approx(49.0)

    def test_news_outside_its_window_ignored(self, quiet_generator):
        news = NewsBias(direction=1, start_tick=5, end_tick=10)
        assert quiet_generator.generate(4, 100.0, news, 0.0, 1).price == 100.0
        assert quiet_generator.generate(11, 100.0, news, 0.0, 2).price == 100.0

    def test_mean_reversion_effect(self, quiet_generator):
        up = quiet_generator.generate(1, 100.0, None, 0.1, 1)
        down = quiet_generator.generate(1, 100.0, None, -0.1, 2)
        assert up.price == pytest.approx(100.3)
        assert down.price == pytest.approx(99.7)

    def test_effects_add_up(self, quiet_generator):
        news = NewsBias(direction=1, start_tick=0, end_tick=3)
        order = quiet_generator.generate(2, 100.0, news, 0.5, 1)
        assert order.price == pytest.approx(100.0 + 2.0 + 1.5)


class TestPriceFloor:
    """Generated prices never drop below 0.01."""

    def test_negative_price_clamped(self, generator):
        for i in range(200):
            order = generator.generate(1, 1.0, None, -100.0, i)
            assert order.price == 0.01

    def test_tiny_price_stays_positive(self, generator):
        for i in range(500):
            assert generator.generate(1, 0.01, None, 0.0, i).price >= 0.01


class TestMeanReversionSign:
    """A trailing average above the price pushes generated prices up."""

    def test_average_above_price_lifts_orders(self):
        tracker = MeanReversionTracker(window_size=1000)
        tracker.extend([110.0] * 999)
        bias = tracker.update(100.0)
        assert bias > 0

        generator = RandomOrderGenerator(np.random.default_rng(2024))
        prices = np.array(
            [generator.generate(1, 100.0, None, bias, i).price for i in range(20000)]
        )
        assert prices.mean() > 100.0

    def test_same_draws_shift_by_reversion_effect(self):
        """With identical random draws, bias 0.1 adds exactly 0.3 to each price."""
        base = RandomOrderGenerator(np.random.default_rng(5))
        lifted = RandomOrderGenerator(np.random.default_rng(5))

        for i in range(200):
            o1 = base.generate(1, 100.0, None, 0.0, i)
            o2 = lifted.generate(1, 100.0, None, 0.1, i)
            assert o2.price - o1.price == pytest.approx(0.3, abs=0.011)

    def test_average_below_price_lowers_orders(self):
        tracker = MeanReversionTracker(window_size=1000)
        tracker.extend([90.0] * 999)
        bias = tracker.update(100.0)
        assert bias < 0

        generator = RandomOrderGenerator(np.random.default_rng(2025))
        prices = np.array(
            [generator.generate(1, 100.0, None, bias, i).price for i in range(20000)]
        )
        assert prices.mean() < 100.0
