"""Unit tests for patrimoine.application.services.economy module."""

import numpy as np
import pytest
from pydantic import ValidationError

from patrimoine.application.services.economy import (
    BetaRandomizer,
    DeterministicEconomyModel,
    RandomVariable,
    SimulationMode,
    StochasticEconomyModel,
)
from patrimoine.core.exceptions import InvalidParameterError


class TestDeterministicEconomyModel:
    def test_rates_are_fractional(self, economy):
        secured, stock = economy.rates(2030)
        assert secured == pytest.approx(0.02)
        assert stock == pytest.approx(0.05)
        assert economy.inflation() == pytest.approx(0.01)

    def test_mode_is_ignored(self, economy):
        assert economy.rates(2030, SimulationMode.RANDOM) == economy.rates(2030)

    def test_from_dict_defaults(self):
        model = DeterministicEconomyModel.from_dict({"stock_rate_pct": 7.0})
        assert model.stock_rate_pct == 7.0
        assert model.inflation_pct == 1.0


class TestBetaRandomizer:
    def test_draw_within_bounds(self):
        randomizer = BetaRandomizer(min_pct=-1.0, max_pct=3.0, alpha=2.0, beta=5.0, default_pct=0.5)
        rng = np.random.default_rng(7)
        draws = [randomizer.draw(rng) for _ in range(500)]
        assert all(-1.0 <= d <= 3.0 for d in draws)

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValidationError):
            BetaRandomizer(min_pct=3.0, max_pct=1.0, alpha=2.0, beta=2.0, default_pct=2.0)

    def test_default_outside_bounds_rejected(self):
        with pytest.raises(ValidationError):
            BetaRandomizer(min_pct=0.0, max_pct=1.0, alpha=2.0, beta=2.0, default_pct=2.0)

    def test_non_positive_shape_rejected(self):
        with pytest.raises(ValidationError):
            BetaRandomizer(min_pct=0.0, max_pct=1.0, alpha=0.0, beta=2.0, default_pct=0.5)


class TestStochasticEconomyModel:
    def test_same_seed_same_draws(self, economy_config):
        a = StochasticEconomyModel(economy_config, 2021, 2040, seed=42)
        b = StochasticEconomyModel(economy_config, 2021, 2040, seed=42)
        assert a.random_variables() == b.random_variables()
        assert a.rates(2030, SimulationMode.RANDOM) == b.rates(2030, SimulationMode.RANDOM)

    def test_different_seeds_differ(self, economy_config):
        a = StochasticEconomyModel(economy_config, 2021, 2040, seed=1)
        b = StochasticEconomyModel(economy_config, 2021, 2040, seed=2)
        assert a.random_variables() != b.random_variables()

    def test_draws_within_bounds(self, economy_config):
        for seed in range(20):
            drawn = StochasticEconomyModel(economy_config, 2021, 2040, seed=seed).random_variables()
            assert 0.0 <= drawn[RandomVariable.INFLATION] <= 4.0
            assert 0.0 <= drawn[RandomVariable.SECURED_RATE] <= 4.0
            assert 2.0 <= drawn[RandomVariable.STOCK_RATE] <= 10.0

    def test_random_mode_uses_draws(self, economy_config):
        model = StochasticEconomyModel(economy_config, 2021, 2040, seed=3)
        drawn = model.random_variables()
        secured, stock = model.rates(2025, SimulationMode.RANDOM)
        assert secured == pytest.approx(drawn[RandomVariable.SECURED_RATE] / 100)
        assert stock == pytest.approx(drawn[RandomVariable.STOCK_RATE] / 100)
        assert model.inflation(SimulationMode.RANDOM) == pytest.approx(drawn[RandomVariable.INFLATION] / 100)

    def test_deterministic_mode_uses_defaults(self, economy_config):
        model = StochasticEconomyModel(economy_config, 2021, 2040, seed=3)
        secured, stock = model.rates(2025)
        assert secured == pytest.approx(0.02)
        assert stock == pytest.approx(0.06)
        assert model.inflation() == pytest.approx(0.015)

    def test_volatility_varies_per_year(self, economy_config):
        config = economy_config.model_copy(update={"simulate_volatility": True})
        model = StochasticEconomyModel(config, 2021, 2040, seed=5)
        stock_rates = {model.rates(year, SimulationMode.RANDOM).stock_rate for year in range(2021, 2041)}
        assert len(stock_rates) > 1

    def test_volatility_leaves_inflation_constant(self, economy_config):
        config = economy_config.model_copy(update={"simulate_volatility": True})
        model = StochasticEconomyModel(config, 2021, 2040, seed=5)
        drawn = model.random_variables()
        assert model.inflation(SimulationMode.RANDOM) == pytest.approx(drawn[RandomVariable.INFLATION] / 100)

    def test_year_outside_sampled_range(self, economy_config):
        config = economy_config.model_copy(update={"simulate_volatility": True})
        model = StochasticEconomyModel(config, 2021, 2040, seed=5)
        with pytest.raises(InvalidParameterError):
            model.rates(2041, SimulationMode.RANDOM)

    def test_invalid_year_range(self, economy_config):
        with pytest.raises(InvalidParameterError):
            StochasticEconomyModel(economy_config, 2040, 2021)
