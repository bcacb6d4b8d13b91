"""Economic scenario providers.

A provider gives the yearly inflation and the secured / stock rates used to
value the financial assets. Rates are returned as fractions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Optional, Protocol

import numpy as np
from pydantic import BaseModel, Field, model_validator

from patrimoine.core.exceptions import InvalidParameterError
from patrimoine.core.financial import pct_to_rate


class SimulationMode(Enum):
    DETERMINISTIC = "Déterministe"
    RANDOM = "Aléatoire"


class RandomVariable(Enum):
    INFLATION = "Inflation"
    SECURED_RATE = "Rendements Sûrs"
    STOCK_RATE = "Rendements Actions"


class RatePair(NamedTuple):
    secured_rate: float
    stock_rate: float


class EconomyModelProvider(Protocol):
    def rates(self, year: Optional[int] = None, mode: SimulationMode = SimulationMode.DETERMINISTIC) -> RatePair:
        ...

    def inflation(self, mode: SimulationMode = SimulationMode.DETERMINISTIC) -> float:
        ...


@dataclass(frozen=True)
class DeterministicEconomyModel:
    """Constant economic hypotheses."""

    inflation_pct: float = 1.0
    secured_rate_pct: float = 2.0
    stock_rate_pct: float = 5.0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DeterministicEconomyModel:
        return cls(
            inflation_pct=d.get("inflation_pct", 1.0),
            secured_rate_pct=d.get("secured_rate_pct", 2.0),
            stock_rate_pct=d.get("stock_rate_pct", 5.0),
        )

    def rates(self, year: Optional[int] = None, mode: SimulationMode = SimulationMode.DETERMINISTIC) -> RatePair:
        return RatePair(pct_to_rate(self.secured_rate_pct), pct_to_rate(self.stock_rate_pct))

    def inflation(self, mode: SimulationMode = SimulationMode.DETERMINISTIC) -> float:
        return pct_to_rate(self.inflation_pct)


class BetaRandomizer(BaseModel):
    """Random variable following a Beta law scaled to [min_pct, max_pct]."""

    min_pct: float
    max_pct: float
    alpha: float = Field(..., gt=0)
    beta: float = Field(..., gt=0)
    default_pct: float = Field(..., description="Value used in deterministic mode")

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @model_validator(mode="after")
    def check_bounds(self) -> BetaRandomizer:
        if self.max_pct <= self.min_pct:
            raise ValueError("max_pct must be greater than min_pct")
        if not self.min_pct <= self.default_pct <= self.max_pct:
            raise ValueError("default_pct must lie in [min_pct, max_pct]")
        return self

    def draw(self, rng: np.random.Generator) -> float:
        return self.min_pct + (self.max_pct - self.min_pct) * float(rng.beta(self.alpha, self.beta))


class EconomyConfig(BaseModel):
    """Distributions of the economic random variables."""

    inflation: BetaRandomizer
    secured_rate: BetaRandomizer
    stock_rate: BetaRandomizer
    secured_volatility_pct: float = Field(default=1.0, ge=0, le=100)
    stock_volatility_pct: float = Field(default=15.0, ge=0, le=100)
    simulate_volatility: bool = False

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }


class StochasticEconomyModel:
    """Economy drawn at random once per run.

    Every draw happens in the constructor: the same seed yields the same
    rates, and the instance never changes afterwards.
    """

    def __init__(
        self,
        config: EconomyConfig,
        first_year: int,
        last_year: int,
        seed: Optional[int] = None,
    ):
        if last_year < first_year:
            raise InvalidParameterError("last_year", last_year, f"must be >= first_year ({first_year})")
        self.config = config
        self.first_year = first_year
        self.last_year = last_year
        self.seed = seed

        rng = np.random.default_rng(seed)
        self._drawn = {
            RandomVariable.INFLATION: config.inflation.draw(rng),
            RandomVariable.SECURED_RATE: config.secured_rate.draw(rng),
            RandomVariable.STOCK_RATE: config.stock_rate.draw(rng),
        }

        nb_years = last_year - first_year + 1
        if config.simulate_volatility:
            self._secured_samples = rng.normal(
                self._drawn[RandomVariable.SECURED_RATE], config.secured_volatility_pct, nb_years
            )
            self._stock_samples = rng.normal(
                self._drawn[RandomVariable.STOCK_RATE], config.stock_volatility_pct, nb_years
            )
        else:
            self._secured_samples = None
            self._stock_samples = None

    def random_variables(self) -> dict[RandomVariable, float]:
        """Values drawn for this run, in %."""
        return dict(self._drawn)

    def _value_pct(self, variable: RandomVariable, mode: SimulationMode) -> float:
        if mode is SimulationMode.RANDOM:
            return self._drawn[variable]
        randomizer = {
            RandomVariable.INFLATION: self.config.inflation,
            RandomVariable.SECURED_RATE: self.config.secured_rate,
            RandomVariable.STOCK_RATE: self.config.stock_rate,
        }[variable]
        return randomizer.default_pct

    def rates(self, year: Optional[int] = None, mode: SimulationMode = SimulationMode.DETERMINISTIC) -> RatePair:
        if mode is SimulationMode.RANDOM and year is not None and self._secured_samples is not None:
            if not self.first_year <= year <= self.last_year:
                raise InvalidParameterError(
                    "year", year, f"outside sampled range [{self.first_year}, {self.last_year}]"
                )
            i = year - self.first_year
            return RatePair(
                pct_to_rate(float(self._secured_samples[i])),
                pct_to_rate(float(self._stock_samples[i])),
            )
        return RatePair(
            pct_to_rate(self._value_pct(RandomVariable.SECURED_RATE, mode)),
            pct_to_rate(self._value_pct(RandomVariable.STOCK_RATE, mode)),
        )

    def inflation(self, mode: SimulationMode = SimulationMode.DETERMINISTIC) -> float:
        return pct_to_rate(self._value_pct(RandomVariable.INFLATION, mode))
