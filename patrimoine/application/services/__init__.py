"""Application services."""

from .economy import (
    BetaRandomizer,
    DeterministicEconomyModel,
    EconomyConfig,
    EconomyModelProvider,
    RandomVariable,
    RatePair,
    SimulationMode,
    StochasticEconomyModel,
)
from .monte_carlo import MonteCarloResult, MonteCarloSimulation
from .simulation import Simulation, SimulationResult
from .social_accounts import BalanceSheetLine, CashFlowLine, SocialAccounts

__all__ = [
    "SimulationMode",
    "RandomVariable",
    "RatePair",
    "EconomyModelProvider",
    "DeterministicEconomyModel",
    "BetaRandomizer",
    "EconomyConfig",
    "StochasticEconomyModel",
    "BalanceSheetLine",
    "CashFlowLine",
    "SocialAccounts",
    "Simulation",
    "SimulationResult",
    "MonteCarloSimulation",
    "MonteCarloResult",
]
