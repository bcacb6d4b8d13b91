"""
Parallel worker functions for Monte-Carlo trials.

These are module-level functions designed to be pickle-safe for ProcessPoolExecutor.
They avoid class method references which cannot be pickled.
"""
from typing import Any


def run_trial_worker(args: tuple) -> dict[str, Any]:
    """
    Worker function to compute a single stochastic trial.

    Designed to be called by ProcessPoolExecutor. The tax models, the economy
    provider and the driver are recreated in the worker process, so trials
    share no mutable state.

    Args:
        args: Tuple of (run, seed, fiscal_config, economy_config, family, patrimoine, nb_of_years, first_year)

    Returns:
        Trial summary dict. A trial whose financial assets run out is
        reported with zero KPIs and its `ruin_year` instead of failing the batch.
    """
    (
        run,
        seed,
        fiscal_config,
        economy_config,
        family,
        patrimoine,
        nb_of_years,
        first_year,
    ) = args

    # Import here to avoid circular imports and ensure fresh instances
    from patrimoine.application.services.economy import SimulationMode, StochasticEconomyModel
    from patrimoine.application.services.simulation import Simulation
    from patrimoine.core.exceptions import InsufficientFundsError, SimulationError
    from patrimoine.core.logging import trial_context
    from patrimoine.domain.calculator.taxes import FiscalModel

    economy = StochasticEconomyModel(
        economy_config,
        first_year=first_year,
        last_year=first_year + nb_of_years - 1,
        seed=seed,
    )
    simulation = Simulation(
        FiscalModel.from_config(fiscal_config),
        economy,
        mode=SimulationMode.RANDOM,
        title=f"Run {run}",
    )
    random_variables = {v.value: value for v, value in economy.random_variables().items()}

    try:
        with trial_context(run, seed):
            result = simulation.compute(nb_of_years, family, patrimoine, first_year=first_year)
    except SimulationError as e:
        if not isinstance(e.__cause__, InsufficientFundsError):
            raise
        # ruined trial: every KPI is zero from the year the money ran out
        net_assets = [line.net_assets for line in simulation.accounts.balance_sheet]
        return {
            "run": run,
            "seed": seed,
            "random_variables": random_variables,
            "final_net_assets": 0.0,
            "min_financial_assets": 0.0,
            "net_assets_at_first_death": 0.0,
            "net_assets_at_second_death": 0.0,
            "ruin_year": e.year,
            "net_assets": net_assets + [0.0] * (nb_of_years - len(net_assets)),
        }

    return {
        "run": run,
        "seed": seed,
        "random_variables": random_variables,
        "final_net_assets": result.final_net_assets,
        "min_financial_assets": result.min_financial_assets,
        "net_assets_at_first_death": result.net_assets_at_first_death,
        "net_assets_at_second_death": result.net_assets_at_second_death,
        "ruin_year": None,
        "net_assets": [line.net_assets for line in result.balance_sheet],
    }


def run_batch_worker(args: tuple) -> list[dict[str, Any]]:
    """
    Worker function to compute a batch of trials.

    This reduces IPC overhead by processing multiple trials per worker.

    Args:
        args: Tuple of (runs_and_seeds, fiscal_config, economy_config, family, patrimoine, nb_of_years, first_year)

    Returns:
        List of trial summary dicts
    """
    (
        runs_and_seeds,
        fiscal_config,
        economy_config,
        family,
        patrimoine,
        nb_of_years,
        first_year,
    ) = args

    return [
        run_trial_worker((run, seed, fiscal_config, economy_config, family, patrimoine, nb_of_years, first_year))
        for run, seed in runs_and_seeds
    ]
