"""Monte-Carlo runner: many stochastic trials of the same household.

Each trial owns its driver and its economy provider, seeded from a
`numpy.random.SeedSequence`, so trials are independent and replayable.
"""

from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
import pandas as pd

from patrimoine.application.services.economy import EconomyConfig, SimulationMode, StochasticEconomyModel
from patrimoine.application.services.simulation import Simulation, SimulationResult
from patrimoine.core.exceptions import InvalidParameterError
from patrimoine.core.logging import get_logger
from patrimoine.core.settings import get_settings
from patrimoine.domain.calculator.taxes import FiscalModel
from patrimoine.domain.models.family import Family
from patrimoine.domain.models.fiscal import FiscalConfig
from patrimoine.domain.models.patrimoine import Patrimoine
from patrimoine.services.parallel_worker import run_batch_worker

log = get_logger(__name__)

PERCENTILES = (10, 25, 50, 75, 90)


@dataclass(frozen=True)
class MonteCarloResult:
    """Outcome of a Monte-Carlo run.

    Attributes:
        runs: One row per trial (run, seed, drawn variables, then the
            KPIs: final net assets, minimum financial assets, net assets
            at the first and second adult death, ruin year), ordered by
            run number
        percentiles: Net assets percentiles, one row per year
    """

    runs: pd.DataFrame
    percentiles: pd.DataFrame

    @property
    def nb_of_runs(self) -> int:
        return len(self.runs)


def seeds_for(seed: Optional[int], nb_of_runs: int) -> list[int]:
    """Independent integer seeds, one per trial."""
    children = np.random.SeedSequence(seed).spawn(nb_of_runs)
    return [int(child.generate_state(1)[0]) for child in children]


def _batches(items: list[Any], nb_of_batches: int) -> list[list[Any]]:
    return [items[i::nb_of_batches] for i in range(nb_of_batches) if items[i::nb_of_batches]]


class MonteCarloSimulation:
    def __init__(self, fiscal_config: FiscalConfig, economy_config: EconomyConfig):
        self.fiscal_config = fiscal_config
        self.economy_config = economy_config

    def run(
        self,
        nb_of_runs: int,
        nb_of_years: int,
        family: Family,
        patrimoine: Patrimoine,
        first_year: int,
        seed: Optional[int] = None,
        max_workers: Optional[int] = None,
    ) -> MonteCarloResult:
        """Compute `nb_of_runs` trials.

        Args:
            nb_of_runs: Number of trials
            nb_of_years: Years simulated per trial
            family: The household
            patrimoine: Its assets and liabilities
            first_year: First simulated year
            seed: Root seed; None draws fresh entropy
            max_workers: Worker processes, from the settings when None;
                1 runs the trials in-process

        Returns:
            Per-run table and per-year percentiles
        """
        if nb_of_runs < 1:
            raise InvalidParameterError("nb_of_runs", nb_of_runs, "must be >= 1")
        if max_workers is None:
            max_workers = get_settings().max_workers
        if max_workers is not None and max_workers < 1:
            raise InvalidParameterError("max_workers", max_workers, "must be >= 1")

        runs_and_seeds = list(enumerate(seeds_for(seed, nb_of_runs), start=1))
        common = (self.fiscal_config, self.economy_config, family, patrimoine, nb_of_years, first_year)

        if max_workers == 1:
            trials = run_batch_worker((runs_and_seeds, *common))
        else:
            trials = []
            nb_of_batches = max_workers or os.cpu_count() or 1
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                futures = [
                    executor.submit(run_batch_worker, (batch, *common))
                    for batch in _batches(runs_and_seeds, nb_of_batches)
                ]
                for future in as_completed(futures):
                    trials.extend(future.result())

        trials.sort(key=lambda t: t["run"])
        result = MonteCarloResult(
            runs=self._runs_table(trials),
            percentiles=self._percentiles(trials, first_year, nb_of_years),
        )
        log.info(
            "monte_carlo_completed",
            nb_of_runs=nb_of_runs,
            seed=seed,
            median_final_net_assets=round(float(result.runs["final_net_assets"].median()), 2),
        )
        return result

    def replay(
        self,
        run_seed: int,
        nb_of_years: int,
        family: Family,
        patrimoine: Patrimoine,
        first_year: int,
    ) -> SimulationResult:
        """Recompute one trial from its seed."""
        economy = StochasticEconomyModel(
            self.economy_config,
            first_year=first_year,
            last_year=first_year + nb_of_years - 1,
            seed=run_seed,
        )
        simulation = Simulation(
            FiscalModel.from_config(self.fiscal_config),
            economy,
            mode=SimulationMode.RANDOM,
            title=f"Replay {run_seed}",
        )
        return simulation.compute(nb_of_years, family, patrimoine, first_year=first_year)

    @staticmethod
    def _runs_table(trials: list[dict[str, Any]]) -> pd.DataFrame:
        rows = [
            {
                "run": t["run"],
                "seed": t["seed"],
                **t["random_variables"],
                "final_net_assets": t["final_net_assets"],
                "min_financial_assets": t["min_financial_assets"],
                "net_assets_at_first_death": t["net_assets_at_first_death"],
                "net_assets_at_second_death": t["net_assets_at_second_death"],
                "ruin_year": t["ruin_year"],
            }
            for t in trials
        ]
        return pd.DataFrame(rows)

    @staticmethod
    def _percentiles(trials: list[dict[str, Any]], first_year: int, nb_of_years: int) -> pd.DataFrame:
        net_assets = np.array([t["net_assets"] for t in trials])
        values = np.percentile(net_assets, PERCENTILES, axis=0)
        return pd.DataFrame(
            values.T,
            index=pd.Index(range(first_year, first_year + nb_of_years), name="year"),
            columns=[f"p{p}" for p in PERCENTILES],
        )
