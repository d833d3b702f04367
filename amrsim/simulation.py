"""Running the model over a population for a number of daily time steps."""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence

from amrsim.parameters import Parameters
from amrsim.population import (
    BACTERIA_INDEX,
    DRUG_INDEX,
    Individual,
    Population,
    new_population,
)
from amrsim.rules.engine import INFECTED_LEVEL, apply_rules

logger = logging.getLogger(__name__)

CrossResistanceGroups = dict[int, list[list[int]]]
MajorityRPool = dict[tuple[int, bool, int, int], list[float]]


def index_cross_resistance_groups(
    raw_groups: Mapping[str, Iterable[Iterable[str]]],
) -> CrossResistanceGroups:
    """Turn bacteria-name -> drug-name groups into bacteria-index -> drug-index groups.

    Unknown bacteria are dropped, as are unknown drugs within a group.
    """
    indexed: CrossResistanceGroups = {}
    for bacteria, groups in raw_groups.items():
        b_idx = BACTERIA_INDEX.get(bacteria)
        if b_idx is None:
            continue
        indexed[b_idx] = [
            [DRUG_INDEX[drug] for drug in group if drug in DRUG_INDEX] for group in groups
        ]
    return indexed


def collect_majority_r_pool(individuals: Iterable[Individual]) -> MajorityRPool:
    """Gather positive majority_r values from current infections.

    Keys are (current region index, hospitalized, bacteria index, drug index).
    """
    pool: defaultdict[tuple[int, bool, int, int], list[float]] = defaultdict(list)
    for individual in individuals:
        region_idx = int(individual.region_cur_in)
        hospitalized = individual.hospital_status.is_hospitalized()
        for b_idx, level in enumerate(individual.level):
            if level <= INFECTED_LEVEL:
                continue
            for d_idx, resistance in enumerate(individual.resistances[b_idx]):
                if resistance.majority_r > 0.0:
                    pool[(region_idx, hospitalized, b_idx, d_idx)].append(resistance.majority_r)
    return dict(pool)


def _log_initial_state(individual: Individual) -> None:
    logger.debug(
        "initial state of individual %d: age %d days, sex %s, living in %s, currently in %s, "
        "background mortality %.4f, sexual contact %.2f, adult contact %.2f, "
        "child contact %.2f, oral exposure %.2f, mosquito exposure %.2f, toxicity %.2f",
        individual.id,
        individual.age,
        individual.sex_at_birth,
        individual.region_living,
        individual.region_cur_in,
        individual.background_all_cause_mortality_rate,
        individual.sexual_contact_level,
        individual.airborne_contact_level_with_adults,
        individual.airborne_contact_level_with_children,
        individual.oral_exposure_level,
        individual.mosquito_exposure_level,
        individual.current_toxicity,
    )


class Simulation:
    """A population advanced day by day under the model rules."""

    def __init__(
        self,
        population_size: int,
        time_steps: int,
        params: Parameters,
        cross_resistance_groups: Mapping[str, Sequence[Sequence[str]]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.params = params
        self.time_steps = time_steps
        self.population: Population = new_population(population_size, self.rng)
        self.cross_resistance_groups = index_cross_resistance_groups(
            cross_resistance_groups or {}
        )
        if self.population.individuals:
            _log_initial_state(self.population.individuals[0])

    def step(self, time_step: int) -> None:
        """Apply one day of rules to every individual."""
        pool = collect_majority_r_pool(self.population.individuals)
        for individual in self.population.individuals:
            apply_rules(
                individual,
                time_step,
                self.params,
                pool,
                self.cross_resistance_groups,
                self.rng,
            )

    def run(self) -> None:
        """Run all configured time steps in order."""
        logger.debug("running %d time steps", self.time_steps)
        for time_step in range(self.time_steps):
            self.step(time_step)