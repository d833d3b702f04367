"""One day of the model for one individual."""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence

from amrsim.parameters import Parameters
from amrsim.population import BACTERIA_LIST, Individual
from amrsim.rules.bacteria import (
    MajorityRPool,
    apply_cross_resistance,
    progress_resistance,
    update_uninfected,
)
from amrsim.rules.drugs import apply_drug_toxicity, initiate_drugs, stop_drugs, update_drug_levels
from amrsim.rules.host import (
    fluctuate_toxicity,
    update_contact_levels,
    update_hospitalization,
    update_immunosuppression,
    update_sepsis,
    update_travel,
    update_vaccination,
)
from amrsim.rules.mortality import update_mortality
from amrsim.rules.progression import (
    clear_if_resolved,
    update_bacteria_level,
    update_immunity,
    update_testing,
)

INFECTED_LEVEL = 0.001


def apply_rules(
    individual: Individual,
    time_step: int,
    params: Parameters,
    majority_r_pool: MajorityRPool,
    cross_resistance_groups: Mapping[int, Sequence[Sequence[int]]],
    rng: random.Random,
) -> None:
    """Advance an individual by one day.

    The unborn only age; the dead are left untouched.
    """
    if not individual.is_born():
        individual.age += 1
        return
    if individual.is_dead():
        return

    individual.age += 1

    update_contact_levels(individual, params, rng)
    update_immunosuppression(individual, params, rng)
    fluctuate_toxicity(individual, rng)
    update_hospitalization(individual, params, rng)
    update_travel(individual, params, rng)
    update_sepsis(individual, time_step, params, rng)
    update_vaccination(individual, rng)

    stop_drugs(individual, time_step, params, rng)
    update_drug_levels(individual, params)
    initiate_drugs(individual, time_step, params, rng)
    apply_drug_toxicity(individual, params)

    update_mortality(individual, time_step, params, rng)

    for b_idx in range(len(BACTERIA_LIST)):
        infected = individual.level[b_idx] > INFECTED_LEVEL
        if infected:
            progress_resistance(individual, b_idx, params, rng)
        else:
            update_uninfected(individual, b_idx, time_step, params, majority_r_pool, rng)
        update_testing(individual, b_idx, time_step, params, rng)
        if infected:
            update_bacteria_level(individual, b_idx, params)
        clear_if_resolved(individual, b_idx)
        apply_cross_resistance(individual, b_idx, cross_resistance_groups)
        update_immunity(individual, b_idx, infected, time_step, params)