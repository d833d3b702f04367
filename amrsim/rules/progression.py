"""Per-bacteria diagnosis, level change, clearance and immunity for an individual."""

from __future__ import annotations

import random

from amrsim.parameters import Parameters
from amrsim.population import BACTERIA_LIST, Individual

RESOLVED_LEVEL = 0.0001
TEST_R_ZERO = 0.001
MIN_IMMUNE_RESPONSE_WHEN_INFECTED = 0.0001


def _chance(rng: random.Random, probability: float) -> bool:
    """Bernoulli draw; the probability must lie in [0, 1]."""
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"probability {probability} is outside [0, 1]")
    return rng.random() < probability


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _param(params: Parameters, name: str, default: float) -> float:
    value = params.global_param(name)
    return default if value is None else value


def _bacteria_param(params: Parameters, bacteria: str, name: str, default: float) -> float:
    value = params.bacteria_param(bacteria, name)
    return default if value is None else value


def update_testing(
    individual: Individual,
    b_idx: int,
    time_step: int,
    params: Parameters,
    rng: random.Random,
) -> None:
    """Possibly identify the infection by test, then record resistance test results.

    Test results are only taken once per identification and may be wrong
    with the configured error probability.
    """
    delay = int(_param(params, "test_delay_days", 3.0))
    rate = _param(params, "test_rate_per_day", 0.15)
    identified = individual.test_identified_infection
    if not identified[b_idx] and time_step >= individual.date_last_infected[b_idx] + delay:
        if _chance(rng, _clamp(rate, 0.0, 1.0)):
            identified[b_idx] = True

    done_probability = _param(params, "prob_test_r_done", 0.95)
    error_probability = _param(params, "test_r_error_probability", 0.02)
    error_value = _param(params, "test_r_error_value", 0.25)

    row = individual.resistances[b_idx]
    if not identified[b_idx]:
        for resistance in row:
            resistance.test_r = 0.0
        return
    if any(resistance.test_r > 0.0 for resistance in row):
        return
    if not _chance(rng, done_probability):
        return
    for resistance in row:
        if _chance(rng, error_probability):
            resistance.test_r = error_value if resistance.any_r < TEST_R_ZERO else 0.0
        else:
            resistance.test_r = resistance.any_r


def update_bacteria_level(individual: Individual, b_idx: int, params: Parameters) -> None:
    """Apply the day's growth or decay from baseline change, immunity and drug activity."""
    bacteria = BACTERIA_LIST[b_idx]
    immunity = individual.immune_resp[b_idx]
    baseline_change = _bacteria_param(params, bacteria, "base_bacteria_level_change", 0.0)
    immune_effect = _bacteria_param(params, bacteria, "immunity_effect_on_level_change", 0.0)
    drug_effect = sum(
        resistance.activity_r
        for resistance, drug_level in zip(
            individual.resistances[b_idx], individual.cur_level_drug
        )
        if drug_level > 0.0
    )
    change = baseline_change - immunity * immune_effect - drug_effect
    max_level = _bacteria_param(params, bacteria, "max_level", 100.0)
    individual.level[b_idx] = _clamp(individual.level[b_idx] + change, 0.0, max_level)


def clear_if_resolved(individual: Individual, b_idx: int) -> bool:
    """Reset all infection state for a bacteria whose level has fallen away.

    Returns whether the infection was cleared.
    """
    if individual.level[b_idx] >= RESOLVED_LEVEL:
        return False
    for resistance in individual.resistances[b_idx]:
        resistance.any_r = 0.0
        resistance.majority_r = 0.0
        resistance.activity_r = 0.0
    individual.level[b_idx] = 0.0
    individual.infectious_syndrome[b_idx] = 0
    individual.date_last_infected[b_idx] = 0
    individual.immune_resp[b_idx] = 0.0
    individual.sepsis[b_idx] = False
    individual.presence_microbiome[b_idx] = False
    individual.infection_hospital_acquired[b_idx] = False
    individual.cur_infection_from_environment[b_idx] = False
    individual.test_identified_infection[b_idx] = False
    return True


def update_immunity(
    individual: Individual,
    b_idx: int,
    was_infected: bool,
    time_step: int,
    params: Parameters,
) -> None:
    """Build immunity during an infection and let it wane otherwise."""
    bacteria = BACTERIA_LIST[b_idx]
    if not was_infected:
        decay = _param(params, "immune_decay_rate_per_day", 0.02)
        individual.immune_resp[b_idx] = max(individual.immune_resp[b_idx] - decay, 0.0)
        return

    days_infected = time_step - individual.date_last_infected[b_idx]
    increase = _bacteria_param(params, bacteria, "immunity_base_response", 0.0)
    increase += days_infected * _bacteria_param(
        params, bacteria, "immunity_increase_per_infection_day", 0.0
    )
    increase += individual.level[b_idx] * _bacteria_param(
        params, bacteria, "immunity_increase_per_unit_higher_bacteria_level", 0.0
    )
    age_modifier = _bacteria_param(params, bacteria, "immunity_age_modifier", 1.0)
    increase *= age_modifier ** ((individual.age / 365.0) / 50.0)
    if individual.is_severely_immunosuppressed:
        increase *= _bacteria_param(params, bacteria, "immunity_immunodeficiency_modifier", 0.1)
    max_response = _bacteria_param(params, bacteria, "max_immune_response", 10.0)
    individual.immune_resp[b_idx] = _clamp(
        individual.immune_resp[b_idx] + increase,
        MIN_IMMUNE_RESPONSE_WHEN_INFECTED,
        max_response,
    )