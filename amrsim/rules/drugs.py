"""Daily antibiotic use: stopping, decay, initiation and drug toxicity."""

from __future__ import annotations

import math
import random

from amrsim.parameters import Parameters
from amrsim.population import BACTERIA_LIST, DRUG_SHORT_NAMES, Individual

MAX_CONCURRENT_DRUGS = 2
MIN_AVAILABILITY = 0.01
DEFAULT_INITIAL_LEVEL = 10.0
DEFAULT_HALF_LIFE_DAYS = 0.25
NEGLIGIBLE_DRUG_LEVEL = 0.001


def _chance(rng: random.Random, probability: float) -> bool:
    """Bernoulli draw; the probability must lie in [0, 1]."""
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"probability {probability} is outside [0, 1]")
    return rng.random() < probability


def _param(params: Parameters, name: str, default: float) -> float:
    value = params.global_param(name)
    return default if value is None else value


def _drug_param(params: Parameters, drug: str, name: str, default: float) -> float:
    value = params.drug_param(drug, name)
    return default if value is None else value


def _potency(params: Parameters, drug: str, bacteria: str) -> float:
    return _param(params, f"drug_{drug}_for_bacteria_{bacteria}_potency_when_no_r", 0.0)


def stop_drugs(
    individual: Individual, time_step: int, params: Parameters, rng: random.Random
) -> None:
    """Stop drugs with no relevant infection to treat, or at random.

    A drug started on the previous time step is always continued.
    """
    cessation = _param(params, "random_drug_cessation_probability", 0.001)
    for d_idx, drug in enumerate(DRUG_SHORT_NAMES):
        if not individual.cur_use_drug[d_idx]:
            continue
        relevant = any(
            level > 0.0001 and _potency(params, drug, bacteria) > 0.0
            for bacteria, level in zip(BACTERIA_LIST, individual.level)
        )
        stop = not relevant or _chance(rng, cessation)
        if individual.date_drug_initiated[d_idx] == time_step - 1:
            stop = False
        if stop:
            individual.cur_use_drug[d_idx] = False
            individual.date_drug_initiated[d_idx] = None


def update_drug_levels(individual: Individual, params: Parameters) -> None:
    """Hold drugs in use at their dose level; decay the rest by their half-life."""
    for d_idx, drug in enumerate(DRUG_SHORT_NAMES):
        if individual.cur_use_drug[d_idx]:
            individual.cur_level_drug[d_idx] = _drug_param(
                params, drug, "initial_level", DEFAULT_INITIAL_LEVEL
            )
            continue
        half_life = _drug_param(params, drug, "half_life_days", DEFAULT_HALF_LIFE_DAYS)
        decay_factor = math.exp(-math.log(2.0) / half_life)
        level = individual.cur_level_drug[d_idx] * decay_factor
        individual.cur_level_drug[d_idx] = 0.0 if level < NEGLIGIBLE_DRUG_LEVEL else level


def _syndrome_multiplier(individual: Individual, params: Parameters) -> float:
    multiplier = 1.0
    for syndrome_id in individual.infectious_syndrome:
        if syndrome_id != 0:
            value = params.global_param(f"syndrome_{syndrome_id}_initiation_multiplier")
            if value is not None:
                multiplier = max(multiplier, value)
    return multiplier


def _bacteria_specific_multiplier(
    individual: Individual, drug: str, params: Parameters
) -> float:
    multiplier = 1.0
    for bacteria, level in zip(BACTERIA_LIST, individual.level):
        if level > 0.001:
            value = params.global_param(f"drug_{drug}_for_bacteria_{bacteria}_initiation_multiplier")
            if value is not None:
                multiplier = max(multiplier, value)
    return multiplier


def _spectrum_factor(
    individual: Individual,
    drug: str,
    params: Parameters,
    identified: bool,
    infected: bool,
) -> float:
    """Preference for narrow drugs in targeted therapy and broad ones in empiric therapy."""
    spectrum = _drug_param(params, drug, "spectrum_breadth", 3.0)
    if identified:
        good_activity = any(
            is_identified and level > 0.001 and _potency(params, drug, bacteria) > 0.02
            for bacteria, level, is_identified in zip(
                BACTERIA_LIST, individual.level, individual.test_identified_infection
            )
        )
        if not good_activity:
            return _param(params, "targeted_therapy_ineffective_drug_penalty", 0.1)
        if spectrum <= 2.5:
            return _param(params, "targeted_therapy_narrow_spectrum_bonus", 3.0)
        if spectrum >= 4.0:
            return _param(params, "targeted_therapy_broad_spectrum_penalty", 0.4)
        return 1.0
    if infected:
        if spectrum >= 3.5:
            return _param(params, "empiric_therapy_broad_spectrum_bonus", 2.0)
        if spectrum <= 2.0:
            return 0.6
    return 1.0


def initiate_drugs(
    individual: Individual, time_step: int, params: Parameters, rng: random.Random
) -> None:
    """Possibly start new drugs, never going beyond two in use at once."""
    base_rate = _param(params, "drug_base_initiation_rate_per_day", 0.0001)
    infection_multiplier = _param(params, "drug_infection_present_multiplier", 50.0)
    already_on_multiplier = _param(params, "already_on_drug_initiation_multiplier", 0.0001)
    identified_multiplier = _param(params, "drug_test_identified_multiplier", 20.0)
    double_dose_probability = _param(
        params, "double_dose_probability_if_identified_infection", 0.1
    )

    infected = any(level > 0.0 for level in individual.level)
    on_any_drug = any(individual.cur_use_drug)
    identified = any(individual.test_identified_infection)
    in_use = sum(individual.cur_use_drug)
    syndrome_multiplier = _syndrome_multiplier(individual, params)
    infected_today = any(day == time_step for day in individual.date_last_infected)
    current_region = str(individual.region_cur_in)
    living_region = str(individual.region_living)

    initiated = 0
    for d_idx, drug in enumerate(DRUG_SHORT_NAMES):
        if in_use + initiated >= MAX_CONCURRENT_DRUGS:
            break
        if any(row[d_idx].test_r > 0.0 for row in individual.resistances):
            continue
        availability = params.drug_availability(drug, current_region, living_region)
        if availability < MIN_AVAILABILITY:
            continue

        probability = base_rate * _bacteria_specific_multiplier(individual, drug, params)
        if infected and not infected_today:
            probability *= infection_multiplier
        if identified:
            probability *= identified_multiplier
        if on_any_drug or initiated > 0:
            probability *= already_on_multiplier
        probability *= syndrome_multiplier
        probability *= _spectrum_factor(individual, drug, params, identified, infected)
        probability *= availability
        probability = min(max(probability, 0.0), 1.0)

        if individual.cur_use_drug[d_idx] or not _chance(rng, probability):
            continue

        individual.cur_use_drug[d_idx] = True
        individual.date_drug_initiated[d_idx] = time_step
        individual.ever_taken_drug[d_idx] = True
        dose = _drug_param(params, drug, "initial_level", DEFAULT_INITIAL_LEVEL)
        if identified and _chance(rng, double_dose_probability):
            dose *= _drug_param(params, drug, "double_dose_multiplier", 2.0)
        individual.cur_level_drug[d_idx] = dose
        initiated += 1


def apply_drug_toxicity(individual: Individual, params: Parameters) -> None:
    """Add the day's toxicity from every drug present in the body."""
    increase = 0.0
    for drug, level in zip(DRUG_SHORT_NAMES, individual.cur_level_drug):
        if level <= 0.0:
            continue
        per_unit = params.drug_param(drug, "toxicity_per_unit_level_per_day")
        if per_unit is None:
            per_unit = params.require("default_drug_toxicity_per_unit_level_per_day")
        increase += level * per_unit
    individual.current_toxicity = max(individual.current_toxicity + increase, 0.0)