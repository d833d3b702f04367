"""Daily updates to an individual's host state: exposure, health care, travel, sepsis."""

from __future__ import annotations

import random

from amrsim.parameters import Parameters
from amrsim.population import (
    BACTERIA_LIST,
    GEOGRAPHIC_REGIONS,
    HospitalStatus,
    Individual,
    Region,
)

VISIT_LENGTH_DAYS = 30
VACCINATION_FLIP_PROBABILITY = 0.0001
TOXICITY_DAILY_FLUCTUATION = 0.5


def _chance(rng: random.Random, probability: float) -> bool:
    """Bernoulli draw; the probability must lie in [0, 1]."""
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"probability {probability} is outside [0, 1]")
    return rng.random() < probability


def _param(params: Parameters, name: str, default: float) -> float:
    value = params.global_param(name)
    return default if value is None else value


def _region_key(region: Region) -> str:
    return str(region).lower().replace(" ", "_")


def update_contact_levels(individual: Individual, params: Parameters, rng: random.Random) -> None:
    """Redraw the five contact and exposure levels around their age- and setting-based targets."""
    fluctuation = _param(params, "contact_level_daily_fluctuation_range", 0.5)
    low = _param(params, "min_contact_level", 0.0)
    high = _param(params, "max_contact_level", 10.0)

    def fluctuate(base: float) -> float:
        value = base + rng.uniform(-fluctuation, fluctuation)
        return min(max(value, low), high)

    age = float(individual.age)
    hospitalized = individual.hospital_status.is_hospitalized()

    # sexual contact
    peak = _param(params, "sexual_contact_age_peak_days", 25.0 * 365.0)
    decline = _param(params, "sexual_contact_age_decline_rate", 0.00005)
    sexual_hospital = _param(params, "sexual_contact_hospital_multiplier", 0.0)
    sexual = _param(params, "sexual_contact_baseline", 5.0)
    if age < peak:
        exponent = _param(params, "sexual_contact_age_rise_exponent", 2.0)
        sexual *= min(age / peak, 1.0) ** exponent
    else:
        sexual *= max(1.0 - (age - peak) * decline, 0.0)
    if hospitalized:
        sexual *= sexual_hospital
    individual.sexual_contact_level = fluctuate(sexual)

    # airborne contact with adults
    adult = _param(params, "airborne_contact_adult_baseline", 5.0)
    adult_breakpoint = _param(params, "airborne_contact_adult_age_breakpoint_days", 18.0 * 365.0)
    airborne_hospital = _param(params, "airborne_contact_in_hospital_multiplier", 1.5)
    adult_child = _param(params, "airborne_contact_adult_child_multiplier", 0.2)
    if age < adult_breakpoint:
        adult *= adult_child
    if hospitalized:
        adult *= airborne_hospital
    individual.airborne_contact_level_with_adults = fluctuate(adult)

    # airborne contact with children
    child = _param(params, "airborne_contact_child_baseline", 3.0)
    child_breakpoint = _param(params, "airborne_contact_child_age_breakpoint_days", 12.0 * 365.0)
    child_adult = _param(params, "airborne_contact_child_adult_multiplier", 0.5)
    if age < child_breakpoint:
        child *= _param(params, "airborne_contact_child_child_multiplier", 1.5)
    else:
        child *= child_adult
    if hospitalized:
        child *= airborne_hospital
    individual.airborne_contact_level_with_children = fluctuate(child)

    # oral exposure
    oral = _param(params, "oral_exposure_baseline", 2.0)
    oral_breakpoint = _param(params, "oral_exposure_child_age_breakpoint_days", 5.0 * 365.0)
    oral_child = _param(params, "oral_exposure_child_multiplier", 3.0)
    oral_hospital = _param(params, "oral_exposure_in_hospital_multiplier", 0.8)
    if age < oral_breakpoint:
        oral *= oral_child
    if hospitalized:
        oral *= oral_hospital
    individual.oral_exposure_level = fluctuate(oral)

    # mosquito exposure
    mosquito = _param(params, "mosquito_exposure_baseline", 1.0)
    mosquito_hospital = _param(params, "mosquito_exposure_in_hospital_multiplier", 0.2)
    region_key = f"{_region_key(individual.region_cur_in)}_mosquito_exposure_multiplier"
    mosquito *= _param(params, region_key, 1.0)
    if hospitalized:
        mosquito *= mosquito_hospital
    individual.mosquito_exposure_level = fluctuate(mosquito)


def update_immunosuppression(
    individual: Individual, params: Parameters, rng: random.Random
) -> None:
    """Move into or out of severe immunosuppression at the configured daily rates."""
    onset = _param(params, "immunosuppression_onset_rate_per_day", 0.0001)
    recovery = _param(params, "immunosuppression_recovery_rate_per_day", 0.0005)
    if individual.is_severely_immunosuppressed:
        if _chance(rng, recovery):
            individual.is_severely_immunosuppressed = False
    elif _chance(rng, onset):
        individual.is_severely_immunosuppressed = True


def fluctuate_toxicity(individual: Individual, rng: random.Random) -> None:
    """Apply a small random daily change to toxicity, never going below zero."""
    change = rng.uniform(-TOXICITY_DAILY_FLUCTUATION, TOXICITY_DAILY_FLUCTUATION)
    individual.current_toxicity = max(individual.current_toxicity + change, 0.0)


def update_hospitalization(individual: Individual, params: Parameters, rng: random.Random) -> None:
    """Admit, keep or discharge the individual from hospital."""
    baseline_rate = params.require("hospitalization_baseline_rate_per_day")
    age_multiplier = params.require("hospitalization_age_multiplier_per_day")
    recovery_rate = params.require("hospitalization_recovery_rate_per_day")
    max_days = params.require("hospitalization_max_days")

    if not individual.hospital_status.is_hospitalized():
        probability = baseline_rate + individual.age * age_multiplier
        if rng.random() < probability:
            individual.hospital_status = HospitalStatus.IN_HOSPITAL
            individual.days_hospitalized = 0
        return

    individual.days_hospitalized += 1
    if rng.random() < recovery_rate or individual.days_hospitalized >= int(max_days):
        individual.hospital_status = HospitalStatus.NOT_IN_HOSPITAL
        individual.days_hospitalized = 0


def update_travel(individual: Individual, params: Parameters, rng: random.Random) -> None:
    """Start a visit to another region, or advance and end a visit in progress."""
    base_probability = params.require("travel_probability_per_day")
    multiplier_key = f"{_region_key(individual.region_living)}_travel_multiplier"
    travel_probability = base_probability * _param(params, multiplier_key, 1.0)

    if individual.region_cur_in is Region.HOME:
        if (
            not individual.hospital_status.is_hospitalized()
            and rng.random() < travel_probability
        ):
            destinations = [r for r in GEOGRAPHIC_REGIONS if r != individual.region_living]
            individual.region_cur_in = rng.choice(destinations)
            individual.days_visiting = 1
        return

    individual.days_visiting += 1
    if individual.days_visiting >= VISIT_LENGTH_DAYS:
        individual.region_cur_in = Region.HOME
        individual.days_visiting = 0


def _bacteria_or_default(params: Parameters, bacteria: str, name: str) -> float:
    value = params.bacteria_param(bacteria, name)
    if value is not None:
        return value
    return params.require(f"default_{name}")


def update_sepsis(
    individual: Individual, time_step: int, params: Parameters, rng: random.Random
) -> None:
    """Possibly develop sepsis from each current infection; clear it where none remains."""
    for b_idx, bacteria in enumerate(BACTERIA_LIST):
        level = individual.level[b_idx]
        if level <= 0.0:
            individual.sepsis[b_idx] = False
            continue
        duration = max(time_step - individual.date_last_infected[b_idx], 0)
        baseline = _bacteria_or_default(params, bacteria, "sepsis_baseline_risk_per_day")
        level_multiplier = _bacteria_or_default(params, bacteria, "sepsis_level_multiplier")
        duration_multiplier = _bacteria_or_default(params, bacteria, "sepsis_duration_multiplier")
        category = params.bacteria_sepsis_risk_multiplier(bacteria)
        probability = (
            baseline + level * level_multiplier + duration * duration_multiplier
        ) * category
        if rng.random() < min(probability, 1.0):
            individual.sepsis[b_idx] = True


def update_vaccination(individual: Individual, rng: random.Random) -> None:
    """Rarely toggle vaccination status for each bacteria."""
    individual.vaccination_status = [
        not vaccinated if rng.random() < VACCINATION_FLIP_PROBABILITY else vaccinated
        for vaccinated in individual.vaccination_status
    ]