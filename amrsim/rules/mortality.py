"""Daily risk of death from background causes, sepsis and drug adverse events."""

from __future__ import annotations

import random

from amrsim.parameters import Parameters
from amrsim.population import DRUG_SHORT_NAMES, HospitalStatus, Individual, Region

ELDERLY_AGE_YEARS = 65.0


def _param(params: Parameters, name: str, default: float) -> float:
    value = params.global_param(name)
    return default if value is None else value


def _region_key(region: Region) -> str:
    return str(region).lower().replace(" ", "_")


def background_mortality_risk(individual: Individual, params: Parameters) -> float:
    """Daily all-cause risk from age, region, sex, immunosuppression and hospital stay."""
    base = params.require("base_background_mortality_rate_per_day")
    age_multiplier = params.require("age_mortality_multiplier_per_year")
    age_years = individual.age / 365.0

    risk = base * age_years * age_multiplier
    age_squared_multiplier = _param(params, "age_squared_mortality_multiplier", 0.0)
    if age_years > ELDERLY_AGE_YEARS:
        risk *= (age_years - ELDERLY_AGE_YEARS) ** 2 * age_squared_multiplier

    risk *= _param(params, f"{_region_key(individual.region_living)}_mortality_multiplier", 1.0)
    risk *= _param(params, f"{individual.sex_at_birth.lower()}_mortality_multiplier", 1.0)
    if individual.is_severely_immunosuppressed:
        risk *= _param(params, "immunosuppressed_mortality_multiplier", 1.0)
    if individual.hospital_status is HospitalStatus.IN_HOSPITAL:
        risk *= _param(params, "hospital_mortality_multiplier", 1.0)
    return risk


def sepsis_death_risk(individual: Individual, params: Parameters) -> float:
    """Daily risk of death for someone with sepsis, capped at 1."""
    risk = params.require("base_sepsis_death_risk_per_day")
    age_years = individual.age / 365.0
    if age_years < 1.0:
        risk *= _param(params, "sepsis_age_mortality_multiplier_infant", 3.0)
    elif age_years < 18.0:
        risk *= _param(params, "sepsis_age_mortality_multiplier_child", 0.5)
    elif age_years < ELDERLY_AGE_YEARS:
        risk *= _param(params, "sepsis_age_mortality_multiplier_adult", 1.0)
    else:
        risk *= _param(params, "sepsis_age_mortality_multiplier_elderly", 2.5)
    risk *= _param(
        params, f"{_region_key(individual.region_living)}_sepsis_mortality_multiplier", 1.0
    )
    if individual.is_severely_immunosuppressed:
        risk *= _param(params, "sepsis_immunosuppressed_multiplier", 3.0)
    return min(risk, 1.0)


def _drug_adverse_event_risk(individual: Individual, params: Parameters) -> float:
    risk = 0.0
    for drug, level in zip(DRUG_SHORT_NAMES, individual.cur_level_drug):
        if level > 0.0:
            drug_risk = params.drug_param(drug, "adverse_event_death_risk")
            risk = min(risk + (drug_risk or 0.0), 1.0)
    return risk


def update_mortality(
    individual: Individual, time_step: int, params: Parameters, rng: random.Random
) -> None:
    """Decide whether the individual dies today, recording when and why."""
    if individual.is_dead():
        return

    cause: str | None = None
    background = background_mortality_risk(individual, params)
    individual.background_all_cause_mortality_rate = min(background, 1.0)
    survival = 1.0 - background

    if any(individual.sepsis):
        survival *= 1.0 - sepsis_death_risk(individual, params)
        cause = cause or "sepsis_related"

    adverse = _drug_adverse_event_risk(individual, params)
    individual.mortality_risk_current_toxicity = adverse
    if adverse > 0.0:
        survival *= 1.0 - adverse
        cause = cause or "drug_toxicity_related"

    death_probability = min(max(1.0 - survival, 0.0), 1.0)
    if rng.random() < death_probability:
        individual.date_of_death = time_step
        individual.cause_of_death = cause or "background_mortality"