"""Per-bacteria acquisition, carriage and within-host resistance dynamics."""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence

from amrsim.parameters import Parameters
from amrsim.population import BACTERIA_LIST, DRUG_SHORT_NAMES, Individual

MajorityRPool = Mapping[tuple[int, bool, int, int], Sequence[float]]

_DEFAULT_SYNDROMES: tuple[tuple[int, float], ...] = tuple((i, 0.1) for i in range(1, 11))

SYNDROME_PROBABILITIES: dict[str, tuple[tuple[int, float], ...]] = {
    "strep_pneu": ((3, 0.9), (7, 0.1)),
    "haem_infl": ((3, 1.0),),
    "kleb_pneu": ((3, 0.8), (7, 0.2)),
    "salm_typhi": ((7, 1.0),),
    "salm_parat_a": ((7, 1.0),),
    "inv_nt_salm": ((7, 1.0),),
    "shig_spec": ((7, 1.0),),
    "esch_coli": ((7, 0.7), (8, 0.3)),
    "n_gonorrhoeae": ((8, 1.0),),
    "group_a_strep": ((9, 1.0),),
    "group_b_strep": ((10, 1.0),),
}

DRUG_PRESENT_LEVEL = 0.0001
EMERGENCE_EFFECTIVE_ZERO = 0.0001


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


def _bacteria_or_required(params: Parameters, bacteria: str, name: str) -> float:
    value = params.bacteria_param(bacteria, name)
    if value is not None:
        return value
    return params.require(f"default_{name}")


def assign_syndrome(bacteria: str, rng: random.Random) -> int:
    """Draw an infectious syndrome id for a newly acquired infection."""
    table = SYNDROME_PROBABILITIES.get(bacteria, _DEFAULT_SYNDROMES)
    ids = [syndrome for syndrome, _ in table]
    weights = [weight for _, weight in table]
    return rng.choices(ids, weights=weights)[0]


def apply_cross_resistance(
    individual: Individual,
    b_idx: int,
    cross_resistance_groups: Mapping[int, Sequence[Sequence[int]]],
) -> None:
    """Raise any_r of every drug in a group to the highest any_r in that group."""
    if not 0 <= b_idx < len(individual.resistances):
        return
    row = individual.resistances[b_idx]
    for group in cross_resistance_groups.get(b_idx, ()):
        members = [row[d_idx] for d_idx in group if 0 <= d_idx < len(row)]
        highest = max((r.any_r for r in members), default=0.0)
        if highest > 0.0:
            for resistance in members:
                resistance.any_r = highest


def acquisition_probability(individual: Individual, b_idx: int, params: Parameters) -> float:
    """Daily probability of acquiring an infection with one bacteria (unclamped)."""
    bacteria = BACTERIA_LIST[b_idx]
    probability = _bacteria_param(params, bacteria, "acquisition_prob_baseline", 0.01)

    exposures = (
        ("sexual_contact_acq_rate_ratio_per_unit", individual.sexual_contact_level),
        ("adult_contact_acq_rate_ratio_per_unit", individual.airborne_contact_level_with_adults),
        ("child_contact_acq_rate_ratio_per_unit", individual.airborne_contact_level_with_children),
        ("oral_exposure_acq_rate_ratio_per_unit", individual.oral_exposure_level),
        ("mosquito_exposure_acq_rate_ratio_per_unit", individual.mosquito_exposure_level),
    )
    for name, level in exposures:
        probability *= _bacteria_param(params, bacteria, name, 1.0) ** level

    if individual.vaccination_status[b_idx]:
        probability *= 1.0 - _bacteria_param(params, bacteria, "vaccine_efficacy", 0.0)

    if individual.presence_microbiome[b_idx]:
        probability *= _bacteria_or_required(
            params, bacteria, "microbiome_infection_acquisition_multiplier"
        )

    if individual.hospital_status.is_hospitalized():
        probability *= _bacteria_param(params, bacteria, "hospital_acquired_multiplier", 1.0)

    probability *= params.age_infection_multiplier(bacteria, individual.age)

    region = str(individual.region_cur_in).lower().replace(" ", "_")
    specific = params.global_param(
        f"{region}_{bacteria.replace(' ', '_')}_infection_risk_multiplier"
    )
    if specific is None:
        specific = _param(params, f"{region}_infection_risk_multiplier_default", 1.0)
    return probability * specific


def _update_microbiome(
    individual: Individual,
    b_idx: int,
    base_probability: float,
    params: Parameters,
    rng: random.Random,
) -> None:
    bacteria = BACTERIA_LIST[b_idx]
    max_r = _param(params, "max_resistance_level", 1.0)
    row = individual.resistances[b_idx]

    if not individual.presence_microbiome[b_idx]:
        multiplier = _bacteria_or_required(params, bacteria, "microbiome_acquisition_multiplier")
        if _chance(rng, _clamp(base_probability * multiplier, 0.0, 1.0)):
            individual.presence_microbiome[b_idx] = True
            # carriage is always picked up from the environment
            env_level = _param(params, "environmental_majority_r_level_for_new_acquisition", 0.0)
            for resistance in row:
                resistance.microbiome_r = env_level
        return

    clearance = _bacteria_or_required(params, bacteria, "microbiome_clearance_probability_per_day")
    if _chance(rng, clearance):
        individual.presence_microbiome[b_idx] = False
        return

    rate = params.global_param("microbiome_resistance_emergence_rate_per_day_baseline")
    if rate is None:
        rate = _param(params, "resistance_emergence_rate_per_day_baseline", 0.000001)
    emergence_level = _param(params, "any_r_emergence_level_on_first_emergence", 0.5)
    for resistance, drug_level in zip(row, individual.cur_level_drug):
        if drug_level > DRUG_PRESENT_LEVEL and resistance.microbiome_r < EMERGENCE_EFFECTIVE_ZERO:
            if _chance(rng, _clamp(rate, 0.0, 1.0)):
                resistance.microbiome_r = min(emergence_level, max_r)


def _transfer_resistance(
    individual: Individual, b_idx: int, params: Parameters, rng: random.Random
) -> None:
    """Share resistance between the infection site and the microbiome."""
    transfer_probability = _param(params, "microbiome_resistance_transfer_probability_per_day", 0.05)
    row = individual.resistances[b_idx]
    if not individual.presence_microbiome[b_idx]:
        for resistance in row:
            resistance.microbiome_r = 0.0
        return
    if individual.level[b_idx] <= 0.0:
        return
    for resistance in row:
        site_only = resistance.any_r > 0.0 and resistance.microbiome_r == 0.0
        carriage_only = resistance.microbiome_r > 0.0 and resistance.any_r == 0.0
        if (site_only or carriage_only) and _chance(rng, transfer_probability):
            if site_only:
                resistance.microbiome_r = resistance.any_r
            else:
                resistance.any_r = resistance.microbiome_r


def _acquire_infection(
    individual: Individual,
    b_idx: int,
    time_step: int,
    params: Parameters,
    majority_r_pool: MajorityRPool,
    rng: random.Random,
) -> None:
    bacteria = BACTERIA_LIST[b_idx]
    individual.level[b_idx] = _bacteria_param(params, bacteria, "initial_infection_level", 0.01)
    individual.date_last_infected[b_idx] = time_step
    individual.infectious_syndrome[b_idx] = assign_syndrome(bacteria, rng)

    env_share = _bacteria_param(params, bacteria, "environmental_acquisition_proportion", 0.1)
    from_environment = rng.random() < env_share
    hospitalized = individual.hospital_status.is_hospitalized()
    individual.cur_infection_from_environment[b_idx] = from_environment
    individual.infection_hospital_acquired[b_idx] = hospitalized

    env_level = _param(params, "environmental_majority_r_level_for_new_acquisition", 0.0)
    hospital_level = _param(params, "hospital_majority_r_level_for_new_acquisition", 0.0)
    max_r = _param(params, "max_resistance_level", 1.0)
    region_idx = int(individual.region_cur_in)

    for d_idx, resistance in enumerate(individual.resistances[b_idx]):
        if from_environment:
            level = env_level
        elif hospitalized:
            level = hospital_level
        else:
            pool = majority_r_pool.get((region_idx, hospitalized, b_idx, d_idx))
            level = max(min(rng.choice(pool), max_r), 0.0) if pool else 0.0
        resistance.majority_r = level
        resistance.any_r = level


def update_uninfected(
    individual: Individual,
    b_idx: int,
    time_step: int,
    params: Parameters,
    majority_r_pool: MajorityRPool,
    rng: random.Random,
) -> None:
    """Carriage changes, resistance transfer and possible new infection for one bacteria.

    ``majority_r_pool`` maps (region index, hospitalized, bacteria index, drug
    index) to majority_r values seen in the population, used to seed
    resistance in community-acquired infections.
    """
    probability = acquisition_probability(individual, b_idx, params)
    _update_microbiome(individual, b_idx, probability, params, rng)
    _transfer_resistance(individual, b_idx, params, rng)
    if _chance(rng, _clamp(probability, 0.0, 1.0)):
        _acquire_infection(individual, b_idx, time_step, params, majority_r_pool, rng)


def _emergence_probability(
    params: Parameters, bacteria: str, drug: str, drug_level: float, bacteria_level: float
) -> float:
    baseline = _param(
        params,
        f"drug_{drug}_for_bacteria_{bacteria}_resistance_emergence_rate_per_day_baseline",
        0.000001,
    )
    level_effect = _param(params, "resistance_emergence_bacteria_level_multiplier", 0.05)
    max_level = _bacteria_param(params, bacteria, "max_level", 100.0)
    level_factor = _clamp(bacteria_level / max_level, 0.0, 1.0) * level_effect

    initial_level = params.drug_param(drug, "initial_level")
    if initial_level is None:
        initial_level = 10.0
    normalized = _clamp(drug_level / initial_level, 0.0, 10.0)
    # bell-shaped in the normalised drug level: 0.1 at the ends, peaking at 5
    activity_factor = _clamp(0.1 + 0.02 * normalized * (10.0 - normalized), 0.0, 1.0)
    return baseline * (1.0 + level_factor) * activity_factor


def progress_resistance(
    individual: Individual, b_idx: int, params: Parameters, rng: random.Random
) -> None:
    """Evolve resistance within a current infection and recompute drug activity."""
    bacteria = BACTERIA_LIST[b_idx]
    evolution_rate = _param(params, "majority_r_evolution_rate_per_day_when_drug_present", 0.0)
    max_r = _param(params, "max_resistance_level", 1.0)
    bacteria_level = individual.level[b_idx]
    emergence_level = _param(params, "any_r_emergence_level_on_first_emergence", 0.5)

    for drug, drug_level, resistance in zip(
        DRUG_SHORT_NAMES, individual.cur_level_drug, individual.resistances[b_idx]
    ):
        drug_present = drug_level > DRUG_PRESENT_LEVEL

        if resistance.majority_r == 0.0 and resistance.any_r > 0.0 and drug_present:
            if _chance(rng, evolution_rate):
                resistance.majority_r = resistance.any_r

        if (
            resistance.majority_r == 0.0
            and 0.0 < resistance.any_r < max_r
            and drug_present
        ):
            increase = _param(params, "any_r_increase_rate_per_day_when_drug_present", 0.05)
            resistance.any_r = min(resistance.any_r + increase, max_r)

        resistance.majority_r = max(min(resistance.majority_r, max_r), 0.0)
        resistance.any_r = max(min(resistance.any_r, max_r), 0.0)

        if (
            resistance.any_r < EMERGENCE_EFFECTIVE_ZERO
            and drug_present
            and bacteria_level > EMERGENCE_EFFECTIVE_ZERO
        ):
            probability = _emergence_probability(
                params, bacteria, drug, drug_level, bacteria_level
            )
            if _chance(rng, _clamp(probability, 0.0, 1.0)):
                resistance.any_r = emergence_level

        if drug_level > 0.0:
            potency = _param(params, f"drug_{drug}_for_bacteria_{bacteria}_potency_when_no_r", 0.05)
            resistance.activity_r = potency * drug_level * (1.0 - resistance.any_r / max_r)
        else:
            resistance.activity_r = 0.0