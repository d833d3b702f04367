import random

import pytest

from amrsim.parameters import MissingParameterError, Parameters
from amrsim.population import (
    BACTERIA_INDEX,
    DRUG_SHORT_NAMES,
    HospitalStatus,
    Individual,
    Region,
)
from amrsim.rules.bacteria import (
    acquisition_probability,
    apply_cross_resistance,
    assign_syndrome,
    progress_resistance,
    update_uninfected,
)

ECOLI = "escherichia coli"
B = BACTERIA_INDEX[ECOLI]
DRUG0 = DRUG_SHORT_NAMES[0]


def make_individual(**kwargs):
    defaults = dict(id=0, age=10000, sex_at_birth="female", region_living=Region.AFRICA)
    defaults.update(kwargs)
    return Individual(**defaults)


def make_params(global_params=None, bacteria=None, drugs=None):
    return Parameters(
        global_params=global_params or {},
        bacteria_params={ECOLI: bacteria or {}},
        drug_params=drugs or {},
    )


# --- assign_syndrome ---

@pytest.mark.parametrize("bacteria,expected", [("haem_infl", 3), ("salm_typhi", 7), ("group_b_strep", 10)])
def test_assign_syndrome_single_outcome(bacteria, expected):
    rng = random.Random(1)
    assert {assign_syndrome(bacteria, rng) for _ in range(50)} == {expected}


def test_assign_syndrome_two_outcomes():
    rng = random.Random(2)
    results = {assign_syndrome("esch_coli", rng) for _ in range(500)}
    assert results == {7, 8}


def test_assign_syndrome_unknown_bacteria_uses_all_ten():
    rng = random.Random(3)
    results = {assign_syndrome(ECOLI, rng) for _ in range(2000)}
    assert results == set(range(1, 11))


# --- apply_cross_resistance ---

def test_cross_resistance_spreads_maximum():
    ind = make_individual()
    ind.resistances[B][0].any_r = 0.5
    ind.resistances[B][2].any_r = 0.25
    apply_cross_resistance(ind, B, {B: [[0, 1, 2]]})
    assert [ind.resistances[B][d].any_r for d in range(3)] == [0.5, 0.5, 0.5]
    assert ind.resistances[B][3].any_r == 0.0


def test_cross_resistance_no_resistance_unchanged():
    ind = make_individual()
    apply_cross_resistance(ind, B, {B: [[0, 1]]})
    assert ind.resistances[B][0].any_r == 0.0
    assert ind.resistances[B][1].any_r == 0.0


def test_cross_resistance_other_bacteria_and_bad_indices_ignored():
    ind = make_individual()
    ind.resistances[B][0].any_r = 0.5
    apply_cross_resistance(ind, B, {B + 1: [[0, 1]]})
    assert ind.resistances[B][1].any_r == 0.0
    apply_cross_resistance(ind, B, {B: [[0, 1, 999]]})
    assert ind.resistances[B][1].any_r == 0.5


# --- acquisition_probability ---

def test_acquisition_baseline():
    ind = make_individual()
    params = make_params(bacteria={"acquisition_prob_baseline": 0.2})
    assert acquisition_probability(ind, B, params) == pytest.approx(0.2)


def test_acquisition_vaccination_reduces():
    ind = make_individual()
    params = make_params(bacteria={"acquisition_prob_baseline": 0.2, "vaccine_efficacy": 0.5})
    unvaccinated = acquisition_probability(ind, B, params)
    ind.vaccination_status[B] = True
    assert acquisition_probability(ind, B, params) == pytest.approx(unvaccinated * 0.5)


def test_acquisition_contact_multiplier_is_exponential():
    ind = make_individual(sexual_contact_level=3.0)
    params = make_params(
        bacteria={"acquisition_prob_baseline": 0.01, "sexual_contact_acq_rate_ratio_per_unit": 2.0}
    )
    low = acquisition_probability(ind, B, params)
    ind.sexual_contact_level = 4.0
    assert acquisition_probability(ind, B, params) == pytest.approx(low * 2.0)


def test_acquisition_region_specific_and_default_multiplier():
    ind = make_individual(region_cur_in=Region.ASIA)
    params = make_params(
        global_params={
            "asia_escherichia_coli_infection_risk_multiplier": 4.0,
            "asia_infection_risk_multiplier_default": 9.0,
        },
        bacteria={"acquisition_prob_baseline": 0.01},
    )
    assert acquisition_probability(ind, B, params) == pytest.approx(0.01 * 4.0)
    other = BACTERIA_INDEX["citrobacter spp."]
    assert acquisition_probability(ind, other, params) == pytest.approx(0.01 * 9.0)


def test_acquisition_microbiome_requires_default():
    ind = make_individual()
    ind.presence_microbiome[B] = True
    with pytest.raises(MissingParameterError):
        acquisition_probability(ind, B, make_params())


# --- update_uninfected ---

def infection_params(**globals_):
    base = {"default_microbiome_acquisition_multiplier": 0.0}
    base.update(globals_)
    return base


def test_new_infection_from_environment():
    ind = make_individual()
    params = make_params(
        global_params=infection_params(environmental_majority_r_level_for_new_acquisition=0.3),
        bacteria={
            "acquisition_prob_baseline": 1.0,
            "initial_infection_level": 0.02,
            "environmental_acquisition_proportion": 1.0,
        },
    )
    update_uninfected(ind, B, 7, params, {}, random.Random(0))
    assert ind.level[B] == 0.02
    assert ind.date_last_infected[B] == 7
    assert 1 <= ind.infectious_syndrome[B] <= 10
    assert ind.cur_infection_from_environment[B] is True
    assert all(r.any_r == 0.3 and r.majority_r == 0.3 for r in ind.resistances[B])


def test_new_infection_hospital_acquired():
    ind = make_individual(hospital_status=HospitalStatus.IN_HOSPITAL)
    params = make_params(
        global_params=infection_params(hospital_majority_r_level_for_new_acquisition=0.4),
        bacteria={"acquisition_prob_baseline": 1.0, "environmental_acquisition_proportion": 0.0},
    )
    update_uninfected(ind, B, 1, params, {}, random.Random(0))
    assert ind.infection_hospital_acquired[B] is True
    assert all(r.any_r == 0.4 for r in ind.resistances[B])


def test_new_community_infection_samples_pool():
    ind = make_individual(region_cur_in=Region.EUROPE)
    params = make_params(
        global_params=infection_params(max_resistance_level=1.0),
        bacteria={"acquisition_prob_baseline": 1.0, "environmental_acquisition_proportion": 0.0},
    )
    pool = {(int(Region.EUROPE), False, B, 0): [0.6, 5.0]}
    update_uninfected(ind, B, 1, params, pool, random.Random(4))
    assert ind.resistances[B][0].any_r in (0.6, 1.0)
    assert ind.resistances[B][0].majority_r == ind.resistances[B][0].any_r
    assert ind.resistances[B][1].any_r == 0.0


def test_no_acquisition_leaves_uninfected():
    ind = make_individual()
    params = make_params(
        global_params=infection_params(), bacteria={"acquisition_prob_baseline": 0.0}
    )
    update_uninfected(ind, B, 1, params, {}, random.Random(0))
    assert ind.level[B] == 0.0
    assert ind.presence_microbiome[B] is False


def test_microbiome_acquired_with_environmental_resistance():
    ind = make_individual()
    params = make_params(
        global_params={
            "default_microbiome_acquisition_multiplier": 1.0,
            "environmental_majority_r_level_for_new_acquisition": 0.2,
        },
        bacteria={"acquisition_prob_baseline": 1.0},
    )
    update_uninfected(ind, B, 1, params, {}, random.Random(0))
    assert ind.presence_microbiome[B] is True
    assert all(r.microbiome_r == 0.2 for r in ind.resistances[B])


def test_microbiome_clearance_resets_microbiome_r():
    ind = make_individual()
    ind.presence_microbiome[B] = True
    ind.resistances[B][0].microbiome_r = 0.5
    params = make_params(
        global_params={
            "default_microbiome_infection_acquisition_multiplier": 1.0,
            "default_microbiome_clearance_probability_per_day": 1.0,
        },
        bacteria={"acquisition_prob_baseline": 0.0},
    )
    update_uninfected(ind, B, 1, params, {}, random.Random(0))
    assert ind.presence_microbiome[B] is False
    assert ind.resistances[B][0].microbiome_r == 0.0


def test_resistance_transfers_to_microbiome():
    ind = make_individual()
    ind.presence_microbiome[B] = True
    ind.level[B] = 0.0005
    ind.resistances[B][0].any_r = 0.4
    params = make_params(
        global_params={
            "default_microbiome_infection_acquisition_multiplier": 1.0,
            "default_microbiome_clearance_probability_per_day": 0.0,
            "microbiome_resistance_transfer_probability_per_day": 1.0,
        },
        bacteria={"acquisition_prob_baseline": 0.0},
    )
    update_uninfected(ind, B, 1, params, {}, random.Random(0))
    assert ind.resistances[B][0].microbiome_r == 0.4


def test_invalid_clearance_probability_raises():
    ind = make_individual()
    ind.presence_microbiome[B] = True
    params = make_params(
        global_params={
            "default_microbiome_infection_acquisition_multiplier": 1.0,
            "default_microbiome_clearance_probability_per_day": 1.5,
        },
    )
    with pytest.raises(ValueError):
        update_uninfected(ind, B, 1, params, {}, random.Random(0))


# --- progress_resistance ---

def infected_individual():
    ind = make_individual()
    ind.level[B] = 1.0
    ind.cur_level_drug[0] = 10.0
    return ind


def test_activity_r_from_potency():
    ind = infected_individual()
    params = make_params(
        global_params={f"drug_{DRUG0}_for_bacteria_{ECOLI}_potency_when_no_r": 0.1,
                       f"drug_{DRUG0}_for_bacteria_{ECOLI}_resistance_emergence_rate_per_day_baseline": 0.0}
    )
    progress_resistance(ind, B, params, random.Random(0))
    assert ind.resistances[B][0].activity_r == pytest.approx(0.1 * 10.0)
    assert ind.resistances[B][1].activity_r == 0.0


def test_any_r_rises_under_drug_pressure_and_caps():
    ind = infected_individual()
    ind.resistances[B][0].any_r = 0.98
    params = make_params(global_params={"any_r_increase_rate_per_day_when_drug_present": 0.1})
    progress_resistance(ind, B, params, random.Random(0))
    assert ind.resistances[B][0].any_r == 1.0
    assert ind.resistances[B][0].activity_r == pytest.approx(0.0)


def test_majority_r_evolves_to_any_r():
    ind = infected_individual()
    ind.resistances[B][0].any_r = 0.5
    params = make_params(global_params={"majority_r_evolution_rate_per_day_when_drug_present": 1.0})
    progress_resistance(ind, B, params, random.Random(0))
    assert ind.resistances[B][0].majority_r == 0.5
    assert ind.resistances[B][0].any_r == 0.5


def test_de_novo_emergence_sets_level():
    ind = infected_individual()
    params = make_params(
        global_params={
            f"drug_{DRUG0}_for_bacteria_{ECOLI}_resistance_emergence_rate_per_day_baseline": 100.0,
            "any_r_emergence_level_on_first_emergence": 0.7,
        }
    )
    progress_resistance(ind, B, params, random.Random(0))
    assert ind.resistances[B][0].any_r == 0.7
    assert ind.resistances[B][1].any_r == 0.0
    assert ind.resistances[B][0].activity_r == pytest.approx(0.05 * 10.0 * (1.0 - 0.7))


def test_invalid_evolution_rate_raises():
    ind = infected_individual()
    ind.resistances[B][0].any_r = 0.5
    params = make_params(global_params={"majority_r_evolution_rate_per_day_when_drug_present": 2.0})
    with pytest.raises(ValueError):
        progress_resistance(ind, B, params, random.Random(0))