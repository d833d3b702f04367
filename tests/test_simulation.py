import random

import pytest

from amrsim.parameters import MissingParameterError, Parameters
from amrsim.population import BACTERIA_INDEX, BACTERIA_LIST, DRUG_INDEX, Individual, Region
from amrsim.simulation import (
    Simulation,
    collect_majority_r_pool,
    index_cross_resistance_groups,
)


def _params(**overrides):
    values = {
        "hospitalization_baseline_rate_per_day": 0.0,
        "hospitalization_age_multiplier_per_day": 0.0,
        "hospitalization_recovery_rate_per_day": 0.1,
        "hospitalization_max_days": 10.0,
        "travel_probability_per_day": 0.0,
        "default_sepsis_baseline_risk_per_day": 0.0,
        "default_sepsis_level_multiplier": 0.0,
        "default_sepsis_duration_multiplier": 0.0,
        "base_background_mortality_rate_per_day": 0.0,
        "age_mortality_multiplier_per_year": 0.0,
        "base_sepsis_death_risk_per_day": 0.0,
        "default_drug_toxicity_per_unit_level_per_day": 0.0,
        "default_microbiome_infection_acquisition_multiplier": 1.0,
        "default_microbiome_acquisition_multiplier": 1.0,
        "default_microbiome_clearance_probability_per_day": 0.01,
    }
    values.update(overrides)
    return Parameters(global_params=values)


def test_index_cross_resistance_groups_maps_names_and_drops_unknowns():
    raw = {
        "escherichia coli": [["ampicillin", "amoxicillin"], ["unknown drug", "gentamicin"]],
        "not a bacterium": [["ampicillin"]],
    }
    indexed = index_cross_resistance_groups(raw)
    assert indexed == {
        BACTERIA_INDEX["escherichia coli"]: [
            [DRUG_INDEX["ampicillin"], DRUG_INDEX["amoxicillin"]],
            [DRUG_INDEX["gentamicin"]],
        ]
    }


def test_index_cross_resistance_groups_empty():
    assert index_cross_resistance_groups({}) == {}


def test_collect_majority_r_pool_only_infected_positive_values():
    infected = Individual(id=0, age=1000, sex_at_birth="female", region_living=Region.ASIA)
    infected.level[2] = 5.0
    infected.resistances[2][4].majority_r = 0.7
    infected.resistances[2][5].majority_r = 0.0

    carrier = Individual(id=1, age=1000, sex_at_birth="male", region_living=Region.ASIA)
    carrier.level[2] = 0.0005
    carrier.resistances[2][4].majority_r = 0.9

    pool = collect_majority_r_pool([infected, carrier])
    key = (int(Region.HOME), False, 2, 4)
    assert pool == {key: [0.7]}


def test_collect_majority_r_pool_groups_values_from_same_setting():
    people = []
    for i, value in enumerate((0.3, 0.6)):
        person = Individual(id=i, age=500, sex_at_birth="male", region_living=Region.EUROPE)
        person.level[0] = 1.0
        person.resistances[0][1].majority_r = value
        people.append(person)
    pool = collect_majority_r_pool(people)
    assert sorted(pool[(int(Region.HOME), False, 0, 1)]) == [0.3, 0.6]


def test_simulation_builds_population_and_groups():
    sim = Simulation(
        4,
        3,
        _params(),
        {"escherichia coli": [["ampicillin", "amoxicillin"]]},
        random.Random(1),
    )
    assert len(sim.population.individuals) == 4
    assert sim.time_steps == 3
    assert sim.cross_resistance_groups == {
        BACTERIA_INDEX["escherichia coli"]: [[DRUG_INDEX["ampicillin"], DRUG_INDEX["amoxicillin"]]]
    }


def test_run_ages_everyone_by_time_steps_when_nobody_can_die():
    sim = Simulation(12, 5, _params(), rng=random.Random(3))
    before = [person.age for person in sim.population.individuals]
    sim.run()
    after = [person.age for person in sim.population.individuals]
    assert [a - b for a, b in zip(after, before)] == [5] * 12
    assert all(not person.is_dead() for person in sim.population.individuals)


def test_step_leaves_dead_individuals_untouched():
    sim = Simulation(3, 1, _params(), rng=random.Random(5))
    for person in sim.population.individuals:
        person.age = 4000
        person.date_of_death = 0
    sim.step(1)
    assert [person.age for person in sim.population.individuals] == [4000] * 3


def test_certain_background_mortality_kills_adults():
    params = _params(
        base_background_mortality_rate_per_day=1.0,
        age_mortality_multiplier_per_year=1.0,
    )
    sim = Simulation(5, 1, params, rng=random.Random(9))
    for person in sim.population.individuals:
        person.age = 30 * 365
    sim.step(0)
    for person in sim.population.individuals:
        assert person.date_of_death == 0
        assert person.cause_of_death == "background_mortality"


def test_same_seed_gives_same_run():
    def outcome(seed):
        sim = Simulation(8, 4, _params(), rng=random.Random(seed))
        before = [person.age for person in sim.population.individuals]
        sim.run()
        after = [
            (person.age, list(person.level), person.sexual_contact_level)
            for person in sim.population.individuals
        ]
        return before, after

    before_a, after_a = outcome(11)
    before_b, after_b = outcome(11)
    assert before_a == before_b
    assert after_a == after_b
    assert [age for age, _, _ in after_a] == [age + 4 for age in before_a]
    assert all(len(levels) == len(BACTERIA_LIST) for _, levels, _ in after_a)


def test_missing_required_parameter_raises():
    sim = Simulation(1, 1, Parameters(), rng=random.Random(2))
    sim.population.individuals[0].age = 100
    with pytest.raises(MissingParameterError):
        sim.step(0)