# amrsim

An individual-based, stochastic model of bacterial infection, antibiotic
treatment and antimicrobial resistance (AMR) in a population.

Each simulated individual carries state that is updated once per day: age,
home and current region, hospital status, contact and exposure levels,
severe immunosuppression, toxicity, and for each bacterium the infection
level, microbiome carriage, immune response, sepsis, syndrome and test
status. For every bacterium/drug pair it holds resistance values
(`any_r`, `majority_r`, `microbiome_r`, `test_r`, `activity_r`).

Each day the rules update, in order: contact levels, immunosuppression,
toxicity, hospitalisation, travel, sepsis and vaccination; drug stopping,
drug level decay, drug initiation and drug toxicity; mortality; then for each
bacterium either resistance evolution within an infection or carriage,
resistance transfer and new acquisition, followed by testing, bacterial level
change, clearance, cross-resistance and immunity. Individuals with a negative
age are not yet born and only age; dead individuals are left unchanged.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Parameters

The model is driven by a `Parameters` object (`amrsim.parameters`). Its fields:

- `global_params` – global values by name, e.g. `"travel_probability_per_day"`
  or keys built from names such as
  `"drug_<drug>_for_bacteria_<bacteria>_potency_when_no_r"`.
- `bacteria_params` – per-bacterium values, keyed by bacterium then name.
- `drug_params` – per-drug values, keyed by drug then name.
- `age_infection_bands` – per bacterium, `(upper_age_days, multiplier)` pairs;
  the first band whose upper bound exceeds the age applies, otherwise 1.0.
- `availability` – per drug, availability by region name in [0, 1]; missing
  entries mean fully available, and a current region of `home` resolves to the
  individual's home region.
- `sepsis_risk_multipliers` – per-bacterium multiplier on sepsis risk
  (default 1.0).

Most values are optional and fall back to built-in defaults. Some are required,
and `MissingParameterError` is raised when the rules need one that is absent.
The following global values are needed on every day for a living individual:

- `hospitalization_baseline_rate_per_day`, `hospitalization_age_multiplier_per_day`,
  `hospitalization_recovery_rate_per_day`, `hospitalization_max_days`
- `travel_probability_per_day`
- `base_background_mortality_rate_per_day`, `age_mortality_multiplier_per_year`
- `default_microbiome_acquisition_multiplier` (unless set for every bacterium)

Others are needed only when the situation arises: `base_sepsis_death_risk_per_day`
once anyone has sepsis, `default_drug_toxicity_per_unit_level_per_day` once a
drug is present, `default_microbiome_clearance_probability_per_day` and
`default_microbiome_infection_acquisition_multiplier` once carriage occurs,
and the `default_sepsis_baseline_risk_per_day`, `default_sepsis_level_multiplier`
and `default_sepsis_duration_multiplier` values once an infection exists,
each unless given per bacterium or drug.

Probabilities drawn from parameters must lie in [0, 1]; a value outside that
range raises `ValueError`.

## Usage

```python
import random

from amrsim.parameters import Parameters
from amrsim.simulation import Simulation

params = Parameters(
    global_params={
        "hospitalization_baseline_rate_per_day": 0.0001,
        "hospitalization_age_multiplier_per_day": 0.0,
        "hospitalization_recovery_rate_per_day": 0.1,
        "hospitalization_max_days": 30,
        "travel_probability_per_day": 0.001,
        "base_background_mortality_rate_per_day": 0.00001,
        "age_mortality_multiplier_per_year": 0.1,
        "base_sepsis_death_risk_per_day": 0.01,
        "default_sepsis_baseline_risk_per_day": 0.0001,
        "default_sepsis_level_multiplier": 0.0001,
        "default_sepsis_duration_multiplier": 0.00001,
        "default_drug_toxicity_per_unit_level_per_day": 0.001,
        "default_microbiome_acquisition_multiplier": 1.0,
        "default_microbiome_infection_acquisition_multiplier": 1.0,
        "default_microbiome_clearance_probability_per_day": 0.01,
    },
)

sim = Simulation(
    population_size=1000,
    time_steps=365,
    params=params,
    cross_resistance_groups={"escherichia coli": [["ciprofloxacin", "levofloxacin"]]},
    rng=random.Random(42),
)
sim.run()

dead = [ind for ind in sim.population.individuals if ind.is_dead()]
print(f"{len(dead)} deaths")
```

`Simulation.step(time_step)` advances the whole population by one day, which
is useful for collecting your own statistics between steps. Before each step,
positive `majority_r` values from current infections are gathered by
`collect_majority_r_pool` and used to seed resistance in new
community-acquired infections.

Cross-resistance groups are given by bacterium and drug name, as listed in
`BACTERIA_LIST` and `DRUG_SHORT_NAMES`; `index_cross_resistance_groups` drops
unknown names. Within a group, every drug's `any_r` is raised to the highest
`any_r` in the group.

All randomness comes from the `random.Random` instance passed in, so a seeded
generator gives reproducible runs. The initial state of the first individual
and the start of a run are logged at debug level on the `amrsim.simulation`
logger.

### Modules

- `amrsim.population` – `Individual`, `Population`, `Region`,
  `HospitalStatus`, `Resistance`, `new_individual`, `new_population`,
  `random_region`, and the `BACTERIA_LIST` and `DRUG_SHORT_NAMES` lists.
- `amrsim.parameters` – `Parameters` and `MissingParameterError`.
- `amrsim.rules.host` – contact levels, immunosuppression, toxicity
  fluctuation, hospitalisation, travel, sepsis and vaccination.
- `amrsim.rules.drugs` – drug stopping, level decay, initiation (at most two
  drugs at once) and drug toxicity.
- `amrsim.rules.mortality` – background and sepsis death risk and the daily
  death draw.
- `amrsim.rules.bacteria` – syndrome assignment, acquisition probability,
  carriage, resistance transfer, new infection, resistance evolution and
  cross-resistance.
- `amrsim.rules.progression` – testing, bacterial level change, clearance and
  immunity.
- `amrsim.rules.engine` – `apply_rules`, one full day for one individual.
- `amrsim.simulation` – `Simulation`, `index_cross_resistance_groups` and
  `collect_majority_r_pool`.

## What it does not do

The package is a library only. It has no command-line program, reads no
parameter or configuration files, and ships no calibrated parameter set: the
caller builds `Parameters` and the cross-resistance groups. It writes no
results or summaries; statistics are gathered by reading the individuals
between or after steps. Individuals are updated one after another in a single
process.