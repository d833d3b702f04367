"""Individuals, regions and the population they belong to."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field

BACTERIA_LIST: tuple[str, ...] = (
    "acinetobacter baumannii", "citrobacter spp.", "enterobacter spp.", "enterococcus faecalis",
    "enterococcus faecium", "escherichia coli", "klebsiella pneumoniae", "morganella spp.",
    "proteus spp.", "serratia spp.", "pseudomonas aeruginosa", "staphylococcus aureus",
    "streptococcus pneumoniae", "salmonella enterica serovar typhi",
    "salmonella enterica serovar paratyphi a", "invasive non-typhoidal salmonella spp.",
    "shigella spp.", "neisseria gonorrhoeae", "streptococcus pyogenes", "streptococcus agalactiae",
    "haemophilus influenzae", "chlamydia trachomatis", "vibrio cholerae",
    "neisseria_meningitidis", "listeria_monocytogenes", "clostridioides_difficile",
    "campylobacter_jejuni", "enterobacter_cloacae", "yersinia_enterocolitica", "moraxella_catarrhalis",
)

DRUG_SHORT_NAMES: tuple[str, ...] = (
    "penicilling", "ampicillin", "amoxicillin",
    "piperacillin", "ticarcillin", "cephalexin", "cefazolin",
    "cefuroxime", "ceftriaxone", "ceftazidime", "cefepime", "ceftaroline", "meropenem", "imipenem_c",
    "ertapenem", "aztreonam", "erythromycin", "azithromycin", "clarithromycin", "clindamycin",
    "gentamicin", "tobramycin", "amikacin", "ciprofloxacin", "levofloxacin", "moxifloxacin",
    "ofloxacin", "tetracycline", "doxyclycline", "minocycline", "vancomycin", "teicoplanin",
    "linezolid", "tedizolid", "quinu_dalfo", "trim_sulf", "chlorampheni", "nitrofurantoin",
    "retapamulin", "fusidic_a", "metronidazole", "furazolidone",
)

BACTERIA_INDEX: dict[str, int] = {name: i for i, name in enumerate(BACTERIA_LIST)}
DRUG_INDEX: dict[str, int] = {name: i for i, name in enumerate(DRUG_SHORT_NAMES)}

AGE_RANGE_DAYS = 36500


class HospitalStatus(enum.Enum):
    IN_HOSPITAL = "in_hospital"
    NOT_IN_HOSPITAL = "not_in_hospital"

    def is_hospitalized(self) -> bool:
        return self is HospitalStatus.IN_HOSPITAL


class Region(enum.IntEnum):
    """Geographic regions; HOME stands for wherever the individual lives."""

    NORTH_AMERICA = 0
    SOUTH_AMERICA = 1
    AFRICA = 2
    ASIA = 3
    EUROPE = 4
    OCEANIA = 5
    HOME = 6

    def __str__(self) -> str:
        return self.name.lower()


GEOGRAPHIC_REGIONS: tuple[Region, ...] = tuple(r for r in Region if r is not Region.HOME)


def random_region(rng: random.Random) -> Region:
    """Pick one of the six geographic regions uniformly (never HOME)."""
    return rng.choice(GEOGRAPHIC_REGIONS)


@dataclass
class Resistance:
    microbiome_r: float = 0.0
    test_r: float = 0.0
    activity_r: float = 0.0
    any_r: float = 0.0
    majority_r: float = 0.0


def _resistance_matrix() -> list[list[Resistance]]:
    return [[Resistance() for _ in DRUG_SHORT_NAMES] for _ in BACTERIA_LIST]


@dataclass
class Individual:
    """One person; per-bacteria and per-drug state is held in parallel lists."""

    id: int
    age: int
    sex_at_birth: str
    region_living: Region
    region_cur_in: Region = Region.HOME
    days_visiting: int = 0
    hospital_status: HospitalStatus = HospitalStatus.NOT_IN_HOSPITAL
    days_hospitalized: int = 0
    date_last_infected: list[int] = field(default_factory=lambda: [0] * len(BACTERIA_LIST))
    infectious_syndrome: list[int] = field(default_factory=lambda: [0] * len(BACTERIA_LIST))
    level: list[float] = field(default_factory=lambda: [0.0] * len(BACTERIA_LIST))
    immune_resp: list[float] = field(default_factory=lambda: [0.0001] * len(BACTERIA_LIST))
    sepsis: list[bool] = field(default_factory=lambda: [False] * len(BACTERIA_LIST))
    presence_microbiome: list[bool] = field(default_factory=lambda: [False] * len(BACTERIA_LIST))
    vaccination_status: list[bool] = field(default_factory=lambda: [False] * len(BACTERIA_LIST))
    cur_infection_from_environment: list[bool] = field(
        default_factory=lambda: [False] * len(BACTERIA_LIST)
    )
    test_identified_infection: list[bool] = field(
        default_factory=lambda: [False] * len(BACTERIA_LIST)
    )
    infection_hospital_acquired: list[bool] = field(
        default_factory=lambda: [False] * len(BACTERIA_LIST)
    )
    cur_use_drug: list[bool] = field(default_factory=lambda: [False] * len(DRUG_SHORT_NAMES))
    cur_level_drug: list[float] = field(default_factory=lambda: [0.0] * len(DRUG_SHORT_NAMES))
    # time step on which each drug was last initiated; None when not on it
    date_drug_initiated: list[int | None] = field(
        default_factory=lambda: [None] * len(DRUG_SHORT_NAMES)
    )
    ever_taken_drug: list[bool] = field(default_factory=lambda: [False] * len(DRUG_SHORT_NAMES))
    current_infection_related_death_risk: float = 0.0
    background_all_cause_mortality_rate: float = 0.0
    sexual_contact_level: float = 0.0
    airborne_contact_level_with_adults: float = 0.0
    airborne_contact_level_with_children: float = 0.0
    oral_exposure_level: float = 0.0
    mosquito_exposure_level: float = 0.0
    current_toxicity: float = 0.0
    mortality_risk_current_toxicity: float = 0.0
    resistances: list[list[Resistance]] = field(default_factory=_resistance_matrix)
    date_of_death: int | None = None
    cause_of_death: str | None = None
    is_severely_immunosuppressed: bool = False

    def is_born(self) -> bool:
        return self.age >= 0

    def is_dead(self) -> bool:
        return self.date_of_death is not None


def new_individual(id: int, age_days: int, sex_at_birth: str, rng: random.Random) -> Individual:
    """Create an individual with randomised home region, vaccinations and exposures."""
    vaccination_status = [rng.random() < 0.5 for _ in BACTERIA_LIST]
    region_living = random_region(rng)
    return Individual(
        id=id,
        age=age_days,
        sex_at_birth=sex_at_birth,
        region_living=region_living,
        vaccination_status=vaccination_status,
        background_all_cause_mortality_rate=0.0 if age_days < 0 else 0.000001,
        sexual_contact_level=rng.uniform(0.0, 10.0),
        airborne_contact_level_with_adults=rng.uniform(0.0, 10.0),
        airborne_contact_level_with_children=rng.uniform(0.0, 10.0),
        oral_exposure_level=rng.uniform(0.0, 10.0),
        mosquito_exposure_level=rng.uniform(0.0, 10.0),
        current_toxicity=rng.uniform(0.0, 3.0),
    )


@dataclass
class Population:
    individuals: list[Individual] = field(default_factory=list)


def new_population(size: int, rng: random.Random) -> Population:
    """Create `size` individuals with ages spread over a century either side of birth."""
    individuals = []
    for i in range(size):
        age = rng.randint(-AGE_RANGE_DAYS, AGE_RANGE_DAYS)
        sex = "male" if rng.random() < 0.5 else "female"
        individuals.append(new_individual(i, age, sex, rng))
    return Population(individuals)