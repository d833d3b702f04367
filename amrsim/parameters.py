"""Model parameter store with the lookups the rules rely on."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field


class MissingParameterError(LookupError):
    """A parameter the model cannot run without is absent."""


@dataclass
class Parameters:
    """Named numeric parameters, global and per bacteria or drug.

    ``age_infection_bands`` maps a bacteria to ``(upper_age_days, multiplier)``
    pairs: the first band whose upper bound exceeds the age applies.
    ``availability`` maps a drug to per-region availability in [0, 1].
    """

    global_params: dict[str, float] = field(default_factory=dict)
    bacteria_params: dict[str, dict[str, float]] = field(default_factory=dict)
    drug_params: dict[str, dict[str, float]] = field(default_factory=dict)
    age_infection_bands: dict[str, Sequence[tuple[float, float]]] = field(default_factory=dict)
    availability: dict[str, Mapping[str, float]] = field(default_factory=dict)
    sepsis_risk_multipliers: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.age_infection_bands = {
            bacteria: sorted(bands) for bacteria, bands in self.age_infection_bands.items()
        }

    def global_param(self, name: str) -> float | None:
        return self.global_params.get(name)

    def require(self, name: str) -> float:
        """Return a global parameter, raising if it is not configured."""
        try:
            return self.global_params[name]
        except KeyError:
            raise MissingParameterError(f"missing {name} in config") from None

    def bacteria_param(self, bacteria: str, name: str) -> float | None:
        return self.bacteria_params.get(bacteria, {}).get(name)

    def drug_param(self, drug: str, name: str) -> float | None:
        return self.drug_params.get(drug, {}).get(name)

    def age_infection_multiplier(self, bacteria: str, age_days: int) -> float:
        for upper, multiplier in self.age_infection_bands.get(bacteria, ()):
            if age_days < upper:
                return multiplier
        return 1.0

    def drug_availability(self, drug: str, region: str, home_region: str | None = None) -> float:
        """Availability of a drug where the individual currently is.

        A current region of ``home`` resolves to ``home_region``. Drugs or
        regions with no entry are fully available.
        """
        if region == "home" and home_region is not None:
            region = home_region
        value = self.availability.get(drug, {}).get(region, 1.0)
        if math.isnan(value):
            return 0.0
        return min(max(value, 0.0), 1.0)

    def bacteria_sepsis_risk_multiplier(self, bacteria: str) -> float:
        return self.sepsis_risk_multipliers.get(bacteria, 1.0)