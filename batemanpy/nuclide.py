from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict

import numpy as np


@dataclass(frozen=True)
class Nuclide:
    """
    Decay behaviour of a single nuclide.

    Instances are built once by the input reader and shared read-only by the
    graph, the matrix builder and the emission calculation.

    Attributes
    ----------
    name : str
        Unique key of the nuclide, e.g. "Kr-85m".
    half_life : float
        Half-life in seconds. Stable nuclides use ``math.inf``.
    stable : bool
        If True the decay constant is exactly 0, whatever the half-life says.
    daughters : dict
        Daughter name -> branching fraction in (0, 1].
    gammas : dict
        Gamma energy in keV (as written in the input) -> emission probability
        per decay.
    """

    name: str
    half_life: float = math.inf
    stable: bool = False
    daughters: Dict[str, float] = field(default_factory=dict)
    gammas: Dict[str, float] = field(default_factory=dict)

    @property
    def decay_constant(self) -> float:
        """
        Decay constant in 1/s.

        A half-life of 0 gives ``inf`` and a NaN half-life gives ``nan``; the
        transition matrix coerces such values to 0.
        """
        if self.stable:
            return 0.0
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.log(2) / np.float64(self.half_life))

    def decays_to(self, daughter: str) -> bool:
        fraction = self.daughters.get(daughter, 0.0)
        if fraction is None or np.isnan(fraction):
            return False
        return fraction != 0.0

    def branching_fraction(self, daughter: str) -> float:
        if not self.decays_to(daughter):
            return 0.0
        return float(self.daughters[daughter])

    def to_dict(self):
        """Plain representation used for nuclides.json. Non-finite numbers become None."""
        return {
            "name": self.name,
            "half_life": _finite_or_none(self.half_life),
            "gammas": {energy: _finite_or_none(p) for energy, p in self.gammas.items()},
            "stable": self.stable,
            "daughters": {daughter: _finite_or_none(f) for daughter, f in self.daughters.items()},
        }


def _finite_or_none(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


@dataclass
class InventoryEntry:
    """Number of atoms of one nuclide."""

    nuclide: str
    number: float = 0.0

    @classmethod
    def from_activity(cls, nuclide: str, activity: float, decay_constant: float) -> "InventoryEntry":
        """
        Build an entry from an activity.

        Parameters
        ----------
        nuclide : str
            Name of the nuclide.
        activity : float
            Activity in Bq.
        decay_constant : float
            Decay constant of the nuclide in 1/s.

        Returns
        -------
        InventoryEntry
            Entry with N = A / lambda atoms.
        """
        # A = lambda * N
        if decay_constant == 0.0:
            raise ValueError(f"Cannot derive a number of atoms from the activity of the stable nuclide {nuclide}.")
        return cls(nuclide, activity / decay_constant)


def inventory_to_numbers(inventory) -> Dict[str, float]:
    """
    Normalize an inventory to a dict name -> number of atoms.

    The inventory can be a list of InventoryEntry, a mapping name -> number or
    an iterable of (name, number) pairs. Repeated names are summed up.
    """
    if isinstance(inventory, Mapping):
        pairs = inventory.items()
    else:
        pairs = (
            (entry.nuclide, entry.number) if isinstance(entry, InventoryEntry) else tuple(entry)
            for entry in inventory
        )

    numbers = {}
    for name, number in pairs:
        numbers[name] = numbers.get(name, 0.0) + float(number)
    return numbers
