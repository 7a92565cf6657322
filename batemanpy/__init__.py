"""
batemanpy
=========

Analytic solution of radioactive decay chains (Bateman equations).
"""

__version__ = "1.0.0"

from batemanpy.decay_and_emissions import Decay
from batemanpy.decay_chain_solver import DecayChain, DecayChainSolver
from batemanpy.exceptions import CyclicDecayChainError, DecayChainError, UnknownNuclideError
from batemanpy.nuclide import InventoryEntry, Nuclide

__all__ = [
    "Decay",
    "DecayChain",
    "DecayChainSolver",
    "CyclicDecayChainError",
    "DecayChainError",
    "UnknownNuclideError",
    "InventoryEntry",
    "Nuclide",
    "__version__",
]
