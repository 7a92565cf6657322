import logging
import math
from numbers import Real

import numpy as np
import pandas as pd

from batemanpy.decay_chain_graph import DecayChainGraph
from batemanpy.exceptions import UnknownNuclideError
from batemanpy.nuclide import InventoryEntry, inventory_to_numbers
from batemanpy.transition_matrix import build_transition_matrix
from batemanpy.triangular_solver import solve_similarity_transform

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["Nuclide", "T1/2 (num)", "Amount (number atoms)", "Decay Time (sec)"]


def _check_time(time):
    if not (time >= 0 and math.isfinite(time)):
        raise ValueError(f"The decay time must be a finite number >= 0 seconds, got {time}.")


class DecayChain:
    """
    Decay chain of a fixed set of nuclides, prepared for evaluation.

    The ordering, the transition matrix and the matrices C and inv(C) only
    depend on the nuclides, so they are computed once here and reused for any
    decay time and initial inventory.
    """

    def __init__(self, nuclides, roots=None):
        """
        Parameters
        ----------
        nuclides : dict
            Registry name -> Nuclide.
        roots : iterable of str, optional
            Nuclides of the initial inventory. The chain contains them and all
            of their progeny. If None, the whole registry is used.
        """
        self.nuclides = nuclides
        self.graph = DecayChainGraph.from_nuclides(nuclides, roots)
        self.ordered_nuclides = self.graph.sort()
        self.index = {name: i for i, name in enumerate(self.ordered_nuclides)}

        self.transition_matrix = build_transition_matrix(self.ordered_nuclides, nuclides)
        self.c_matrix, self.inv_c_matrix = solve_similarity_transform(self.transition_matrix)

        self.diagonal = self.transition_matrix.diagonal()
        self._c_csr = self.c_matrix.to_csr()
        self._inv_c_csr = self.inv_c_matrix.to_csr()

    def __len__(self):
        return len(self.ordered_nuclides)

    def __contains__(self, name):
        return name in self.index

    def initial_vector(self, inventory):
        """N(0) in chain order, nuclides missing from the inventory are 0."""
        n0 = np.zeros(len(self))
        for name, number in inventory_to_numbers(inventory).items():
            if name not in self.index:
                raise UnknownNuclideError(name)
            n0[self.index[name]] = number
        return n0

    def exponential(self, time):
        """Diagonal of exp(D * t)."""
        _check_time(time)
        return np.exp(self.diagonal * time)

    def evaluate(self, inventory, time):
        """
        Number of atoms of every nuclide of the chain after ``time`` seconds.

        Returns
        -------
        np.ndarray
            N(t) = C * exp(D * t) * inv(C) * N(0), in chain order.
        """
        exp_diagonal = self.exponential(time)
        n0 = self.initial_vector(inventory)
        return self._c_csr @ (exp_diagonal * (self._inv_c_csr @ n0))

    def decay(self, inventory, time, zero_threshold=0.0):
        """
        Decay an inventory.

        Parameters
        ----------
        inventory : list of InventoryEntry, dict or iterable of pairs
            Initial number of atoms per nuclide.
        time : float
            Decay time in seconds.
        zero_threshold : float, optional
            Entries with abs(N) <= zero_threshold are left out. With the
            default of 0 only exact zeros are dropped.

        Returns
        -------
        list of InventoryEntry
            New inventory in chain order.
        """
        nt = self.evaluate(inventory, time)
        decayed_inventory = []
        for name, number in zip(self.ordered_nuclides, nt):
            if abs(number) <= zero_threshold:
                continue
            decayed_inventory.append(InventoryEntry(name, float(number)))
        return decayed_inventory

    def diagnostics(self, inventory, time):
        """Plain matrices and vectors of one evaluation, for logging."""
        n0 = self.initial_vector(inventory)
        return {
            "nuclides": list(self.ordered_nuclides),
            "transition_matrix": self.transition_matrix.to_dense(),
            "c_matrix": self.c_matrix.to_dense(),
            "inv_c_matrix": self.inv_c_matrix.to_dense(),
            "exponential": np.diag(self.exponential(time)),
            "n0": n0,
            "nt": self.evaluate(inventory, time),
        }


class DecayChainSolver:
    """
    Builds decay chains for inventories and evaluates them.
    """

    def __init__(self, nuclides, writer=None, verbosity=False):
        """
        Parameters
        ----------
        nuclides : dict
            Registry name -> Nuclide.
        writer : OutputWriter, optional
            If given, the matrices of every evaluation are written to its
            info log (level 2).
        verbosity : bool, optional
            Log progress messages at INFO level instead of DEBUG.
        """
        self.nuclides = nuclides
        self.writer = writer
        self.verbosity = verbosity

        # Cache for prepared decay chains
        self.decay_chains_cache = {}

    def _log(self, message, *args):
        logger.log(logging.INFO if self.verbosity else logging.DEBUG, message, *args)

    def get_decay_chain(self, roots=None):
        """
        Prepared decay chain of the given root nuclides and their progeny.

        Chains are cached by the set of roots.
        """
        cache_key = None if roots is None else tuple(sorted(set(roots)))
        if cache_key in self.decay_chains_cache:
            return self.decay_chains_cache[cache_key]

        decay_chain = DecayChain(self.nuclides, roots=cache_key)
        self._log("Prepared decay chain with %d nuclides", len(decay_chain))
        self.decay_chains_cache[cache_key] = decay_chain
        return decay_chain

    def decay_inventory(self, inventory, time_seconds, zero_threshold=0.0):
        """
        Decay an inventory for ``time_seconds`` seconds.

        Returns
        -------
        list of InventoryEntry
        """
        numbers = inventory_to_numbers(inventory)
        decay_chain = self.get_decay_chain(numbers.keys())
        self._log("Decaying %s seconds", time_seconds)
        if self.writer is not None:
            self._write_diagnostics(decay_chain, numbers, time_seconds)
        return decay_chain.decay(numbers, time_seconds, zero_threshold=zero_threshold)

    def decay_isotopic_mixture(self, inventory, time_seconds, zero_threshold=0.0):
        """
        Decay an inventory for one or several decay times.

        Parameters
        ----------
        inventory : list of InventoryEntry, dict or iterable of pairs
            Initial number of atoms per nuclide.
        time_seconds : float or list
            Decay time(s) in seconds.

        Returns
        -------
        pd.DataFrame
            One row per nuclide with non-zero amount and decay time.
        """
        numbers = inventory_to_numbers(inventory)

        def perform_decay(time):
            decayed_inventory = self.decay_inventory(numbers, time, zero_threshold=zero_threshold)
            return pd.DataFrame(
                [
                    (entry.nuclide, self.nuclides[entry.nuclide].half_life, entry.number, time)
                    for entry in decayed_inventory
                ],
                columns=RESULT_COLUMNS,
            )

        if isinstance(time_seconds, Real):
            return perform_decay(float(time_seconds))
        elif isinstance(time_seconds, (list, tuple, np.ndarray)):
            if len(time_seconds) == 0:
                return pd.DataFrame(columns=RESULT_COLUMNS)
            return pd.concat(
                [perform_decay(float(time)) for time in time_seconds],
                ignore_index=True
            )
        else:
            raise ValueError("time_seconds must be a float or a list of floats")

    def _write_diagnostics(self, decay_chain, numbers, time):
        diagnostics = decay_chain.diagnostics(numbers, time)
        self.writer.write_info(f"Decaying {time} seconds", 0)
        self.writer.write_info(",".join(diagnostics["nuclides"]), 2)
        self.writer.write_matrix("Constructing delta matrix", diagnostics["transition_matrix"], 2)
        self.writer.write_matrix("Constructing C matrix", diagnostics["c_matrix"], 2)
        self.writer.write_matrix("Constructing inverse C matrix", diagnostics["inv_c_matrix"], 2)
        self.writer.write_matrix("Calculating matrix exponential", diagnostics["exponential"], 2)
        self.writer.write_matrix("Calculating number matrix", diagnostics["n0"][np.newaxis, :], 2)

    def clear_cache(self):
        """Clear decay chain cache."""
        self.decay_chains_cache = {}
