from batemanpy.decay_chain_solver import DecayChainSolver
from batemanpy.determine_emissions import GammaEmissions
from batemanpy.load_data import load_decay_data
from batemanpy.nuclide import inventory_to_numbers


class Decay:
    """
    Decay of radionuclide inventories and their gamma emissions.

    Holds a nuclide registry and a default inventory, and delegates the decay
    calculation to DecayChainSolver and the emissions to GammaEmissions.
    """

    def __init__(self,
                 nuclides,
                 inventory=None,
                 writer=None,
                 zero_threshold=0.0,
                 verbosity=False):
        """
        Parameters
        ----------
        nuclides : dict
            Registry name -> Nuclide.
        inventory : list of InventoryEntry, dict or iterable of pairs, optional
            Default initial inventory for ``decay`` and ``decay_isotopic_mixture``.
        writer : OutputWriter, optional
            Receives the matrices of every decay calculation.
        zero_threshold : float, optional
            Resulting amounts with abs(N) <= zero_threshold are dropped.
        verbosity : bool, optional
            Log progress at INFO level.
        """
        self.nuclides = nuclides
        self.inventory = inventory if inventory is not None else []
        self.writer = writer
        self.zero_threshold = zero_threshold
        self.verbosity = verbosity

        # initialize specialized modules
        self.chain_solver = DecayChainSolver(self.nuclides, writer=writer, verbosity=verbosity)
        self.emissions = GammaEmissions(self.nuclides)

    @classmethod
    def from_files(cls, nuclides_path, inventory_path=None, writer=None, **kwargs):
        """Read the nuclide and inventory CSV files and build a Decay instance."""
        data = load_decay_data(nuclides_path, inventory_path, writer=writer)
        return cls(data.nuclides, data.inventory, writer=writer, **kwargs)

    def _select_inventory(self, inventory):
        return self.inventory if inventory is None else inventory

    def decay(self, time_seconds, inventory=None):
        """
        Decay the inventory for ``time_seconds`` seconds.

        Returns
        -------
        list of InventoryEntry
            Every nuclide of the decay chain with a non-zero amount.
        """
        return self.chain_solver.decay_inventory(self._select_inventory(inventory), time_seconds,
                                                 zero_threshold=self.zero_threshold)

    def decay_isotopic_mixture(self, time_seconds, inventory=None):
        """Wrapper. Delegates to chain_solver module."""
        return self.chain_solver.decay_isotopic_mixture(self._select_inventory(inventory), time_seconds,
                                                        zero_threshold=self.zero_threshold)

    def get_decay_chain(self, inventory=None):
        """
        Prepared decay chain of the inventory, e.g. for diagnostics.

        Without any inventory the chain covers the whole nuclide registry.
        """
        numbers = inventory_to_numbers(self._select_inventory(inventory))
        if not numbers:
            return self.chain_solver.get_decay_chain(None)
        return self.chain_solver.get_decay_chain(numbers.keys())

    def return_activities(self, isotopic_mixture):
        """Wrapper. Delegates to emissions module."""
        return self.emissions.return_activities(isotopic_mixture)

    def return_gamma_emissions_isotopic_mixture(self, isotopic_mixture, add_iso_cols=False):
        """Wrapper. Delegates to emissions module."""
        return self.emissions.return_gamma_emissions_isotopic_mixture(isotopic_mixture, add_iso_cols=add_iso_cols)

    def clear_cache(self):
        """Clear decay chain cache."""
        self.chain_solver.clear_cache()
