# determine_emissions.py
import pandas as pd

from batemanpy.nuclide import inventory_to_numbers

ACTIVITY_COLUMNS = ["Nuclide", "Amount (number atoms)", "T1/2 (num)", "Activity (Bq)"]
GAMMA_COLUMNS = ["Nuclide", "Rad Ene.", "Rad Int.", "Total emissions 1/sec"]


class GammaEmissions:
    """
    Activities and gamma emission rates of a (decayed) inventory.
    """

    def __init__(self, nuclides):
        """
        Parameters
        ----------
        nuclides : dict
            Registry name -> Nuclide.
        """
        self.nuclides = nuclides

    @staticmethod
    def _inventory_numbers(isotopic_mixture):
        if isinstance(isotopic_mixture, pd.DataFrame):
            if "Decay Time (sec)" in isotopic_mixture and isotopic_mixture["Decay Time (sec)"].nunique() > 1:
                raise ValueError(
                    "The isotopic mixture holds several decay times, select the rows of a single time first."
                )
            return inventory_to_numbers(
                zip(isotopic_mixture["Nuclide"], isotopic_mixture["Amount (number atoms)"])
            )
        return inventory_to_numbers(isotopic_mixture)

    def return_activities(self, isotopic_mixture):
        """
        Activity A = lambda * N of every nuclide of the mixture.

        Parameters
        ----------
        isotopic_mixture : pd.DataFrame, list of InventoryEntry or dict
            A DataFrame needs the columns "Nuclide" and "Amount (number atoms)",
            as returned by a decay of a single time step.

        Returns
        -------
        pd.DataFrame
        """
        rows = []
        for name, number in self._inventory_numbers(isotopic_mixture).items():
            nuclide = self.nuclides[name]
            rows.append((name, number, nuclide.half_life, nuclide.decay_constant * number))
        return pd.DataFrame(rows, columns=ACTIVITY_COLUMNS)

    def return_isotope_gamma_emissions(self, name):
        """Gamma lines of one nuclide with their emission probability per decay."""
        nuclide = self.nuclides[name]
        gamma_emissions = pd.DataFrame(
            [(name, energy, probability) for energy, probability in nuclide.gammas.items()],
            columns=GAMMA_COLUMNS[:3],
        )
        gamma_emissions["Rad Ene."] = pd.to_numeric(gamma_emissions["Rad Ene."], errors="coerce")
        return gamma_emissions

    def return_gamma_emissions_isotopic_mixture(self, isotopic_mixture, add_iso_cols=False):
        """
        Calculate gamma emissions for an isotopic mixture.

        Parameters
        ----------
        isotopic_mixture : pd.DataFrame, list of InventoryEntry or dict
            Number of atoms per nuclide.
        add_iso_cols : bool, optional
            If True, keep one row per nuclide and gamma line instead of summing
            the lines of equal energy. Default: False

        Returns
        -------
        pd.DataFrame
            Gamma emissions by energy with total emissions per second
        """
        activities = self.return_activities(isotopic_mixture)

        all_gamma_emissions_list = []
        for _, row in activities.iterrows():
            gamma_emissions = self.return_isotope_gamma_emissions(row["Nuclide"])
            if gamma_emissions.empty:
                continue
            gamma_emissions["Total emissions 1/sec"] = row["Activity (Bq)"] * gamma_emissions["Rad Int."]
            all_gamma_emissions_list.append(gamma_emissions)

        if not all_gamma_emissions_list:
            return pd.DataFrame(columns=GAMMA_COLUMNS if add_iso_cols else ["Rad Ene.", "Total emissions 1/sec"])

        all_gamma_emissions = pd.concat(all_gamma_emissions_list, ignore_index=True)
        if add_iso_cols:
            return all_gamma_emissions

        # Different nuclides can emit gammas of the same energy.
        # Here we sum up the emissions of gammas of the same energy.
        return all_gamma_emissions.groupby(["Rad Ene."]).agg(
            {"Total emissions 1/sec": "sum"}
        ).reset_index()
