import numpy as np


def _is_invalid(value):
    """True for None and for anything that is not a number or is NaN."""
    if value is None:
        return True
    try:
        return bool(np.isnan(float(value)))
    except (TypeError, ValueError):
        return True


class InputValidator:
    """
    Searches for mistakes in the nuclide data.

    Nothing is raised here: every finding is reported as an error message to
    the output writer, so a complete list of problems is produced in one run.
    """

    def __init__(self, writer):
        self.writer = writer

    def compare_nuclide_data(self, a, b):
        """Check two definitions of the same nuclide for consistency."""
        if a.half_life != b.half_life:
            self.writer.write_error(
                f"Inconsistent half-lives found for {a.name} ({a.half_life} != {b.half_life})"
            )
        if len(a.gammas) != len(b.gammas):
            self.writer.write_error(
                f"Inconsistent number of gammas listed for {a.name} ({len(a.gammas)} != {len(b.gammas)})"
            )
        for energy, frequency in a.gammas.items():
            if energy in b.gammas and b.gammas[energy] != frequency:
                self.writer.write_error(
                    f"Inconsistent gamma frequency for {a.name} {energy} ({frequency} != {b.gammas[energy]})"
                )
        mismatched = sorted(set(a.gammas) ^ set(b.gammas))
        if mismatched:
            self.writer.write_error(
                f"Inconsistent gammas listed for {a.name} (mismatched: {','.join(mismatched)})"
            )

    def validate_daughters(self, nuclide, daughters):
        """
        Check the branching fractions of a nuclide.

        Parameters
        ----------
        nuclide : str
            Name of the parent nuclide.
        daughters : dict
            Daughter name -> branching fraction.
        """
        fraction_sum = 0.0
        for daughter, fraction in daughters.items():
            if _is_invalid(fraction):
                self.writer.write_error(
                    f"Invalid branching fraction for {nuclide} -> {daughter}: {fraction}"
                )
                continue
            fraction_sum += fraction
        if fraction_sum > 1:
            self.writer.write_error(f"Daughter fractions for {nuclide} sum above 1: {fraction_sum}")

    def validate_gammas(self, nuclide):
        """Check for reasonable values in the gamma lines of a nuclide."""
        for energy, frequency in nuclide.gammas.items():
            if _is_invalid(energy):
                self.writer.write_error(f"Invalid gamma energy listed for {nuclide.name}: {energy}")
            if _is_invalid(frequency):
                self.writer.write_error(
                    f"Invalid gamma frequency listed for {nuclide.name} {energy}: {frequency}"
                )
            elif frequency == 0:
                self.writer.write_error(f"Zero-frequency gamma listed for {nuclide.name} {energy}")
