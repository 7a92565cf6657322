import json
import logging
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class OutputWriter:
    """
    Collects messages and results of a run and writes them to files.

    Errors are data problems found while reading the input. Info messages
    carry an importance level: 0 for the main steps, 1 for every parsed
    record, 2 for the matrices of the decay calculation.
    """

    def __init__(self):
        self.errors = []
        self.info = {}
        self.nuclides = {}
        self.inventory = None

    def write_error(self, message):
        logger.warning(message)
        self.errors.append(message)

    def write_info(self, message, level):
        logger.debug(message)
        self.info.setdefault(level, []).append(message)

    def write_matrix(self, title, matrix, level):
        """Write a matrix as comma-separated rows, preceded by a title line."""
        self.write_info(f"\n{title}", level)
        for row in np.atleast_2d(matrix):
            self.write_info(",".join(repr(float(value)) for value in row), level)

    def write_nuclides(self, nuclides):
        self.nuclides = nuclides

    def write_inventory(self, inventory):
        """
        Record an inventory for inventory.csv.

        Parameters
        ----------
        inventory : pd.DataFrame or list of InventoryEntry
        """
        if isinstance(inventory, pd.DataFrame):
            self.inventory = inventory
        else:
            self.inventory = pd.DataFrame(
                [(entry.nuclide, entry.number) for entry in inventory],
                columns=["Nuclide", "Amount (number atoms)"],
            )

    def info_lines(self, level):
        """All info messages with an importance level below ``level``."""
        lines = []
        for i in sorted(self.info):
            if i < level:
                lines.extend(self.info[i])
        return lines

    def write_files(self, level, output_dir="output"):
        """
        Write error.log, info.log, nuclides.json and inventory.csv.

        Parameters
        ----------
        level : int
            Info messages with a level below this value are written.
        output_dir : str or path-like, optional
            Target directory, created if missing.

        Returns
        -------
        Path
            The output directory.
        """
        output_dir = Path(output_dir).resolve()
        output_dir.mkdir(parents=True, exist_ok=True)

        (output_dir / "error.log").write_text("\n".join(self.errors), encoding="utf-8")
        (output_dir / "info.log").write_text("\n".join(self.info_lines(level)), encoding="utf-8")

        nuclides_json = {name: nuclide.to_dict() for name, nuclide in self.nuclides.items()}
        with open(output_dir / "nuclides.json", "w", encoding="utf-8") as fh:
            json.dump(nuclides_json, fh, indent=2, allow_nan=False)
            fh.write("\n")

        if self.inventory is not None:
            self.inventory.to_csv(output_dir / "inventory.csv", index=False)

        logger.info("Output written to %s", output_dir)
        return output_dir
