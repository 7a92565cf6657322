from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd

from batemanpy.input_validator import InputValidator
from batemanpy.nuclide import InventoryEntry, Nuclide
from batemanpy.output_writer import OutputWriter


# seconds per half-life unit used in the nuclide files
HALF_LIFE_UNITS = {"y": 3.154e7,
                   "d": 86400.0,
                   "hr": 3600.0,
                   "h": 3600.0,
                   "m": 60.0,
                   "s": 1.0}

# every nuclide of a tree row takes six columns
GROUP_WIDTH = 6
_MAX_COLUMNS = GROUP_WIDTH * 64 + 1

STABLE_MARKER = "(stable)"


@dataclass(frozen=True)
class DecayData:
    """
    Container for the data of one run.

    Attributes
    ----------
    nuclides : dict
        Registry name -> Nuclide.
    inventory : list of InventoryEntry
        Initial inventory, empty if no inventory file was read.
    """

    nuclides: Dict[str, Nuclide]
    inventory: List[InventoryEntry]


def load_decay_data(nuclides_path, inventory_path=None, *, writer: Optional[OutputWriter] = None) -> DecayData:
    """
    Read a nuclide file and optionally an inventory file.

    Parameters
    ----------
    nuclides_path : str or path-like
        CSV file with the decay data.
    inventory_path : str or path-like, optional
        CSV file with the initial inventory.
    writer : OutputWriter, optional
        Collects errors and info messages. A new one is used if omitted.

    Returns
    -------
    DecayData
    """
    writer = writer or OutputWriter()
    nuclides = load_nuclide_data(nuclides_path, writer=writer)
    inventory = [] if inventory_path is None else load_inventory(inventory_path, nuclides, writer=writer)
    return DecayData(nuclides=nuclides, inventory=inventory)


def load_nuclide_data(path, *, writer: Optional[OutputWriter] = None) -> Dict[str, Nuclide]:
    """
    Read nuclide data from a CSV file.

    The first row is a header. Every following row describes one decay path
    as groups of six columns: name, branching fraction (from the previous
    group), half-life, decay mode, gamma energies and gamma frequency. A name
    ending in "(stable)" ends the path. A row starting with empty columns
    continues the tree of the rows above: its first name is a daughter of the
    nearest row above that has a name six columns further left.
    """
    writer = writer or OutputWriter()
    writer.write_info(f"Reading nuclides from {path}", 0)
    return _NuclideReader(writer).read(path)


def load_inventory(path, nuclides, *, writer: Optional[OutputWriter] = None) -> List[InventoryEntry]:
    """
    Read an inventory from a CSV file.

    The first column holds nuclide names, the second one numbers of atoms. If
    the header of the second column contains "Bq", the values are activities
    and are converted with N = A / lambda.

    Nuclides that are not in ``nuclides`` are reported and skipped.
    """
    writer = writer or OutputWriter()
    writer.write_info(f"Reading inventory from {path}", 0)

    df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    if df.shape[1] < 2:
        raise ValueError(f"The inventory file {path} needs a nuclide and a value column.")
    name_column, value_column = df.columns[0], df.columns[1]
    is_activity = "Bq" in str(value_column)

    inventory = []
    for _, row in df.iterrows():
        name = _normalize_name(row[name_column])
        if not name:
            continue
        if name not in nuclides:
            writer.write_error(f"Nuclide not found in data: {name}")
            continue

        value = _to_float(row[value_column])
        if math.isnan(value):
            writer.write_error(f"Invalid inventory value for {name}: {row[value_column]!r}")
            continue

        if is_activity:
            try:
                entry = InventoryEntry.from_activity(name, value, nuclides[name].decay_constant)
            except ValueError as err:
                writer.write_error(str(err))
                continue
        else:
            entry = InventoryEntry(name, value)
        writer.write_info(f"Inventory: {entry.nuclide} {entry.number}", 1)
        inventory.append(entry)

    writer.write_inventory(inventory)
    return inventory


class _NuclideReader:
    """Builds the nuclide registry from the tree rows of a nuclide file."""

    def __init__(self, writer):
        self.writer = writer
        self.validator = InputValidator(writer)
        self.nuclides = {}

    def read(self, path):
        df = pd.read_csv(path, header=None, skiprows=1, names=list(range(_MAX_COLUMNS)),
                         dtype=str, keep_default_na=False, skip_blank_lines=True)
        records = [[str(field).strip() for field in row] for row in df.fillna("").values.tolist()]

        for i, record in enumerate(records):
            if not any(record):
                continue
            if record[0]:
                self._process_record(record, 0)
                continue

            # join with a line above
            start = next(n for n, field in enumerate(record) if field)
            if start < GROUP_WIDTH:
                self.writer.write_error(f"Cannot find the parent of row {i + 2}: {record[start]}")
                continue
            parent_line = i - 1
            while parent_line >= 0 and not records[parent_line][start - GROUP_WIDTH]:
                parent_line -= 1
            if parent_line < 0:
                self.writer.write_error(f"Cannot find the parent of row {i + 2}: {record[start]}")
                continue
            self._process_record(record, start, records[parent_line][start - GROUP_WIDTH])

        self.writer.write_nuclides(self.nuclides)
        return self.nuclides

    def _process_record(self, record, index, parent=None):
        while True:
            if parent is not None:
                self._add_daughter(parent, record[index], _field(record, index + 1))
            if _is_stable(record[index]):
                self._add_nuclide(record[index], "", "", "", stable=True)
                return
            self._add_nuclide(record[index],
                              _field(record, index + 2),
                              _field(record, index + 4),
                              _field(record, index + 5),
                              stable=False)
            if not _field(record, index + GROUP_WIDTH):
                return
            parent = record[index]
            index += GROUP_WIDTH

    def _add_daughter(self, parent, daughter, fraction):
        p = _normalize_name(parent)
        d = _normalize_name(daughter)
        f = 1.0 if fraction == "" else _to_float(fraction)
        if p not in self.nuclides:
            self.writer.write_error(f"Daughter {d} listed for unknown parent {p}")
            return
        self.writer.write_info(f"Adding daughter: {p} -> {d} ({f})", 1)
        # the registry is still under construction here
        self.nuclides[p].daughters[d] = f
        self.validator.validate_daughters(p, self.nuclides[p].daughters)

    def _add_nuclide(self, name, half_life, gamma_energies, gamma_frequency, stable):
        nname = _normalize_name(name)
        if stable:
            nuclide = Nuclide(nname, math.inf, stable=True)
        else:
            nuclide = Nuclide(nname,
                              self._normalize_half_life(half_life),
                              stable=False,
                              gammas=_parse_gammas(gamma_energies, gamma_frequency))

        if nname not in self.nuclides:
            self.writer.write_info(f"Adding new nuclide: {nname}", 1)
            self.nuclides[nname] = nuclide
            self.validator.validate_gammas(nuclide)
        else:
            self.validator.compare_nuclide_data(self.nuclides[nname], nuclide)

    def _normalize_half_life(self, half_life):
        """Half-life string such as "10.76 y" -> seconds. Unreadable values give 0."""
        match = re.match(r"\s*([0-9.]+)(.*)$", half_life)
        if match is not None:
            unit = re.sub(r"\s", "", match.group(2))
            value = _to_float(match.group(1))
            if unit in HALF_LIFE_UNITS and not math.isnan(value):
                return value * HALF_LIFE_UNITS[unit]
        self.writer.write_error(f"Error reading half-life: {half_life}")
        return 0.0


def _field(record, index):
    return record[index] if index < len(record) else ""


def _is_stable(name):
    return STABLE_MARKER in name


def _normalize_name(name):
    return str(name).replace(STABLE_MARKER, "").strip()


def _to_float(s):
    """Convert a string to float, NaN if it is not a number."""
    try:
        return float(str(s).strip())
    except ValueError:
        return math.nan


def _parse_gammas(energies, frequency):
    """
    Parse gamma lines.

    Either a single energy with its frequency in the next column, or a list
    "E1*p1, E2*p2" with an empty frequency column.
    """
    gammas = {}
    if not energies:
        return gammas
    if "," not in energies:
        gammas[energies.strip()] = _to_float(frequency)
    else:
        for line in energies.split(","):
            if not line.strip():
                continue
            energy, _, probability = line.partition("*")
            gammas[energy.strip()] = _to_float(probability)
    return gammas
