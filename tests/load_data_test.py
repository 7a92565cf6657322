import json
import math as math
import tempfile
import unittest
from pathlib import Path

import pandas as pd

from batemanpy.cli import main
from batemanpy.input_validator import InputValidator
from batemanpy.load_data import (_NuclideReader, _parse_gammas, load_decay_data,
                                 load_inventory, load_nuclide_data)
from batemanpy.nuclide import InventoryEntry, Nuclide
from batemanpy.output_writer import OutputWriter

DATA_DIR = Path(__file__).parent / "data"


class TestLoadData(unittest.TestCase):
    """
    Reading of the nuclide and inventory CSV files.
    """

    def setUp(self):
        self.writer = OutputWriter()
        self.nuclides = load_nuclide_data(DATA_DIR / "nuclides.csv", writer=self.writer)


    def test_nuclide_tree(self):
        self.assertEqual(self.writer.errors, [])
        self.assertEqual(set(self.nuclides), {"Kr-85m", "Kr-85", "Rb-85", "Cs-137", "Ba-137m", "Ba-137",
                                              "I-131", "Xe-131m", "Xe-131"})

        self.assertEqual(self.nuclides["Kr-85m"].daughters, {"Rb-85": 0.786, "Kr-85": 0.214})
        self.assertEqual(self.nuclides["Kr-85"].daughters, {"Rb-85": 1.0})
        self.assertEqual(self.nuclides["Cs-137"].daughters, {"Ba-137m": 0.947, "Ba-137": 0.053})
        self.assertEqual(self.nuclides["I-131"].daughters, {"Xe-131m": 0.0112, "Xe-131": 0.9888})
        self.assertEqual(self.nuclides["Xe-131m"].daughters, {"Xe-131": 1.0})


    def test_half_lives(self):
        self.assertEqual(self.nuclides["Kr-85m"].half_life, 4.48 * 3600)
        self.assertEqual(self.nuclides["Kr-85"].half_life, 10.76 * 3.154e7)
        self.assertEqual(self.nuclides["Ba-137m"].half_life, 2.552 * 60)
        self.assertEqual(self.nuclides["I-131"].half_life, 8.0252 * 86400)


    def test_stable_nuclides(self):
        for name in ["Rb-85", "Ba-137", "Xe-131"]:
            nuclide = self.nuclides[name]
            self.assertTrue(nuclide.stable)
            self.assertEqual(nuclide.half_life, math.inf)
            self.assertEqual(nuclide.decay_constant, 0.0)
            self.assertEqual(nuclide.daughters, {})


    def test_gammas(self):
        self.assertEqual(self.nuclides["Kr-85m"].gammas, {"151.195": 0.751})
        self.assertEqual(self.nuclides["I-131"].gammas, {"364.49": 0.815, "636.99": 0.0716})
        self.assertEqual(self.nuclides["Cs-137"].gammas, {})
        self.assertEqual(_parse_gammas("100*0.5, 200*0.25,", ""), {"100": 0.5, "200": 0.25})


    def test_normalize_half_life(self):
        reader = _NuclideReader(self.writer)
        self.assertEqual(reader._normalize_half_life("10.76y"), 10.76 * 3.154e7)
        self.assertEqual(reader._normalize_half_life("3 hr"), 3 * 3600.0)
        self.assertEqual(reader._normalize_half_life("2 d"), 2 * 86400.0)
        self.assertEqual(reader._normalize_half_life("12 s"), 12.0)
        self.assertEqual(self.writer.errors, [])

        self.assertEqual(reader._normalize_half_life("1.5 weeks"), 0.0)
        self.assertEqual(reader._normalize_half_life("unknown"), 0.0)
        self.assertEqual(self.writer.errors, ["Error reading half-life: 1.5 weeks",
                                              "Error reading half-life: unknown"])


    def test_row_without_parent(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "orphan.csv"
            path.write_text("Nuclide,Fraction,Half-life,Decay mode,Gamma,Frequency,Daughter\n"
                            ",,,,,,Orphan-1,1.0,1 h\n")
            writer = OutputWriter()
            nuclides = load_nuclide_data(path, writer=writer)
        self.assertEqual(nuclides, {})
        self.assertEqual(len(writer.errors), 1)
        self.assertIn("Cannot find the parent", writer.errors[0])


    def test_duplicate_definitions_are_compared(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "duplicates.csv"
            path.write_text("Nuclide,Fraction,Half-life,Decay mode,Gamma,Frequency\n"
                            "Co-60,,5.27 y,B-,1173.2,0.9985\n"
                            "Co-60,,5.3 y,B-,1173.2,0.9985\n")
            writer = OutputWriter()
            nuclides = load_nuclide_data(path, writer=writer)
        self.assertEqual(nuclides["Co-60"].half_life, 5.27 * 3.154e7)
        self.assertEqual(len(writer.errors), 1)
        self.assertTrue(writer.errors[0].startswith("Inconsistent half-lives found for Co-60"))


    def test_inventory(self):
        inventory = load_inventory(DATA_DIR / "one_nuclide.csv", self.nuclides, writer=self.writer)
        self.assertEqual(inventory, [InventoryEntry("Kr-85", 1e20)])
        self.assertIsNotNone(self.writer.inventory)


    def test_inventory_unknown_nuclide(self):
        inventory = load_inventory(DATA_DIR / "unknown_nuclide.csv", self.nuclides, writer=self.writer)
        self.assertEqual(inventory, [InventoryEntry("Kr-85", 1e20)])
        self.assertEqual(self.writer.errors, ["Nuclide not found in data: Xe-133"])


    def test_inventory_from_activity(self):
        inventory = load_inventory(DATA_DIR / "activity.csv", self.nuclides, writer=self.writer)
        self.assertEqual(len(inventory), 1)
        self.assertEqual(inventory[0].nuclide, "Cs-137")
        expected = 3.7e10 / self.nuclides["Cs-137"].decay_constant
        self.assertTrue(math.isclose(inventory[0].number, expected, rel_tol=1e-12))
        # activities of stable nuclides cannot be converted
        self.assertEqual(len(self.writer.errors), 1)
        self.assertIn("Ba-137", self.writer.errors[0])


    def test_load_decay_data(self):
        data = load_decay_data(DATA_DIR / "nuclides.csv", DATA_DIR / "two_nuclides.csv")
        self.assertEqual(len(data.nuclides), 9)
        self.assertEqual([entry.nuclide for entry in data.inventory], ["Kr-85", "Kr-85m"])
        self.assertEqual(load_decay_data(DATA_DIR / "nuclides.csv").inventory, [])


class TestInputValidator(unittest.TestCase):

    def setUp(self):
        self.writer = OutputWriter()
        self.validator = InputValidator(self.writer)


    def test_compare_nuclide_data(self):
        a = Nuclide("Cs-137", 1.0, gammas={"661.657": 0.85})
        b = Nuclide("Cs-137", 2.0, gammas={"661.657": 0.9, "283.5": 0.0006})
        self.validator.compare_nuclide_data(a, b)
        self.assertEqual(self.writer.errors, [
            "Inconsistent half-lives found for Cs-137 (1.0 != 2.0)",
            "Inconsistent number of gammas listed for Cs-137 (1 != 2)",
            "Inconsistent gamma frequency for Cs-137 661.657 (0.85 != 0.9)",
            "Inconsistent gammas listed for Cs-137 (mismatched: 283.5)",
        ])


    def test_consistent_nuclide_data(self):
        a = Nuclide("Cs-137", 1.0, gammas={"661.657": 0.85})
        self.validator.compare_nuclide_data(a, Nuclide("Cs-137", 1.0, gammas={"661.657": 0.85}))
        self.assertEqual(self.writer.errors, [])


    def test_validate_daughters(self):
        self.validator.validate_daughters("Bi-212", {"Po-212": 0.6406, "Tl-208": 0.3594})
        self.assertEqual(self.writer.errors, [])

        self.validator.validate_daughters("X-1", {"Y-1": 0.7, "Z-1": 0.6})
        self.validator.validate_daughters("X-2", {"Y-2": float("nan")})
        self.assertEqual(len(self.writer.errors), 2)
        self.assertTrue(self.writer.errors[0].startswith("Daughter fractions for X-1 sum above 1"))
        self.assertEqual(self.writer.errors[1], "Invalid branching fraction for X-2 -> Y-2: nan")


    def test_validate_gammas(self):
        nuclide = Nuclide("X-1", 1.0, gammas={"abc": 0.5, "100": 0.0, "200": float("nan"), "300": 0.2})
        self.validator.validate_gammas(nuclide)
        self.assertEqual(self.writer.errors, [
            "Invalid gamma energy listed for X-1: abc",
            "Zero-frequency gamma listed for X-1 100",
            "Invalid gamma frequency listed for X-1 200: nan",
        ])


class TestOutputWriter(unittest.TestCase):

    def test_write_files(self):
        writer = OutputWriter()
        writer.write_info("step", 0)
        writer.write_info("record", 1)
        writer.write_matrix("Matrix", [[1.0, 0.0], [0.5, 1.0]], 2)
        writer.write_error("something is wrong")
        writer.write_nuclides({"Rb-85": Nuclide("Rb-85", stable=True),
                               "Kr-85": Nuclide("Kr-85", 3.39e8, daughters={"Rb-85": 1.0})})
        writer.write_inventory([InventoryEntry("Kr-85", 2.0)])

        with tempfile.TemporaryDirectory() as tmp:
            output_dir = writer.write_files(2, Path(tmp) / "output")
            self.assertEqual((output_dir / "error.log").read_text(), "something is wrong")
            self.assertEqual((output_dir / "info.log").read_text(), "step\nrecord")

            with open(output_dir / "nuclides.json") as fh:
                nuclides = json.load(fh)
            self.assertIsNone(nuclides["Rb-85"]["half_life"])
            self.assertTrue(nuclides["Rb-85"]["stable"])
            self.assertEqual(nuclides["Kr-85"]["daughters"], {"Rb-85": 1.0})

            inventory = pd.read_csv(output_dir / "inventory.csv")
            self.assertEqual(list(inventory["Nuclide"]), ["Kr-85"])


    def test_info_levels(self):
        writer = OutputWriter()
        writer.write_matrix("Matrix", [[1.0, 0.0], [0.5, 1.0]], 2)
        self.assertEqual(writer.info_lines(2), [])
        self.assertEqual(writer.info_lines(3), ["\nMatrix", "1.0,0.0", "0.5,1.0"])


    def test_invalid_numbers_are_written_as_null(self):
        def reject_constant(name):
            raise ValueError(f"non-standard JSON constant {name}")

        writer = OutputWriter()
        writer.write_nuclides({"A-1": Nuclide("A-1", 10.0, daughters={"B-1": math.nan}, gammas={"100": math.nan})})
        with tempfile.TemporaryDirectory() as tmp:
            output_dir = writer.write_files(1, tmp)
            nuclides = json.loads((output_dir / "nuclides.json").read_text(), parse_constant=reject_constant)
        self.assertEqual(nuclides["A-1"]["daughters"], {"B-1": None})
        self.assertEqual(nuclides["A-1"]["gammas"], {"100": None})
        self.assertEqual(nuclides["A-1"]["half_life"], 10.0)


    def test_invalid_fraction_from_nuclide_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad_fraction.csv"
            path.write_text("Nuclide,Fraction,Half-life,Decay mode,Gamma,Frequency,Daughter,Fraction\n"
                            "A-1,,1 h,,100,abc,B-1 (stable),abc\n")
            writer = OutputWriter()
            load_nuclide_data(path, writer=writer)
            output_dir = writer.write_files(1, Path(tmp) / "output")
            text = (output_dir / "nuclides.json").read_text()
        self.assertNotIn("NaN", text)
        nuclides = json.loads(text)
        self.assertEqual(nuclides["A-1"]["daughters"], {"B-1": None})
        self.assertEqual(len(writer.errors), 2)


class TestCommandLine(unittest.TestCase):

    def test_main(self):
        with tempfile.TemporaryDirectory() as tmp:
            status = main([str(DATA_DIR / "nuclides.csv"), str(DATA_DIR / "two_nuclides.csv"),
                           "--time", "0", "3600", "--level", "3", "--output-dir", tmp])
            self.assertEqual(status, 0)
            results = pd.read_csv(Path(tmp) / "inventory.csv")
            self.assertEqual(sorted(set(results["Decay Time (sec)"])), [0.0, 3600.0])
            self.assertIn("Constructing C matrix", (Path(tmp) / "info.log").read_text())
            self.assertEqual((Path(tmp) / "error.log").read_text(), "")


    def test_main_cyclic_chain(self):
        with tempfile.TemporaryDirectory() as tmp:
            status = main([str(DATA_DIR / "cyclic_nuclides.csv"), str(DATA_DIR / "cyclic_inventory.csv"),
                           "-t", "10", "-o", tmp])
            self.assertEqual(status, 1)
            self.assertIn("cycle", (Path(tmp) / "error.log").read_text())


    def test_main_negative_time(self):
        with tempfile.TemporaryDirectory() as tmp:
            status = main([str(DATA_DIR / "nuclides.csv"), str(DATA_DIR / "one_nuclide.csv"),
                           "-t", "-5", "-o", tmp])
            self.assertEqual(status, 1)
            self.assertIn("decay time", (Path(tmp) / "error.log").read_text())


if __name__ == '__main__':
    unittest.main()
