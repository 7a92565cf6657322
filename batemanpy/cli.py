import argparse
import logging
import sys

import pandas as pd

from batemanpy.decay_and_emissions import Decay
from batemanpy.output_writer import OutputWriter

logger = logging.getLogger(__name__)


def build_parser():
    ap = argparse.ArgumentParser(prog="batemanpy", description="Calculates decays of radionuclides.")
    ap.add_argument("nuclides", help="Path to nuclide data CSV file")
    ap.add_argument("inventory", help="Path to inventory data CSV file")
    ap.add_argument("-t", "--time", type=float, nargs="+", default=[0.0],
                    help="Decay time(s) in seconds")
    ap.add_argument("-l", "--level", type=int, default=1,
                    help="Info message importance level written to info.log")
    ap.add_argument("-o", "--output-dir", default="output")
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.level > 1 else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    writer = OutputWriter()
    try:
        decay = Decay.from_files(args.nuclides, args.inventory, writer=writer)
        results = decay.decay_isotopic_mixture(args.time)
    # DecayChainError is a ValueError
    except ValueError as err:
        logger.error("%s", err)
        writer.write_error(str(err))
        writer.write_files(args.level, args.output_dir)
        return 1

    writer.write_inventory(results)
    with pd.option_context("display.max_rows", None, "display.width", 120):
        print(results)
    writer.write_files(args.level, args.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
