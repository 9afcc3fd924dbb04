"""
Command line tool: precompute normal formulas for every truth table of n variables.

Generates a large number of boolean formulas, calculates their truth tables,
and determines the smallest formula for each truth table.  In text mode all
formulas go to formulalist.txt (mostly useful for testing).  In html mode the
truth tables are pretty printed to truthtablesX.htm files, each table followed
by the formula with the fewest binary operators and the list of all formulas
with that truth table.

The search is exponential; n >= 4 is very slow.
"""

from __future__ import annotations
import argparse
import logging
import time
from typing import List, Optional

from formula_precomputer import generate_truth_tables_with_up_to_n_variables
from logic_formulas import default_variable_names
from reports import (
    plot_minimum_formula_sizes,
    write_formula_list_to_html_files,
    write_formula_list_to_text_file,
)
from truth_tables import MAX_VARIABLES

DEFAULT_NUM_VARIABLES = 3
DEFAULT_OUTPUT_DIR = "truth_tables"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-precompute",
        description="Map CNF and DNF formulas to truth tables and find the smallest formula for each",
    )
    parser.add_argument("-n", type=int, default=DEFAULT_NUM_VARIABLES,
                        choices=range(1, MAX_VARIABLES + 1),
                        help=f"Number of variables per formula (default: {DEFAULT_NUM_VARIABLES})")
    parser.add_argument("-o", "--output", choices=["html", "text"], default="text",
                        help="Write html pages or a single text file (default: text)")
    parser.add_argument("-d", "--output-dir", default=DEFAULT_OUTPUT_DIR,
                        help=f"Directory for the output files (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--plot", metavar="FILE",
                        help="Also save a chart of minimal formula sizes to FILE")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log progress")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    start_time = time.perf_counter()

    buckets = generate_truth_tables_with_up_to_n_variables(args.n)
    variable_names = default_variable_names(args.n)

    if args.output == "html":
        for path in write_formula_list_to_html_files(args.output_dir, buckets, variable_names):
            print(f"Truth table data written to {path}")
    else:
        path = write_formula_list_to_text_file(args.output_dir, buckets, variable_names)
        print(f"Formula list written to {path}")

    if args.plot:
        plot_minimum_formula_sizes(buckets, variable_names, output_file=args.plot)
        print(f"Chart saved to {args.plot}")

    print(f"Total execution time = {time.perf_counter() - start_time:.3f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
