"""
Write precomputed formula buckets to disk.

- Text mode: a single formulalist.txt holding every formula, bucket by bucket.
- HTML mode: truthtablesX.htm files, each showing up to 256 truth tables with
  the minimal formula and the list of all formulas for every table.
- A bar chart of how many truth tables need each minimal number of operators.
"""

from __future__ import annotations
import html
import logging
import os
from typing import List, Optional, Sequence
import matplotlib.pyplot as plt

from formula_precomputer import FormulaBuckets, LogicFormulaBucket, bucket_summary
from truth_tables import make_truth_table

logger = logging.getLogger(__name__)

NUM_TRUTH_TABLES_PER_FILE = 256
HTML_FILE_EXTENSION = "htm"
TRUTH_TABLE_FILE_NAME_PREFIX = "truthtables"
FORMULA_LIST_FILE_NAME = "formulalist.txt"

TABLE_BORDER_THICKNESS = 1
TABLE_HEADER_NUMBER = 3
T_TEXT = "T"
F_TEXT = "F"


# ---------------------------------------------------------------------------
# Text output
# ---------------------------------------------------------------------------


def write_formula_list_to_text_file(
    output_dir: str,
    buckets: FormulaBuckets,
    variable_names: Sequence[str],
) -> str:
    """Write every formula of every bucket, in truth-table order, to formulalist.txt."""
    os.makedirs(output_dir, exist_ok=True)
    output_file = os.path.join(output_dir, FORMULA_LIST_FILE_NAME)

    with open(output_file, "w", encoding="utf-8") as fh:
        for _, bucket in buckets.nonempty():
            fh.write(bucket.formula_list_text(variable_names))

    logger.info("Formula list written to %s", output_file)
    return output_file


# ---------------------------------------------------------------------------
# HTML output
# ---------------------------------------------------------------------------


def truth_table_html(
    truth_table: int, title: str, variable_names: Sequence[str]
) -> str:
    """Header plus a bordered T/F table for one truth table, all-true row first."""
    df = make_truth_table(variable_names, truth_table, conclusion_name=title)
    df = df.replace({1: T_TEXT, 0: F_TEXT})
    table = df.to_html(index=False, border=TABLE_BORDER_THICKNESS)
    header = f"<h{TABLE_HEADER_NUMBER}>{html.escape(title)}</h{TABLE_HEADER_NUMBER}>"
    return f"{header}\n\n{table}\n"


def formula_list_html(
    bucket: LogicFormulaBucket, variable_names: Sequence[str]
) -> str:
    """Minimum formula paragraph followed by an unordered list of all formulas."""
    minimum_text = html.escape(bucket.minimum_formula_text(variable_names))
    lines = [f"<p>Minimum Formula: {minimum_text}</p>\n", "<ul>\n"]
    for formula in bucket:
        lines.append(f"<li>{html.escape(formula.to_text(variable_names))}</li>\n")
    lines.append("</ul>\n")
    return "".join(lines)


def _html_page(body: str) -> str:
    return f"<html>\n<body>\n{body}</body>\n</html>\n"


def write_formula_list_to_html_files(
    output_dir: str,
    buckets: FormulaBuckets,
    variable_names: Sequence[str],
) -> List[str]:
    """
    Write the truth tables and their formulas to truthtablesX.htm files.

    Parameters
    ----------
    output_dir:
        Directory for the files; created if missing.
    buckets:
        Output of generate_truth_tables_with_up_to_n_variables.
    variable_names:
        Names of the variables, used as column headers and in formulas.

    Returns
    -------
    list of str
        Paths of the written files, in order.
    """
    os.makedirs(output_dir, exist_ok=True)

    num_truth_tables = len(buckets)
    if num_truth_tables < NUM_TRUTH_TABLES_PER_FILE:
        num_files = 1
    else:
        num_files = num_truth_tables // NUM_TRUTH_TABLES_PER_FILE

    written: List[str] = []
    truth_table = 0
    for file_index in range(num_files):
        if file_index + 1 == num_files:
            end_point = num_truth_tables
        else:
            end_point = truth_table + NUM_TRUTH_TABLES_PER_FILE

        sections = []
        while truth_table < end_point:
            sections.append(
                truth_table_html(truth_table, str(truth_table), variable_names)
            )
            sections.append(formula_list_html(buckets[truth_table], variable_names))
            truth_table += 1

        output_file = os.path.join(
            output_dir,
            f"{TRUTH_TABLE_FILE_NAME_PREFIX}{file_index}.{HTML_FILE_EXTENSION}",
        )
        with open(output_file, "w", encoding="utf-8") as fh:
            fh.write(_html_page("".join(sections)))

        logger.info("Truth table data written to %s", output_file)
        written.append(output_file)

    return written


# ---------------------------------------------------------------------------
# Plotting
# ---------------------------------------------------------------------------


def plot_minimum_formula_sizes(
    buckets: FormulaBuckets,
    variable_names: Sequence[str],
    output_file: Optional[str] = None,
    title: Optional[str] = None,
) -> None:
    """
    Bar chart: number of truth tables per minimal binary-operator count.

    Saved to ``output_file`` when given, otherwise shown.
    """
    summary = bucket_summary(buckets, variable_names)
    counts = summary["minimum_operators"].value_counts().sort_index()

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar(counts.index.astype(str), counts.to_numpy())
    ax.set_xlabel("Binary operators in minimal formula")
    ax.set_ylabel("Truth tables")
    if title is None:
        title = (
            f"Minimal formula sizes over {buckets.num_variables} variables "
            f"({len(summary)} of {len(buckets)} truth tables reached)"
        )
    ax.set_title(title)
    fig.tight_layout()

    if output_file is None:
        plt.show()
    else:
        fig.savefig(output_file)
        logger.info("Chart saved to %s", output_file)
    plt.close(fig)
