"""
Truth tables of formulas over at most 5 variables.

A truth table is a plain int of 2^n bits.  The data is stored as follows for
variables (p, q, r):

    bit 7: 1 if p=T, q=T, r=T is True
    bit 6: 1 if p=T, q=T, r=F is True
    ...
    bit 1: 1 if p=F, q=F, r=T is True
    bit 0: 1 if p=F, q=F, r=F is True

Callers keep track of which variables are in the table and in what order.

Main features:
- TruthTableComputer: bitmask evaluator, linear in the size of the formula
- Rows of a truth table in display order (all true first)
- pandas DataFrame for a single truth table
- numpy matrix for many truth tables
"""

from __future__ import annotations
from itertools import product
from typing import Iterable, List, Sequence, Tuple
import numpy as np
import pandas as pd

from logic_formulas import (
    Conjunction,
    Const,
    Disjunction,
    Formula,
    Literal,
)

MAX_VARIABLES = 5


def check_num_variables(n: int) -> None:
    if n < 1 or n > MAX_VARIABLES:
        raise ValueError(
            f"Invalid number of variables {n}: must be between 1 and {MAX_VARIABLES}"
        )


def compute_two_to_n(n: int) -> int:
    return 1 << n


def compute_two_to_two_to_n(n: int) -> int:
    """2^(2^n), not (2^2)^n: the number of boolean functions of n variables."""
    return 1 << (1 << n)


# ---------------------------------------------------------------------------
# Bitmask evaluator
# ---------------------------------------------------------------------------


class TruthTableComputer:
    """
    Compute truth tables of formulas with at most 5 variables.

    One positive and one negative bitmask is precomputed per variable; the
    truth table of a formula is then a fold of bitwise AND / OR over its tree.

    Parameters
    ----------
    num_variables:
        Number of variables, between 1 and 5.
    """

    def __init__(self, num_variables: int) -> None:
        check_num_variables(num_variables)
        self.num_variables = num_variables
        self.full_mask = compute_two_to_two_to_n(num_variables) - 1
        self.positive_bitmasks = self._build_positive_bitmasks(num_variables)
        self.negative_bitmasks = self._build_negative_bitmasks(
            num_variables, self.positive_bitmasks, self.full_mask
        )

    @staticmethod
    def _build_positive_bitmasks(num_variables: int) -> List[int]:
        if num_variables == 1:
            return [0b10]

        # Bitmasks for 2 variables, last variable first; reversed at the end.
        bitmasks = [0b1010, 0b1100]
        num_bits = 4
        for _ in range(3, num_variables + 1):
            # Each old variable repeats its pattern in both halves of the wider word.
            bitmasks = [(bitmask << num_bits) | bitmask for bitmask in bitmasks]
            # The new variable is true in the upper half.
            bitmasks.append(((1 << num_bits) - 1) << num_bits)
            num_bits <<= 1

        bitmasks.reverse()
        return bitmasks

    @staticmethod
    def _build_negative_bitmasks(
        num_variables: int, positive_bitmasks: Sequence[int], full_mask: int
    ) -> List[int]:
        if num_variables == 1:
            return [0b01]

        half_width = 1 << (num_variables - 1)
        negative_bitmasks = [positive_bitmasks[0] >> half_width]
        for bitmask in positive_bitmasks[1:]:
            negative_bitmasks.append(~bitmask & full_mask)
        return negative_bitmasks

    def compute_truth_table(self, formula: Formula) -> int:
        """Return the truth table of ``formula`` as an int of 2^n bits."""
        if isinstance(formula, Literal):
            index = formula.index
            if index < 1 or index > self.num_variables:
                raise RuntimeError(
                    f"Internal error: literal references variable {index} "
                    f"but only {self.num_variables} variables are configured"
                )
            if formula.positive:
                return self.positive_bitmasks[index - 1]
            return self.negative_bitmasks[index - 1]

        if isinstance(formula, Conjunction):
            truth_table = self.full_mask
            for child in formula.children:
                truth_table &= self.compute_truth_table(child)
            return truth_table

        if isinstance(formula, Disjunction):
            truth_table = 0
            for child in formula.children:
                truth_table |= self.compute_truth_table(child)
            return truth_table

        if isinstance(formula, Const):
            if formula.value:
                return self.positive_bitmasks[0] | self.negative_bitmasks[0]
            return 0

        raise TypeError(f"Unsupported formula node {formula!r}")

    def describe_bitmasks(self) -> str:
        """Binary listing of the bitmasks, for debugging."""
        width = compute_two_to_n(self.num_variables)
        positive = ", ".join(f"{b:0{width}b}" for b in self.positive_bitmasks)
        negative = ", ".join(f"{b:0{width}b}" for b in self.negative_bitmasks)
        return f"Positive: {positive}\nNegative: {negative}"


# ---------------------------------------------------------------------------
# Truth table views
# ---------------------------------------------------------------------------


def truth_table_rows(n: int) -> List[Tuple[int, ...]]:
    """
    Return all 2^n assignments in display order, all true first.

    Example for n = 2:
        [(1, 1), (1, 0), (0, 1), (0, 0)]

    Row r describes the assignment stored at bit 2^n - 1 - r.
    """
    return list(product([1, 0], repeat=n))


def truth_table_outputs(truth_table: int, n: int) -> Tuple[int, ...]:
    """Outputs (0 or 1) of a truth table, one per row of truth_table_rows(n)."""
    num_rows = compute_two_to_n(n)
    return tuple((truth_table >> (num_rows - 1 - row)) & 1 for row in range(num_rows))


def truth_table_from_outputs(outputs: Sequence[int]) -> int:
    """Inverse of truth_table_outputs."""
    truth_table = 0
    for out in outputs:
        truth_table = (truth_table << 1) | (1 if out else 0)
    return truth_table


def make_truth_table(
    var_names: Sequence[str],
    truth_table: int,
    conclusion_name: str = "f",
) -> pd.DataFrame:
    """
    Build a pandas DataFrame representing a truth table.

    Parameters
    ----------
    var_names:
        Names of the variables, for example ["p1", "p2"].  At most 5.
    truth_table:
        The truth table as an int of 2^n bits.
    conclusion_name:
        Name of the output column.

    Returns
    -------
    pandas.DataFrame
        Columns: var_names plus the conclusion column, rows from all true to
        all false, cells 0 or 1.
    """
    n = len(var_names)
    check_num_variables(n)

    rows = truth_table_rows(n)
    data = {name: [row[i] for row in rows] for i, name in enumerate(var_names)}
    data[conclusion_name] = list(truth_table_outputs(truth_table, n))
    return pd.DataFrame(data)


def truth_table_matrix(truth_tables: Iterable[int], n: int) -> np.ndarray:
    """
    Matrix with one row per truth table and one column per assignment.

    Returns
    -------
    numpy.ndarray
        Shape (num_truth_tables, 2^n), entries 0 or 1.
    """
    num_rows = compute_two_to_n(n)
    # reshape keeps the column count when no truth tables are given
    return np.array(
        [truth_table_outputs(tt, n) for tt in truth_tables], dtype=int
    ).reshape(-1, num_rows)
