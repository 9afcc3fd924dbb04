"""
Precompute normal formulas and map them to truth tables.

Every non-trivial DNF over up to n variables (n <= 5) is enumerated together
with its structural dual, the truth table of each is computed, and the
formula is filed into the bucket for that truth table.  Each bucket
remembers the formula with the fewest binary operators.

Trivial subformulas like p & p or p | ~p do not appear: clause subsets with
a subsumed clause or two opposite unit clauses are pruned along with every
extension of them.
"""

from __future__ import annotations
from collections.abc import Sequence as SequenceABC
from itertools import combinations
import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import pandas as pd

from logic_formulas import (
    FALSE,
    NEGATIVITY_FLAG,
    TRUE,
    VARIABLE_INDEX_MASK,
    Disjunction,
    Formula,
    Literal,
    clause_to_formula,
    structural_dual,
)
from truth_tables import (
    TruthTableComputer,
    check_num_variables,
    compute_two_to_two_to_n,
)

logger = logging.getLogger(__name__)

NONE_TEXT = "NONE"

Clause = Tuple[int, ...]


# ---------------------------------------------------------------------------
# Buckets
# ---------------------------------------------------------------------------


class LogicFormulaBucket:
    """All the formulas that map to one truth table, plus the smallest of them."""

    def __init__(self) -> None:
        self.minimum_formula: Optional[Formula] = None
        self.formulas: List[Formula] = []

    def add_formula(self, formula: Formula) -> None:
        self.formulas.append(formula)

        # Ties keep the formula seen first.
        if self.minimum_formula is None or (
            formula.count_binary_operators()
            < self.minimum_formula.count_binary_operators()
        ):
            self.minimum_formula = formula

    def minimum_formula_text(self, variable_names: Sequence[str]) -> str:
        if self.minimum_formula is None:
            return NONE_TEXT
        return self.minimum_formula.to_text(variable_names)

    def formula_list_text(self, variable_names: Sequence[str]) -> str:
        """Every formula in the bucket, one per line, each line newline-terminated."""
        return "".join(f"{f.to_text(variable_names)}\n" for f in self.formulas)

    def __len__(self) -> int:
        return len(self.formulas)

    def __iter__(self) -> Iterator[Formula]:
        return iter(self.formulas)

    def __repr__(self) -> str:
        return f"LogicFormulaBucket(num_formulas={len(self.formulas)})"


class _EmptyFormulaBucket(LogicFormulaBucket):
    """Stand-in for a truth table that has no formulas yet.  Read only."""

    def __init__(self) -> None:
        super().__init__()
        self.formulas = ()

    def add_formula(self, formula: Formula) -> None:
        raise TypeError(
            "Empty bucket is not stored; use FormulaBuckets.add_formula instead"
        )

    def __repr__(self) -> str:
        return "_EmptyFormulaBucket()"


class FormulaBuckets(SequenceABC):
    """
    One bucket per truth table of n variables, indexed by truth table.

    The collection has length 2^(2^n) but only buckets that received a
    formula are stored.  Indexing any other truth table returns a read-only
    empty bucket; only FormulaBuckets.add_formula changes the collection.
    """

    def __init__(self, num_variables: int) -> None:
        check_num_variables(num_variables)
        self.num_variables = num_variables
        self.num_truth_tables = compute_two_to_two_to_n(num_variables)
        self._buckets: Dict[int, LogicFormulaBucket] = {}

    def __len__(self) -> int:
        return self.num_truth_tables

    def __getitem__(self, truth_table):
        if isinstance(truth_table, slice):
            return [self[i] for i in range(*truth_table.indices(len(self)))]
        if truth_table < 0:
            truth_table += self.num_truth_tables
        if not 0 <= truth_table < self.num_truth_tables:
            raise IndexError(f"Truth table {truth_table} out of range")
        bucket = self._buckets.get(truth_table)
        return bucket if bucket is not None else _EmptyFormulaBucket()

    def add_formula(self, truth_table: int, formula: Formula) -> None:
        bucket = self._buckets.get(truth_table)
        if bucket is None:
            bucket = self._buckets[truth_table] = LogicFormulaBucket()
        bucket.add_formula(formula)

    def nonempty(self) -> Iterator[Tuple[int, LogicFormulaBucket]]:
        """(truth_table, bucket) for every bucket holding a formula, ascending."""
        for truth_table in sorted(self._buckets):
            yield truth_table, self._buckets[truth_table]

    def num_formulas(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def num_nonempty(self) -> int:
        return len(self._buckets)


# ---------------------------------------------------------------------------
# Clause universe
# ---------------------------------------------------------------------------


def assign_signs(variable_indices: Sequence[int]) -> Iterator[Clause]:
    """
    Yield every assignment of signs to the given variable indices.

    The configuration counter runs from 0 to 2^k - 1; bit j of the counter
    set makes ``variable_indices[j]`` positive, clear makes it negative.
    """
    indices = tuple(variable_indices)
    for configuration in range(1 << len(indices)):
        yield tuple(
            index if configuration & (1 << position) else index | NEGATIVITY_FLAG
            for position, index in enumerate(indices)
        )


def build_clause_universe(n: int) -> List[Clause]:
    """
    All clauses over variables 1..n, shortest first.

    Within one arity the variable subsets come in lexicographic order and,
    for each subset, the sign assignments in assign_signs order.  The
    generator depends on this order.
    """
    check_num_variables(n)
    universe: List[Clause] = []
    for arity in range(1, n + 1):
        before = len(universe)
        for variable_indices in combinations(range(1, n + 1), arity):
            universe.extend(assign_signs(variable_indices))
        logger.debug("Built %d clauses of arity %d", len(universe) - before, arity)
    return universe


def is_subclause_of(old_clause: Clause, new_clause: Clause) -> bool:
    """
    Whether every literal of ``old_clause`` appears, with the same sign, in
    ``new_clause``.

    Both clauses must be sorted by variable index.  Clauses of equal length
    are never reported as subclauses because the universe holds no duplicates.
    """
    old_length = len(old_clause)
    new_length = len(new_clause)
    if old_length == new_length:
        return False

    j = 0
    for literal in old_clause:
        index = literal & VARIABLE_INDEX_MASK
        while index > new_clause[j] & VARIABLE_INDEX_MASK:
            j += 1
            if j == new_length:
                return False
        if literal != new_clause[j]:
            return False
    return True


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class NormalFormulaGenerator:
    """
    Enumerate clause subsets depth first and file the resulting formulas.

    Parameters
    ----------
    n:
        Number of variables, between 1 and 5.
    """

    def __init__(self, n: int) -> None:
        check_num_variables(n)
        self.n = n
        self.clauses = build_clause_universe(n)
        self.tt_computer = TruthTableComputer(n)
        self.formula_buckets = FormulaBuckets(n)
        self.formula_buckets.add_formula(0, FALSE)
        self.formula_buckets.add_formula(self.tt_computer.full_mask, TRUE)

    def add_formula_to_buckets(self, formula: Formula) -> None:
        truth_table = self.tt_computer.compute_truth_table(formula)
        self.formula_buckets.add_formula(truth_table, formula)

    def generate_all_normal_formulas(self) -> FormulaBuckets:
        logger.info(
            "Generating normal formulas over %d variables from %d clauses",
            self.n,
            len(self.clauses),
        )
        prefix: List[Clause] = []
        for i in range(len(self.clauses)):
            self._generate_with_prefix(prefix, i)

        logger.info(
            "Generated %d formulas into %d non-empty buckets",
            self.formula_buckets.num_formulas(),
            self.formula_buckets.num_nonempty(),
        )
        return self.formula_buckets

    def _generate_with_prefix(self, prefix: List[Clause], clause_index: int) -> None:
        new_clause = self.clauses[clause_index]

        # A unit clause only ever follows unit clauses, so the opposite
        # literal would sit alone in a prefix clause.
        if len(new_clause) == 1:
            for clause in prefix:
                if clause[0] ^ new_clause[0] == NEGATIVITY_FLAG:
                    return
        else:
            for clause in prefix:
                if is_subclause_of(clause, new_clause):
                    return

        prefix.append(new_clause)
        try:
            self._add_formulas_for(prefix)
            for i in range(clause_index + 1, len(self.clauses)):
                self._generate_with_prefix(prefix, i)
        finally:
            prefix.pop()

    def _add_formulas_for(self, clauses: List[Clause]) -> None:
        conjunctions = [clause_to_formula(clause) for clause in clauses]

        if len(conjunctions) == 1:
            # Larger single clauses show up later as the dual of a disjunction
            # of unit clauses.
            if isinstance(conjunctions[0], Literal):
                self.add_formula_to_buckets(conjunctions[0])
            return

        dnf_formula = Disjunction(tuple(conjunctions))
        self.add_formula_to_buckets(structural_dual(dnf_formula))
        self.add_formula_to_buckets(dnf_formula)


def generate_truth_tables_with_up_to_n_variables(n: int) -> FormulaBuckets:
    """
    Generate every truth table of n variables and map formulas onto them.

    Only feasible for small n: the search is exponential in the size of the
    clause universe.  Raises ValueError unless 1 <= n <= 5.
    """
    check_num_variables(n)
    return NormalFormulaGenerator(n).generate_all_normal_formulas()


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def bucket_summary(
    buckets: FormulaBuckets, variable_names: Sequence[str]
) -> pd.DataFrame:
    """
    One row per non-empty bucket.

    Columns: truth_table, num_formulas, minimum_operators, minimum_formula.
    """
    rows = [
        {
            "truth_table": truth_table,
            "num_formulas": len(bucket),
            "minimum_operators": bucket.minimum_formula.count_binary_operators(),
            "minimum_formula": bucket.minimum_formula_text(variable_names),
        }
        for truth_table, bucket in buckets.nonempty()
    ]
    return pd.DataFrame(
        rows,
        columns=["truth_table", "num_formulas", "minimum_operators", "minimum_formula"],
    )
