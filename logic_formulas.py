"""
Formula data model for the normal-formula precomputer.

Main features:
- Literal encoding: variable index and sign packed in one integer
- Formula AST: Const (FALSE / TRUE), Literal, Conjunction, Disjunction
- Binary-operator counting (the size metric used to pick minimal formulas)
- Text rendering with caller-supplied variable names
- Structural dual of a formula (swap every conjunction with a disjunction)
- Three-valued evaluation under a partial assignment

Variables are numbered from 1 to n.  There is no variable 0.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence, Set, Tuple


# ---------------------------------------------------------------------------
# Literal encoding
# ---------------------------------------------------------------------------

# The highest bit of a 32-bit word marks a negated literal.
NEGATIVITY_FLAG = 1 << 31
VARIABLE_INDEX_MASK = NEGATIVITY_FLAG - 1

CONJUNCTION_SYMBOL = "&"
DISJUNCTION_SYMBOL = "|"
NEGATION_SYMBOL = "~"

UNICODE_CONJUNCTION_SYMBOL = "∧"
UNICODE_DISJUNCTION_SYMBOL = "∨"
UNICODE_NEGATION_SYMBOL = "¬"

FALSE_TEXT = "FALSE"
TRUE_TEXT = "TRUE"
NULL_TEXT = "null"


def make_literal(index: int, negated: bool = False) -> int:
    """Pack a 1-based variable index and a sign into a literal code."""
    if index < 1 or index > VARIABLE_INDEX_MASK:
        raise ValueError(f"Invalid variable index {index}")
    return index | NEGATIVITY_FLAG if negated else index


def variable_index(literal: int) -> int:
    return literal & VARIABLE_INDEX_MASK


def is_positive_literal(literal: int) -> bool:
    return literal & NEGATIVITY_FLAG == 0


def negate_literal(literal: int) -> int:
    return literal ^ NEGATIVITY_FLAG


def default_variable_names(n: int) -> List[str]:
    """Return ["p1", ..., "pn"]."""
    return [f"p{i}" for i in range(1, n + 1)]


# ---------------------------------------------------------------------------
# Three-valued truth values
# ---------------------------------------------------------------------------


class TruthValue(Enum):
    """Value of a formula under a possibly partial assignment."""

    UNRESTRICTED = "unrestricted"
    MUST_BE_TRUE = "must_be_true"
    MUST_BE_FALSE = "must_be_false"


# ---------------------------------------------------------------------------
# Formula AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Formula:
    def count_binary_operators(self) -> int:
        raise NotImplementedError

    def evaluate(self, truth_values: Dict[int, bool]) -> TruthValue:
        raise NotImplementedError

    def variables(self) -> Set[int]:
        raise NotImplementedError

    def to_text(self, variable_names: Sequence[str], use_unicode: bool = False) -> str:
        """
        Render the formula with the given variable names.

        Children of a conjunction or disjunction are parenthesized when they
        are compound themselves; the outermost operator is not.

        Parameters
        ----------
        variable_names:
            Names of the variables; variable i is ``variable_names[i - 1]``.
        use_unicode:
            If True, use "¬", "∧" and "∨" instead of "~", "&" and "|".
        """
        parts: List[str] = []
        _append_text(self, parts, False, variable_names, use_unicode)
        return "".join(parts)


@dataclass(frozen=True)
class Const(Formula):
    value: int  # 0 or 1

    def count_binary_operators(self) -> int:
        return 0

    def evaluate(self, truth_values: Dict[int, bool]) -> TruthValue:
        return TruthValue.MUST_BE_TRUE if self.value else TruthValue.MUST_BE_FALSE

    def variables(self) -> Set[int]:
        return set()


FALSE = Const(0)
TRUE = Const(1)


@dataclass(frozen=True)
class Literal(Formula):
    code: int  # sign flag | variable index

    @property
    def index(self) -> int:
        return variable_index(self.code)

    @property
    def positive(self) -> bool:
        return is_positive_literal(self.code)

    def count_binary_operators(self) -> int:
        return 0

    def evaluate(self, truth_values: Dict[int, bool]) -> TruthValue:
        known_value = truth_values.get(self.index)
        if known_value is None:
            return TruthValue.UNRESTRICTED
        if known_value == self.positive:
            return TruthValue.MUST_BE_TRUE
        return TruthValue.MUST_BE_FALSE

    def variables(self) -> Set[int]:
        return {self.index}


@dataclass(frozen=True)
class Conjunction(Formula):
    children: Tuple[Formula, ...]

    def count_binary_operators(self) -> int:
        return 1 + sum(child.count_binary_operators() for child in self.children)

    def evaluate(self, truth_values: Dict[int, bool]) -> TruthValue:
        contains_unknown = False
        for child in self.children:
            value = child.evaluate(truth_values)
            if value is TruthValue.MUST_BE_FALSE:
                return TruthValue.MUST_BE_FALSE
            if value is TruthValue.UNRESTRICTED:
                contains_unknown = True
        return TruthValue.UNRESTRICTED if contains_unknown else TruthValue.MUST_BE_TRUE

    def variables(self) -> Set[int]:
        return set().union(*(child.variables() for child in self.children))


@dataclass(frozen=True)
class Disjunction(Formula):
    children: Tuple[Formula, ...]

    def count_binary_operators(self) -> int:
        return 1 + sum(child.count_binary_operators() for child in self.children)

    def evaluate(self, truth_values: Dict[int, bool]) -> TruthValue:
        contains_unknown = False
        for child in self.children:
            value = child.evaluate(truth_values)
            if value is TruthValue.MUST_BE_TRUE:
                return TruthValue.MUST_BE_TRUE
            if value is TruthValue.UNRESTRICTED:
                contains_unknown = True
        return TruthValue.UNRESTRICTED if contains_unknown else TruthValue.MUST_BE_FALSE

    def variables(self) -> Set[int]:
        return set().union(*(child.variables() for child in self.children))


# ---------------------------------------------------------------------------
# Formula utilities
# ---------------------------------------------------------------------------


def clause_to_formula(clause: Sequence[int]) -> Formula:
    """A single literal stays a literal; longer clauses become a conjunction."""
    if len(clause) == 1:
        return Literal(clause[0])
    return Conjunction(tuple(Literal(code) for code in clause))


def structural_dual(formula: Formula) -> Formula:
    """
    Swap every Conjunction for a Disjunction and vice versa.

    Literals and constants are left alone.  The result reuses the literal
    structure of the input but is in general not logically equivalent to it.
    Applying the function twice gives back a formula equal to the input.
    """
    if isinstance(formula, Conjunction):
        return Disjunction(tuple(structural_dual(child) for child in formula.children))
    if isinstance(formula, Disjunction):
        return Conjunction(tuple(structural_dual(child) for child in formula.children))
    return formula


def _append_text(
    formula: Formula,
    parts: List[str],
    should_parenthesize: bool,
    variable_names: Sequence[str],
    use_unicode: bool,
) -> None:
    if isinstance(formula, Const):
        parts.append(TRUE_TEXT if formula.value else FALSE_TEXT)
    elif isinstance(formula, Literal):
        if not formula.positive:
            parts.append(UNICODE_NEGATION_SYMBOL if use_unicode else NEGATION_SYMBOL)
        parts.append(variable_names[formula.index - 1])
    elif isinstance(formula, (Conjunction, Disjunction)):
        if not formula.children:
            parts.append(NULL_TEXT)
            return
        if isinstance(formula, Conjunction):
            symbol = UNICODE_CONJUNCTION_SYMBOL if use_unicode else CONJUNCTION_SYMBOL
        else:
            symbol = UNICODE_DISJUNCTION_SYMBOL if use_unicode else DISJUNCTION_SYMBOL

        if should_parenthesize:
            parts.append("(")
        for position, child in enumerate(formula.children):
            if position:
                parts.append(f" {symbol} ")
            _append_text(child, parts, True, variable_names, use_unicode)
        if should_parenthesize:
            parts.append(")")
    else:
        raise TypeError(f"Unsupported formula node {formula!r}")
