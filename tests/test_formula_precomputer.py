from itertools import combinations

import pandas as pd
import pytest

from formula_precomputer import (
    NONE_TEXT,
    FormulaBuckets,
    LogicFormulaBucket,
    NormalFormulaGenerator,
    assign_signs,
    bucket_summary,
    build_clause_universe,
    generate_truth_tables_with_up_to_n_variables,
    is_subclause_of,
)
from logic_formulas import (
    FALSE,
    NEGATIVITY_FLAG,
    TRUE,
    VARIABLE_INDEX_MASK,
    Conjunction,
    Disjunction,
    Literal,
    TruthValue,
    make_literal,
)
from truth_tables import TruthTableComputer, truth_table_from_outputs, truth_table_rows

NEG = NEGATIVITY_FLAG


def lit(index, negated=False):
    return Literal(make_literal(index, negated))


def top_level_clauses(formula):
    """Literal sets of the children of a compound top-level formula."""
    clauses = []
    for child in formula.children:
        if isinstance(child, Literal):
            clauses.append(frozenset([child.code]))
        else:
            clauses.append(frozenset(grandchild.code for grandchild in child.children))
    return clauses


# -----------------------
# Sign assignments and clause universe
# -----------------------

def test_assign_signs_counter_order():
    assert list(assign_signs([1, 2])) == [
        (1 | NEG, 2 | NEG),
        (1, 2 | NEG),
        (1 | NEG, 2),
        (1, 2),
    ]

def test_assign_signs_is_restartable_per_call():
    assert list(assign_signs([2, 4, 5])) == list(assign_signs((2, 4, 5)))
    assert len(set(assign_signs([1, 2, 3, 4, 5]))) == 32

@pytest.mark.parametrize("n, expected", [(1, 2), (2, 8), (3, 26), (4, 80), (5, 242)])
def test_clause_universe_size(n, expected):
    assert len(build_clause_universe(n)) == expected

def test_clause_universe_order():
    universe = build_clause_universe(3)
    assert universe[:2] == [(1 | NEG,), (1,)]
    lengths = [len(clause) for clause in universe]
    assert lengths == sorted(lengths)
    assert len(set(universe)) == len(universe)
    for clause in universe:
        indices = [literal & VARIABLE_INDEX_MASK for literal in clause]
        assert indices == sorted(set(indices))

def test_clause_universe_includes_every_quintuple_sign_assignment():
    quintuples = [clause for clause in build_clause_universe(5) if len(clause) == 5]
    assert len(quintuples) == 32
    assert (1 | NEG, 2 | NEG, 3 | NEG, 4 | NEG, 5 | NEG) in quintuples
    assert (1, 2, 3, 4, 5) in quintuples

def test_clause_universe_rejects_bad_n():
    with pytest.raises(ValueError):
        build_clause_universe(0)

@pytest.mark.parametrize("old, new, expected", [
    ((1,), (1, 2), True),
    ((2,), (1, 2), True),
    ((1 | NEG,), (1, 2), False),
    ((3,), (1, 2), False),
    ((1,), (2, 3), False),
    ((1, 2), (1, 3), False),
    ((1, 3), (1, 2, 3), True),
    ((1, 3 | NEG), (1, 2, 3), False),
    ((2 | NEG, 4), (1, 2 | NEG, 3, 4), True),
])
def test_is_subclause_of(old, new, expected):
    assert is_subclause_of(old, new) is expected


# -----------------------
# Buckets
# -----------------------

def test_bucket_keeps_first_of_equal_size():
    bucket = LogicFormulaBucket()
    first = Conjunction((lit(1), lit(2)))
    second = Disjunction((lit(1), lit(2)))
    bucket.add_formula(first)
    bucket.add_formula(second)
    assert bucket.minimum_formula is first
    assert bucket.formulas == [first, second]

def test_bucket_replaces_minimum_when_strictly_smaller():
    bucket = LogicFormulaBucket()
    big = Disjunction((Conjunction((lit(1), lit(2))), lit(1)))
    bucket.add_formula(big)
    bucket.add_formula(lit(1))
    assert bucket.minimum_formula == lit(1)
    assert len(bucket) == 2

def test_empty_bucket_text():
    bucket = LogicFormulaBucket()
    assert bucket.minimum_formula_text(["p1"]) == NONE_TEXT
    assert bucket.formula_list_text(["p1"]) == ""

@pytest.mark.parametrize("n", [1, 2, 3, 4, 5])
def test_bucket_collection_length(n):
    assert len(FormulaBuckets(n)) == 2 ** (2 ** n)

def test_bucket_collection_indexing():
    buckets = FormulaBuckets(2)
    buckets.add_formula(5, lit(2, True))
    assert buckets[5].formulas == [lit(2, True)]
    assert len(buckets[4]) == 0
    with pytest.raises(TypeError):
        buckets[4].add_formula(lit(1))
    assert buckets[4].formulas == ()
    assert buckets[-11] is buckets[5]
    assert len(buckets[4:8]) == 4
    with pytest.raises(IndexError):
        buckets[16]
    assert list(buckets.nonempty()) == [(5, buckets[5])]
    assert buckets.num_nonempty() == 1

def test_bucket_collection_rejects_bad_n():
    with pytest.raises(ValueError):
        FormulaBuckets(6)


# -----------------------
# Generation
# -----------------------

@pytest.mark.parametrize("n", [0, 6])
def test_generation_rejects_bad_n(n):
    with pytest.raises(ValueError):
        generate_truth_tables_with_up_to_n_variables(n)
    with pytest.raises(ValueError):
        NormalFormulaGenerator(n)

def test_single_variable_end_to_end(buckets_n1):
    assert len(buckets_n1) == 4
    assert buckets_n1[0].formulas == [FALSE]
    assert buckets_n1[3].formulas == [TRUE]
    assert buckets_n1[2].formulas == [lit(1)]
    assert buckets_n1[1].formulas == [lit(1, True)]
    for truth_table in range(4):
        bucket = buckets_n1[truth_table]
        assert bucket.minimum_formula == bucket.formulas[0]
        assert bucket.minimum_formula.count_binary_operators() == 0

def test_constants_are_seeded(buckets_n2):
    assert len(buckets_n2) == 16
    assert FALSE in buckets_n2[0].formulas
    assert TRUE in buckets_n2[15].formulas

def test_every_two_variable_function_is_reached(buckets_n2):
    assert buckets_n2.num_nonempty() == 16

def test_every_three_variable_function_is_reached(buckets_n3):
    assert len(buckets_n3) == 256
    assert buckets_n3.num_nonempty() == 256
    assert FALSE in buckets_n3[0].formulas
    assert TRUE in buckets_n3[255].formulas

def test_three_variable_run_uses_triple_clauses(buckets_n3):
    triple = Conjunction((lit(1), lit(2, True), lit(3)))
    dnf = Disjunction((lit(1, True), triple))
    assert dnf in buckets_n3[TruthTableComputer(3).compute_truth_table(dnf)].formulas
    # p1 subsumes p1 & ~p2 & p3
    subsumed = Disjunction((lit(1), triple))
    formulas = [f for _, bucket in buckets_n3.nonempty() for f in bucket]
    assert subsumed not in formulas

@pytest.mark.parametrize("n", [2, 3])
def test_no_formula_is_misfiled(request, n):
    buckets = request.getfixturevalue(f"buckets_n{n}")
    tt = TruthTableComputer(n)
    for truth_table, bucket in buckets.nonempty():
        for formula in bucket:
            assert tt.compute_truth_table(formula) == truth_table

@pytest.mark.parametrize("n", [2, 3])
def test_bucket_index_matches_brute_force_evaluation(request, n):
    buckets = request.getfixturevalue(f"buckets_n{n}")
    rows = truth_table_rows(n)
    for truth_table, bucket in buckets.nonempty():
        for formula in bucket:
            outputs = [
                formula.evaluate({i + 1: bool(v) for i, v in enumerate(row)}) is TruthValue.MUST_BE_TRUE
                for row in rows
            ]
            assert truth_table_from_outputs(outputs) == truth_table

@pytest.mark.parametrize("n", [2, 3])
def test_minimum_formula_is_minimal(request, n):
    buckets = request.getfixturevalue(f"buckets_n{n}")
    for _, bucket in buckets.nonempty():
        minimum = bucket.minimum_formula.count_binary_operators()
        assert all(minimum <= f.count_binary_operators() for f in bucket)
        first_minimal = next(f for f in bucket if f.count_binary_operators() == minimum)
        assert bucket.minimum_formula is first_minimal

def test_minimum_sizes_for_two_variables(buckets_n2):
    sizes = {tt: b.minimum_formula.count_binary_operators() for tt, b in buckets_n2.nonempty()}
    # literals
    for tt in (0b1100, 0b0011, 0b1010, 0b0101):
        assert sizes[tt] == 0
    # single and / or
    for tt in (0b1000, 0b0100, 0b0010, 0b0001, 0b1110, 0b1101, 0b1011, 0b0111):
        assert sizes[tt] == 1
    # xor and xnor
    assert sizes[0b0110] == 3
    assert sizes[0b1001] == 3

@pytest.mark.parametrize("n", [2, 3])
def test_no_formula_is_generated_twice(request, n):
    buckets = request.getfixturevalue(f"buckets_n{n}")
    formulas = [f for _, bucket in buckets.nonempty() for f in bucket]
    assert len(formulas) == len(set(formulas))

@pytest.mark.parametrize("n", [2, 3])
def test_subsumed_clauses_never_appear_together(request, n):
    buckets = request.getfixturevalue(f"buckets_n{n}")
    for _, bucket in buckets.nonempty():
        for formula in bucket:
            if not isinstance(formula, (Conjunction, Disjunction)):
                continue
            for a, b in combinations(top_level_clauses(formula), 2):
                assert not (a < b or b < a)

@pytest.mark.parametrize("n", [2, 3])
def test_opposite_unit_clauses_never_appear_together(request, n):
    buckets = request.getfixturevalue(f"buckets_n{n}")
    for _, bucket in buckets.nonempty():
        for formula in bucket:
            if not isinstance(formula, (Conjunction, Disjunction)):
                continue
            units = {next(iter(c)) for c in top_level_clauses(formula) if len(c) == 1}
            assert not any(code ^ NEG in units for code in units)

def test_single_multi_literal_clauses_only_appear_as_duals(buckets_n2):
    for _, bucket in buckets_n2.nonempty():
        for formula in bucket:
            if isinstance(formula, Conjunction):
                assert all(isinstance(child, (Literal, Disjunction)) for child in formula.children)

def test_dnf_and_dual_are_filed_separately(buckets_n2):
    # negative signs come first within a variable subset
    dnf = Disjunction((Conjunction((lit(1, True), lit(2, True))), Conjunction((lit(1), lit(2)))))
    dual = Conjunction((Disjunction((lit(1, True), lit(2, True))), Disjunction((lit(1), lit(2)))))
    assert dnf in buckets_n2[0b1001].formulas
    assert dual in buckets_n2[0b0110].formulas

def test_unit_clause_disjunction_and_its_dual(buckets_n2):
    # p1 | p2 and p1 & p2 come from the same clause subset
    assert Conjunction((lit(1), lit(2))) in buckets_n2[0b1000].formulas
    assert Disjunction((lit(1), lit(2))) in buckets_n2[0b1110].formulas


# -----------------------
# Summaries
# -----------------------

def test_bucket_summary(buckets_n1):
    df = bucket_summary(buckets_n1, ["p1"])
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["truth_table", "num_formulas", "minimum_operators", "minimum_formula"]
    assert df["truth_table"].tolist() == [0, 1, 2, 3]
    assert df["minimum_formula"].tolist() == ["FALSE", "~p1", "p1", "TRUE"]
    assert df["num_formulas"].tolist() == [1, 1, 1, 1]

def test_bucket_text_rendering(buckets_n1, buckets_n2, names2):
    assert buckets_n1[2].minimum_formula_text(["p1"]) == "p1"
    assert buckets_n1[1].formula_list_text(["p1"]) == "~p1\n"
    lines = buckets_n2[0b0110].formula_list_text(names2).splitlines()
    assert "(~p1 | ~p2) & (p1 | p2)" in lines
    assert "(p1 & ~p2) | (~p1 & p2)" in lines
    assert buckets_n2[0b0110].formula_list_text(names2).endswith("\n")
