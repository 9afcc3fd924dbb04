import matplotlib

matplotlib.use("Agg")

import pytest

from formula_precomputer import generate_truth_tables_with_up_to_n_variables
from logic_formulas import default_variable_names


@pytest.fixture(scope="session")
def buckets_n1():
    return generate_truth_tables_with_up_to_n_variables(1)


@pytest.fixture(scope="session")
def buckets_n2():
    return generate_truth_tables_with_up_to_n_variables(2)


@pytest.fixture(scope="session")
def buckets_n3():
    return generate_truth_tables_with_up_to_n_variables(3)


@pytest.fixture
def names2():
    return default_variable_names(2)

