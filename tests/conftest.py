import pytest

import sage.all  # noqa: F401

from ternarygenus import Genus


@pytest.fixture(scope = 'module')
def genus11():
    return Genus([(11, True)], seed = 1)


@pytest.fixture(scope = 'module')
def genus105():
    return Genus([(3, False), (5, True), (7, False)], seed = 7)
