"""
Shared fixtures: the reference tree A1(1){B1(2){C1(4), C2(5)}, B2(3)}.
"""

import pytest

from ntree import Tree
from tests.utils.trees import build_reference_tree


@pytest.fixture
def tree() -> Tree:
    """Reference tree with integer values."""
    return build_reference_tree()


@pytest.fixture
def null_tree() -> Tree:
    """Reference tree shape with every value None."""
    return build_reference_tree("N", with_values=False)
