"""
Tests for the key function locality checker.
"""

from ntree import check_key_function_locality


def grandparent_id(node):
    return node.parent.parent.id


def grandchildren_total(node):
    return sum(grandchild.value for child in node.children_list() for grandchild in child.children_list())


class TestLocalKeyFunctions:
    """Key functions reading only the neighborhood pass."""

    def test_own_fields(self, tree):
        assert check_key_function_locality(tree, lambda node: (node.id, node.value)) == []

    def test_parent_and_children(self, tree):
        assert check_key_function_locality(tree, lambda node: node.parent.id) == []
        assert check_key_function_locality(tree, lambda node: sum(node.children_values())) == []
        assert check_key_function_locality(tree, lambda node: [child.value for child in node.children_list()]) == []

    def test_failing_key_function(self, tree):
        assert check_key_function_locality(tree, lambda node: 1 / 0) == []


class TestNonLocalKeyFunctions:
    """Reads past the neighborhood are reported."""

    def test_grandparent_read(self, tree):
        violations = check_key_function_locality(tree, grandparent_id)

        assert sorted(violation.node.id for violation in violations) == ["C1", "C2"]
        assert {violation.accessed.id for violation in violations} == {"A1"}
        assert violations[0].attribute == "id"
        assert violations[0].describe().endswith("read 'A1'.id")

    def test_grandchildren_read(self, tree):
        violations = check_key_function_locality(tree, grandchildren_total)

        assert [violation.node.id for violation in violations] == ["A1", "A1"]
        assert {violation.accessed.id for violation in violations} == {"C1", "C2"}

    def test_restricted_sample(self, tree):
        violations = check_key_function_locality(tree, grandparent_id, nodes=[tree.find_first_with_id("C2")])

        assert len(violations) == 1
        assert violations[0].node.id == "C2"

    def test_repeated_reads_reported_once(self, tree):
        violations = check_key_function_locality(
            tree,
            lambda node: (node.parent.parent.id, node.parent.parent.id),
            nodes=[tree.find_first_with_id("C1")],
        )

        assert len(violations) == 1


class TestCheckerIsReadOnly:
    def test_assignment_blocked(self, tree):
        def rename(node):
            node.value = 99
            return node.value

        check_key_function_locality(tree, rename)

        assert tree.find_all(lambda node: node.value == 99) == []

    def test_verify_index_locality(self, tree):
        tree.add_index("grandparent", grandparent_id)
        tree.add_index("parent", lambda node: node.parent.id)

        assert tree.verify_index_locality("parent") == []
        assert len(tree.verify_index_locality("grandparent")) == 2
