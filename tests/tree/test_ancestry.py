"""
Tests for NearestCommonAncestor.
"""

from ntree import NearestCommonAncestor, Tree


def ids(nodes):
    return [node.id for node in nodes] if nodes is not None else None


def build_small_tree() -> Tree:
    """A1{B1, B2{C1}}."""
    tree = Tree("S")
    b2 = tree.create_node("B2").add_children(tree.create_node("C1"))
    tree.add_root(tree.create_node("A1").add_children(tree.create_node("B1"), b2))
    return tree


def assert_invalid(query: NearestCommonAncestor) -> None:
    assert not query.has_common_ancestor()
    assert query.common_ancestor() is None
    assert query.path_a_to_ancestor() is None
    assert query.path_b_to_ancestor() is None
    assert query.path_ancestor_to_a() is None
    assert query.path_ancestor_to_b() is None
    assert query.path_a_to_b() is None
    assert query.path_b_to_a() is None


class TestDivergentNodes:
    """Tests for nodes on different branches."""

    def test_uncle_and_nephew(self):
        tree = build_small_tree()
        query = NearestCommonAncestor(tree.find_first_with_id("B1"), tree.find_first_with_id("C1"))

        assert query.common_ancestor() is tree.root
        assert ids(query.path_a_to_ancestor()) == ["B1", "A1"]
        assert ids(query.path_b_to_ancestor()) == ["C1", "B2", "A1"]
        assert ids(query.path_ancestor_to_a()) == ["A1", "B1"]
        assert ids(query.path_ancestor_to_b()) == ["A1", "B2", "C1"]
        assert ids(query.path_a_to_b()) == ["B1", "A1", "B2", "C1"]
        assert ids(query.path_b_to_a()) == ["C1", "B2", "A1", "B1"]

    def test_siblings(self, tree):
        query = NearestCommonAncestor(tree.find_first_with_id("C1"), tree.find_first_with_id("C2"))

        assert query.common_ancestor().id == "B1"
        assert ids(query.path_a_to_b()) == ["C1", "B1", "C2"]

    def test_cousins(self, tree):
        tree.find_first_with_id("B2").add_children(tree.create_node("D1"))
        query = NearestCommonAncestor(tree.find_first_with_id("C2"), tree.find_first_with_id("D1"))

        assert query.common_ancestor() is tree.root
        assert ids(query.path_a_to_b()) == ["C2", "B1", "A1", "B2", "D1"]

    def test_value_equal_nodes_kept_apart(self):
        """Chains are matched by identity, so lookalike nodes do not meet early."""
        tree = Tree("V")
        tree.add_root(
            tree.create_node("A1", 0).add_children(
                tree.create_node("B1", 1).add_children(tree.create_node("X", 7).add_children(tree.create_node("Y", 8))),
                tree.create_node("B2", 1).add_children(tree.create_node("X", 7).add_children(tree.create_node("Y", 8))),
            )
        )
        left = tree.root.child("B1").child("X").child("Y")
        right = tree.root.child("B2").child("X").child("Y")
        assert left == right

        query = NearestCommonAncestor(left, right)

        assert query.common_ancestor() is tree.root
        assert ids(query.path_a_to_b()) == ["Y", "X", "B1", "A1", "B2", "X", "Y"]

    def test_detached_hierarchy(self, tree):
        """Nodes of the same detached hierarchy still share an ancestor."""
        hierarchy = tree.create_node("X").add_children(tree.create_node("Y"), tree.create_node("Z"))

        query = NearestCommonAncestor(hierarchy.child("Y"), hierarchy.child("Z"))

        assert query.common_ancestor() is hierarchy
        assert ids(query.path_a_to_b()) == ["Y", "X", "Z"]


class TestLineage:
    """Tests for one node below the other."""

    def test_b_below_a(self, tree):
        b1 = tree.find_first_with_id("B1")
        c1 = tree.find_first_with_id("C1")

        query = NearestCommonAncestor(b1, c1)

        assert query.common_ancestor() is tree.root
        assert ids(query.path_a_to_ancestor()) == ["B1", "A1"]
        assert ids(query.path_b_to_ancestor()) == ["C1", "B1", "A1"]
        assert ids(query.path_a_to_b()) == ["B1", "C1"]
        assert ids(query.path_b_to_a()) == ["C1", "B1"]

    def test_a_below_b(self, tree):
        query = NearestCommonAncestor(tree.find_first_with_id("C1"), tree.find_first_with_id("B1"))

        assert query.common_ancestor() is tree.root
        assert ids(query.path_a_to_ancestor()) == ["C1", "B1", "A1"]
        assert ids(query.path_b_to_ancestor()) == ["B1", "A1"]
        assert ids(query.path_a_to_b()) == ["C1", "B1"]

    def test_deep_lineage(self):
        tree = Tree("D")
        bottom = tree.create_node("D1")
        tree.add_root(
            tree.create_node("A1").add_children(
                tree.create_node("B1").add_children(tree.create_node("C1").add_children(bottom))
            )
        )

        query = NearestCommonAncestor(tree.find_first_with_id("B1"), bottom)

        assert query.common_ancestor() is tree.root
        assert ids(query.path_a_to_b()) == ["B1", "C1", "D1"]
        assert ids(query.path_b_to_ancestor()) == ["D1", "C1", "B1", "A1"]


class TestInvalidQueries:
    """Every accessor of an invalid query returns None."""

    def test_same_node(self, tree):
        b1 = tree.find_first_with_id("B1")

        assert_invalid(NearestCommonAncestor(b1, b1))

    def test_root_involved(self, tree):
        assert_invalid(NearestCommonAncestor(tree.root, tree.find_first_with_id("C1")))
        assert_invalid(NearestCommonAncestor(tree.find_first_with_id("B2"), tree.root))

    def test_different_trees(self, tree, null_tree):
        assert_invalid(NearestCommonAncestor(tree.find_first_with_id("C1"), null_tree.find_first_with_id("C2")))

    def test_disjoint_hierarchies(self, tree):
        """A detached hierarchy and the tree do not share a farthest ancestor."""
        hierarchy = tree.create_node("X").add_children(tree.create_node("Y"))

        assert_invalid(NearestCommonAncestor(hierarchy.child("Y"), tree.find_first_with_id("C1")))

    def test_lone_nodes(self, tree):
        assert_invalid(NearestCommonAncestor(tree.create_node("X"), tree.create_node("Y")))

    def test_query_does_not_mutate(self, tree):
        before = tree.clone()

        NearestCommonAncestor(tree.find_first_with_id("C1"), tree.find_first_with_id("B2")).path_a_to_b()

        assert tree == before
