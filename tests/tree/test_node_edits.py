"""
Tests for structural node edits.

Tests cover:
- replace_single / replace_subtree
- remove / remove_and_promote_children
- add_children / set_child and bulk variants
- replace_id / set_value
- child removal helpers
"""

import pytest

from ntree import InvalidArgumentError, Tree
from tests.utils.index_checks import assert_index_current


class Gauge:
    def __init__(self, level, marks):
        self.level = level
        self.marks = marks

    def __eq__(self, other):
        return isinstance(other, Gauge) and (self.level, self.marks) == (other.level, other.marks)


def value_key(node):
    return node.value


def parent_key(node):
    return node.parent.id


def children_sum_key(node):
    return sum(child.value for child in node.children_list())


def add_standard_indexes(tree: Tree) -> None:
    tree.add_index("value", value_key)
    tree.add_index("parent", parent_key)
    tree.add_index("children_sum", children_sum_key)


def assert_all_indexes_current(tree: Tree) -> None:
    assert_index_current(tree, "value", value_key)
    assert_index_current(tree, "parent", parent_key)
    assert_index_current(tree, "children_sum", children_sum_key)


class TestReplaceSingle:
    """Tests for replacing one node while keeping its children."""

    def test_children_move_to_replacement(self, tree):
        """Replacement adopts the old node's children."""
        b1 = tree.find_first_with_id("B1")
        other = tree.create_node("X1", 9)

        old = b1.replace_single(other)

        assert old is b1
        new = tree.root.child("X1")
        assert new is not None and new is not other
        assert new.value == 9
        assert new.children_ids() == ["C1", "C2"]
        assert all(child.parent is new for child in new.children_list())
        assert tree.root.child("B1") is None

    def test_old_node_is_detached(self, tree):
        """Returned node has no tree, parent or children."""
        b1 = tree.find_first_with_id("B1")
        old = b1.replace_single(tree.create_node("X1", 9))

        assert old.parent is None
        assert old.tree is None
        assert old.children_size() == 0

    def test_position_is_kept(self, tree):
        """Replacement takes the old node's place among its siblings."""
        tree.find_first_with_id("B1").replace_single(tree.create_node("X1", 9))

        assert tree.root.children_ids() == ["X1", "B2"]

    def test_input_node_untouched(self, tree):
        """The node passed in is cloned, never attached."""
        other = tree.create_node("X1", 9)
        tree.find_first_with_id("B1").replace_single(other)

        assert other.parent is None
        assert other.children_size() == 0

    def test_sibling_collision_refused(self, tree):
        """Using an id owned by a sibling is a no-op."""
        b1 = tree.find_first_with_id("B1")

        assert b1.replace_single(tree.create_node("B2", 0)) is None
        assert tree.root.children_ids() == ["B1", "B2"]
        assert b1.is_in_tree()

    def test_same_id_allowed(self, tree):
        """Replacing with a node of the same id is not a collision."""
        b1 = tree.find_first_with_id("B1")

        assert b1.replace_single(tree.create_node("B1", 20)) is b1
        assert tree.root.child("B1").value == 20

    def test_self_refused(self, tree):
        """A node cannot replace itself."""
        b1 = tree.find_first_with_id("B1")

        assert b1.replace_single(b1) is None

    def test_orphan_refused(self, tree):
        """Detached nodes cannot be replaced."""
        orphan = tree.create_node("Z", 0)

        assert orphan.replace_single(tree.create_node("X1", 9)) is None

    def test_root(self, tree):
        """Replacing the root keeps the whole tree under the new root."""
        old_root = tree.root

        assert old_root.replace_single(tree.create_node("R", 0)) is old_root
        assert tree.root.id == "R"
        assert tree.root.children_ids() == ["B1", "B2"]
        assert tree.size() == 5
        assert tree.root.is_root()

    def test_indexes_updated(self, tree):
        """Indexes drop the old node and pick up the replacement and re-parented children."""
        add_standard_indexes(tree)
        tree.find_first_with_id("B1").replace_single(tree.create_node("X1", 9))

        assert tree.nodes_in_index("value", 2) == []
        assert [node.id for node in tree.nodes_in_index("value", 9)] == ["X1"]
        assert {node.id for node in tree.nodes_in_index("parent", "X1")} == {"C1", "C2"}
        assert_all_indexes_current(tree)


class TestReplaceSubtree:
    """Tests for replacing a node together with its descendants."""

    def test_subtree_replaced(self, tree):
        """The old subtree is swapped for a deep clone of the new one."""
        other = tree.create_node("X1", 9).add_children(tree.create_node("Y1", 10))

        old = tree.find_first_with_id("B1").replace_subtree(other)

        assert old.id == "B1"
        assert tree.root.children_ids() == ["X1", "B2"]
        assert tree.root.child("X1").children_ids() == ["Y1"]
        assert tree.size() == 4
        assert tree.find_first_with_id("Y1") is not other.child("Y1")

    def test_old_subtree_kept_intact(self, tree):
        """The returned node still holds its own children."""
        old = tree.find_first_with_id("B1").replace_subtree(tree.create_node("X1", 9))

        assert old.parent is None
        assert old.children_ids() == ["C1", "C2"]
        assert not old.is_in_tree()

    def test_root(self, tree):
        """Replacing the root subtree swaps the whole tree content."""
        other = tree.create_node("X1", 9).add_children(tree.create_node("Y1", 10))
        old_root = tree.root

        assert old_root.replace_subtree(other) is old_root
        assert tree.root.id == "X1"
        assert tree.size() == 2
        assert old_root.tree is None

    def test_refusals(self, tree):
        """Collisions, self-replacement and orphans are no-ops."""
        b1 = tree.find_first_with_id("B1")

        assert b1.replace_subtree(tree.create_node("B2", 0)) is None
        assert b1.replace_subtree(b1) is None
        assert tree.create_node("Z").replace_subtree(tree.create_node("X")) is None
        assert tree.size() == 5

    def test_indexes_rebuilt_for_both_subtrees(self, tree):
        """Every node of the removed and inserted subtrees is re-indexed."""
        add_standard_indexes(tree)
        other = tree.create_node("X1", 9).add_children(tree.create_node("Y1", 10))

        tree.find_first_with_id("B1").replace_subtree(other)

        assert tree.nodes_in_index("value", 4) == []
        assert tree.nodes_in_index("value", 5) == []
        assert [node.id for node in tree.nodes_in_index("value", 10)] == ["Y1"]
        assert_all_indexes_current(tree)


class TestRemove:
    """Tests for removing nodes."""

    def test_remove_subtree(self, tree):
        """Removal detaches the node and keeps its subtree."""
        b1 = tree.find_first_with_id("B1")

        assert b1.remove() is b1
        assert tree.size() == 2
        assert b1.parent is None
        assert b1.children_ids() == ["C1", "C2"]

    def test_remove_root_empties_tree(self, tree):
        """Removing the root clears the tree."""
        tree.add_index("value", value_key)
        root = tree.root

        assert root.remove() is root
        assert tree.root is None
        assert tree.size() == 0
        assert len(tree.index("value")) == 0

    def test_orphan_returns_none(self, tree):
        """Orphans and already removed nodes cannot be removed."""
        b1 = tree.find_first_with_id("B1")
        b1.remove()

        assert tree.create_node("Z").remove() is None
        assert b1.remove() is None

    def test_descendant_of_removed_is_orphan(self, tree):
        """Nodes under a removed subtree are no longer in the tree."""
        c1 = tree.find_first_with_id("C1")
        tree.find_first_with_id("B1").remove()

        assert c1.is_orphan()
        assert c1.remove() is None

    def test_indexes_updated(self, tree):
        """Removed nodes leave every index; the parent is refreshed."""
        add_standard_indexes(tree)
        tree.find_first_with_id("B1").remove()

        assert tree.nodes_in_index("value", 4) == []
        assert tree.nodes_in_index("children_sum", 3) == [tree.root]
        assert_all_indexes_current(tree)


def build_promotion_tree():
    """A1{B1{B2(v=2), C1}, B2(v=3)}."""
    tree = Tree("P")
    b1 = tree.create_node("B1", 1).add_children(tree.create_node("B2", 2), tree.create_node("C1", 4))
    uncle = tree.create_node("B2", 3)
    tree.add_root(tree.create_node("A1", 0).add_children(b1, uncle))
    return tree, b1, b1.child("B2"), uncle


class TestRemoveAndPromoteChildren:
    """Tests for removing a node and promoting its children."""

    def test_tie_break_true_keeps_child(self):
        """Child wins: the uncle is discarded."""
        tree, b1, child_b2, uncle = build_promotion_tree()

        removed = b1.remove_and_promote_children(True)

        assert len(removed) == 2
        assert removed[0] is b1 and removed[1] is uncle
        assert set(tree.root.children_ids()) == {"B2", "C1"}
        assert tree.root.child("B2") is child_b2
        assert tree.root.child("B2").value == 2

    def test_tie_break_false_keeps_uncle(self):
        """Uncle wins: the colliding child is discarded."""
        tree, b1, child_b2, uncle = build_promotion_tree()

        removed = b1.remove_and_promote_children(False)

        assert len(removed) == 2
        assert removed[0] is b1 and removed[1] is child_b2
        assert set(tree.root.children_ids()) == {"B2", "C1"}
        assert tree.root.child("B2") is uncle

    def test_default_is_false(self):
        """Without a tie-break the uncle survives."""
        tree, b1, child_b2, uncle = build_promotion_tree()

        removed = b1.remove_and_promote_children()

        assert removed[1] is child_b2
        assert tree.root.child("B2") is uncle

    def test_callable_tie_break(self):
        """A predicate receives (child, uncle)."""
        tree, b1, child_b2, uncle = build_promotion_tree()

        removed = b1.remove_and_promote_children(lambda child, other: child.value > other.value)

        assert removed[1] is child_b2
        assert tree.root.child("B2") is uncle

    def test_failing_tie_break_counts_as_false(self):
        """A raising predicate discards the child."""
        tree, b1, child_b2, uncle = build_promotion_tree()

        removed = b1.remove_and_promote_children(lambda child, other: 1 / 0)

        assert removed[1] is child_b2
        assert tree.root.child("B2") is uncle

    def test_promoted_children_reparented(self):
        """Promoted children point at their new parent."""
        tree, b1, _, _ = build_promotion_tree()
        b1.remove_and_promote_children(True)

        assert tree.root.child("C1").parent is tree.root
        assert tree.root.child("C1").level_from_root() == 2
        assert b1.parent is None and b1.children_size() == 0

    def test_root_and_orphan_refused(self, tree):
        """Root and orphans cannot be removed this way."""
        assert tree.root.remove_and_promote_children(True) is None
        assert tree.create_node("Z").remove_and_promote_children(True) is None

    def test_indexes_updated(self):
        """Discarded subtrees leave the indexes; promoted children are re-keyed."""
        tree, b1, _, _ = build_promotion_tree()
        add_standard_indexes(tree)

        b1.remove_and_promote_children(True)

        assert {node.id for node in tree.nodes_in_index("parent", "A1")} == {"B2", "C1"}
        assert tree.nodes_in_index("value", 3) == []
        assert_all_indexes_current(tree)


class TestAddChildren:
    """Tests for attaching detached nodes."""

    def test_returns_self(self, tree):
        b2 = tree.find_first_with_id("B2")

        assert b2.add_children(tree.create_node("D", 7)) is b2
        assert b2.child("D").parent is b2

    def test_parented_nodes_skipped(self, tree):
        """Nodes that already have a parent are ignored."""
        b2 = tree.find_first_with_id("B2")
        c1 = tree.find_first_with_id("C1")

        b2.add_children(c1)

        assert b2.children_size() == 0
        assert c1.parent.id == "B1"

    def test_first_duplicate_wins(self, tree):
        """Among inputs sharing an id only the first is attached."""
        b2 = tree.find_first_with_id("B2")
        first = tree.create_node("D", 1)
        second = tree.create_node("D", 2)

        b2.add_children(first, second)

        assert b2.child("D") is first
        assert second.parent is None

    def test_existing_child_wins(self, tree):
        """An existing child keeps its id slot."""
        b1 = tree.find_first_with_id("B1")
        b1.add_children(tree.create_node("C1", 99))

        assert b1.child("C1").value == 4

    def test_cycles_skipped(self, tree):
        """A node cannot be attached under itself or under its own descendants."""
        hierarchy = tree.create_node("X").add_children(tree.create_node("Y"))
        y = hierarchy.child("Y")

        y.add_children(hierarchy)
        hierarchy.add_children(hierarchy)

        assert y.children_size() == 0
        assert hierarchy.children_ids() == ["Y"]

    def test_tree_root_skipped(self, tree):
        """The root cannot be attached anywhere."""
        b2 = tree.find_first_with_id("B2")
        b2.add_children(tree.root)

        assert b2.children_size() == 0

    def test_subtree_indexed(self, tree):
        """Attaching under an in-tree node indexes the whole attached subtree."""
        tree.add_index("value", value_key)
        b2 = tree.find_first_with_id("B2")

        b2.add_children(tree.create_node("D", 7).add_children(tree.create_node("E", 8)))

        assert [node.id for node in tree.nodes_in_index("value", 8)] == ["E"]
        assert_index_current(tree, "value", value_key)

    def test_none_rejected(self, tree):
        with pytest.raises(InvalidArgumentError):
            tree.root.add_children(tree.create_node("D"), None)


class TestSetChild:
    """Tests for set_child and its bulk variants."""

    def test_insert_clone(self, tree):
        """A fresh id is inserted as a clone."""
        b2 = tree.find_first_with_id("B2")
        d = tree.create_node("D", 7)

        assert b2.set_child(d) is None
        assert b2.child("D").value == 7
        assert b2.child("D") is not d
        assert d.parent is None

    def test_replace_existing(self, tree):
        """An existing child with the same id is replaced and returned."""
        b1 = tree.find_first_with_id("B1")

        previous = b1.set_child(tree.create_node("C1", 40))

        assert previous.id == "C1" and previous.value == 4
        assert previous.parent is None
        assert b1.child("C1").value == 40
        assert b1.children_ids() == ["C1", "C2"]

    def test_plain_object_value(self, tree):
        """Values without a JSON schema are deep-copied into the clone."""
        value = Gauge(3, ["low"])

        tree.root.set_child(tree.create_node("D", value))

        copied = tree.root.child("D").value
        assert copied == value
        assert copied is not value
        assert copied.marks is not value.marks

    def test_own_child_rejected(self, tree):
        """Setting a node's literal child raises."""
        b1 = tree.find_first_with_id("B1")

        with pytest.raises(InvalidArgumentError, match="own child"):
            b1.set_child(b1.child("C1"))

    def test_none_rejected(self, tree):
        with pytest.raises(InvalidArgumentError):
            tree.root.set_child(None)

    def test_set_children_dedupes_by_identity(self, tree):
        """The same object listed twice is applied once."""
        b1 = tree.find_first_with_id("B1")
        d = tree.create_node("D", 1)
        c2 = tree.create_node("C2", 50)

        replaced = b1.set_children([d, d, c2])

        assert list(replaced) == ["C2"]
        assert replaced["C2"].value == 5
        assert b1.children_ids() == ["C1", "C2", "D"]
        assert b1.child("C2").value == 50

    def test_set_child_if_absent(self, tree):
        b1 = tree.find_first_with_id("B1")

        assert not b1.set_child_if_absent(tree.create_node("C1", 40))
        assert b1.set_child_if_absent(tree.create_node("C3", 6))
        assert b1.child("C1").value == 4
        assert b1.child("C3").value == 6

    def test_set_children_if_absent(self, tree):
        """True only when all are added; absent ones are still added."""
        b1 = tree.find_first_with_id("B1")

        assert not b1.set_children_if_absent([tree.create_node("C3", 6), tree.create_node("C1", 40)])
        assert b1.child("C3") is not None
        assert b1.set_children_if_absent([tree.create_node("C4", 7)])

    def test_indexes_updated(self, tree):
        add_standard_indexes(tree)
        b1 = tree.find_first_with_id("B1")

        b1.set_child(tree.create_node("C1", 40).add_children(tree.create_node("D1", 41)))

        assert tree.nodes_in_index("value", 4) == []
        assert [node.id for node in tree.nodes_in_index("parent", "C1")] == ["D1"]
        assert tree.nodes_in_index("children_sum", 45) == [b1]
        assert_all_indexes_current(tree)


class TestReplaceId:
    """Tests for renaming nodes."""

    def test_unchanged_id(self, tree):
        assert not tree.find_first_with_id("B1").replace_id("B1")

    def test_sibling_collision(self, tree):
        b1 = tree.find_first_with_id("B1")

        assert not b1.replace_id("B2")
        assert b1.id == "B1"

    def test_rename_keeps_position(self, tree):
        b1 = tree.find_first_with_id("B1")

        assert b1.replace_id("B9")
        assert tree.root.children_ids() == ["B9", "B2"]
        assert tree.root.child("B9") is b1

    def test_rename_root(self, tree):
        assert tree.root.replace_id("R")
        assert tree.root.id == "R"

    def test_children_rekeyed(self, tree):
        """Children keyed on their parent's id follow the rename."""
        add_standard_indexes(tree)
        b1 = tree.find_first_with_id("B1")

        b1.replace_id("B9")

        assert {node.id for node in tree.nodes_in_index("parent", "B9")} == {"C1", "C2"}
        assert tree.nodes_in_index("parent", "B1") == []
        assert_all_indexes_current(tree)


class TestSetValue:
    """Tests for value updates."""

    def test_returns_self(self, tree):
        b1 = tree.find_first_with_id("B1")

        assert b1.set_value(20) is b1
        assert b1.value == 20

    def test_parent_key_refreshed(self, tree):
        """A parent whose key reads its children's values is re-keyed."""
        add_standard_indexes(tree)
        c1 = tree.find_first_with_id("C1")

        c1.set_value(10)

        assert tree.nodes_in_index("children_sum", 15) == [tree.find_first_with_id("B1")]
        assert_all_indexes_current(tree)

    def test_hash_follows_value_and_id(self, tree):
        """Identity is the stable handle; the hash tracks id and value."""
        c1 = tree.find_first_with_id("C1")
        identity = c1.identity
        before = hash(c1)

        c1.set_value(40)
        after_value = hash(c1)
        c1.replace_id("C9")

        assert after_value != before
        assert hash(c1) != after_value
        assert c1.identity == identity

    def test_property_setter(self, tree):
        """Assigning ``value`` goes through set_value."""
        tree.add_index("value", value_key)
        b2 = tree.find_first_with_id("B2")

        b2.value = 30

        assert tree.nodes_in_index("value", 30) == [b2]
        assert tree.nodes_in_index("value", 3) == []

    def test_revision_not_auto_incremented(self, tree):
        b1 = tree.find_first_with_id("B1")
        b1.set_value(20)

        assert b1.revision == 1
        assert b1.increment_revision() == 2


class TestChildRemoval:
    """Tests for the child removal helpers."""

    def test_remove_child(self, tree):
        b1 = tree.find_first_with_id("B1")

        removed = b1.remove_child("C1")

        assert removed.id == "C1" and removed.parent is None
        assert b1.children_ids() == ["C2"]
        assert b1.remove_child("missing") is None

    def test_remove_children_by_id(self, tree):
        removed = tree.root.remove_children("B1", "missing")

        assert list(removed) == ["B1"]
        assert tree.root.children_ids() == ["B2"]

    def test_remove_children_where(self, tree):
        b1 = tree.find_first_with_id("B1")

        removed = b1.remove_children_where(lambda node: node.value > 4)

        assert list(removed) == ["C2"]

    def test_remove_all_children(self, tree):
        removed = tree.root.remove_all_children()

        assert set(removed) == {"B1", "B2"}
        assert tree.size() == 1

    def test_retain_children(self, tree):
        b1 = tree.find_first_with_id("B1")

        removed = b1.retain_children("C1")

        assert list(removed) == ["C2"]
        assert b1.children_ids() == ["C1"]

    def test_retain_children_where(self, tree):
        b1 = tree.find_first_with_id("B1")

        removed = b1.retain_children_where(lambda node: node.value == 5)

        assert list(removed) == ["C1"]

    def test_indexes_updated(self, tree):
        add_standard_indexes(tree)
        tree.root.retain_children("B2")

        assert tree.nodes_in_index("value", 2) == []
        assert tree.nodes_in_index("children_sum", 3) == [tree.root]
        assert_all_indexes_current(tree)
