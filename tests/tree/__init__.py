"""
Tests for the tree core.

Test organization:
- test_node_edits.py: Replacing, removing, promoting and attaching nodes
- test_node_queries.py: Children, siblings, ancestry, shape, comparison, cloning
- test_traversal.py: Traversal orders, for_each and searches
- test_ordering.py: Sibling ordering strategies
- test_index.py: Named indexes
- test_index_fuzz.py: Indexes under random edit sequences
- test_tree.py: Tree-level operations
- test_ancestry.py: Nearest common ancestor and paths
- test_locality.py: Key function locality checker
"""
