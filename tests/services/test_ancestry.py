from services.ancestry import ancestor_ids, is_descendant
from tests.helpers import corrupt_parent, insert_raw_category


class TestIsDescendant:
    """Tests for is_descendant."""

    def test_direct_child(self, services, test_db, tree):
        """Test that a child is a descendant of its parent."""
        assert is_descendant(test_db, tree["A"].id, tree["B"].id) is True

    def test_grandchild(self, services, test_db, tree):
        """Test that descendants are found through several levels."""
        assert is_descendant(test_db, tree["A"].id, tree["C"].id) is True

    def test_ancestor_is_not_descendant(self, services, test_db, tree):
        """Test that the relation is not symmetric."""
        assert is_descendant(test_db, tree["C"].id, tree["A"].id) is False

    def test_self_is_not_descendant(self, services, test_db, tree):
        """Test that no category is its own descendant."""
        for category in tree.values():
            assert is_descendant(test_db, category.id, category.id) is False

    def test_unrelated_branches(self, services, test_db, tree):
        """Test categories in different trees."""
        other = services.category_tree.create("Other")

        assert is_descendant(test_db, other.id, tree["C"].id) is False
        assert is_descendant(test_db, tree["A"].id, other.id) is False

    def test_unknown_candidate(self, services, test_db, tree):
        """Test that an unknown candidate has no ancestors."""
        assert is_descendant(test_db, tree["A"].id, 9999) is False

    def test_terminates_on_corrupted_cycle(self, services, test_db):
        """Test that a cycle already stored in the table stops the walk."""
        x = insert_raw_category(test_db, "X")
        y = insert_raw_category(test_db, "Y", parent_id=x)
        z = insert_raw_category(test_db, "Z")
        corrupt_parent(test_db, x, y)

        assert is_descendant(test_db, z, x) is False
        assert is_descendant(test_db, z, y) is False


class TestAncestorIds:
    """Tests for ancestor_ids."""

    def test_chain_nearest_first(self, services, test_db, tree):
        """Test that the chain lists the parent first and the root last."""
        assert ancestor_ids(test_db, tree["C"].id) == [tree["B"].id, tree["A"].id]

    def test_root_has_no_ancestors(self, services, test_db, tree):
        """Test a root category."""
        assert ancestor_ids(test_db, tree["A"].id) == []

    def test_corrupted_cycle_is_bounded(self, services, test_db):
        """Test that a stored cycle is walked once."""
        x = insert_raw_category(test_db, "X")
        y = insert_raw_category(test_db, "Y", parent_id=x)
        corrupt_parent(test_db, x, y)

        assert ancestor_ids(test_db, y) == [x]
