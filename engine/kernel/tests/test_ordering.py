"""
Digest Kernel -- List Reducer Tests

Covers:
  - reorder_list scenarios (forward and backward moves)
  - permutation property over every valid (source, destination) pair
  - moving onto the same index is a no-op
  - input list is never mutated
  - out-of-range indices are rejected
  - insert_at / remove_at / is_dense
"""

import itertools

import pytest

from engine.kernel.ordering import insert_at, is_dense, remove_at, reorder_list

# ============================================================================
# 1. Scenarios
# ============================================================================


class TestReorderScenarios:
    def test_move_first_forward(self):
        assert reorder_list(["A", "B", "C", "D"], 0, 2) == ["B", "C", "A", "D"]

    def test_move_last_to_front(self):
        assert reorder_list(["A", "B", "C"], 2, 0) == ["C", "A", "B"]

    def test_move_to_end(self):
        assert reorder_list(["A", "B", "C"], 0, 2) == ["B", "C", "A"]

    def test_swap_neighbours(self):
        assert reorder_list(["A", "B"], 1, 0) == ["B", "A"]

    def test_single_element(self):
        assert reorder_list(["A"], 0, 0) == ["A"]


# ============================================================================
# 2. Properties
# ============================================================================


class TestReorderProperties:
    @pytest.mark.parametrize("length", [1, 2, 3, 5])
    def test_permutation_with_moved_element_at_destination(self, length):
        items = [f"item_{n}" for n in range(length)]
        for source, destination in itertools.product(range(length), repeat=2):
            result = reorder_list(items, source, destination)

            assert len(result) == length
            assert sorted(result) == sorted(items)
            assert result[destination] == items[source]

            others_before = [x for x in items if x != items[source]]
            others_after = [x for x in result if x != items[source]]
            assert others_before == others_after

    def test_same_index_is_unchanged(self):
        items = ["A", "B", "C", "D"]
        for i in range(len(items)):
            assert reorder_list(items, i, i) == items

    def test_input_not_mutated(self):
        items = ["A", "B", "C"]
        reorder_list(items, 0, 2)
        assert items == ["A", "B", "C"]

    def test_accepts_tuples(self):
        assert reorder_list(("A", "B", "C"), 1, 2) == ["A", "C", "B"]


# ============================================================================
# 3. Bounds
# ============================================================================


class TestReorderBounds:
    def test_source_out_of_range(self):
        with pytest.raises(IndexError):
            reorder_list(["A", "B"], 2, 0)

    def test_destination_out_of_range(self):
        with pytest.raises(IndexError):
            reorder_list(["A", "B"], 0, 2)

    def test_negative_index_rejected(self):
        with pytest.raises(IndexError):
            reorder_list(["A", "B"], -1, 0)

    def test_empty_list(self):
        with pytest.raises(IndexError):
            reorder_list([], 0, 0)


# ============================================================================
# 4. insert_at / remove_at / is_dense
# ============================================================================


class TestInsertRemove:
    def test_insert_middle(self):
        assert insert_at(["A", "B", "C"], "X", 1) == ["A", "X", "B", "C"]

    def test_insert_at_end(self):
        assert insert_at(["A"], "X", 1) == ["A", "X"]

    def test_insert_into_empty(self):
        assert insert_at([], "X", 0) == ["X"]

    def test_insert_past_end_rejected(self):
        with pytest.raises(IndexError):
            insert_at(["A", "B", "C"], "X", 4)

    def test_remove(self):
        assert remove_at(["A", "B", "C"], 1) == ["A", "C"]

    def test_remove_out_of_range(self):
        with pytest.raises(IndexError):
            remove_at(["A"], 1)


class TestIsDense:
    def test_dense(self):
        assert is_dense([2, 0, 1])

    def test_empty_is_dense(self):
        assert is_dense([])

    def test_gap(self):
        assert not is_dense([0, 2])

    def test_duplicate(self):
        assert not is_dense([0, 1, 1])

    def test_not_zero_based(self):
        assert not is_dense([1, 2, 3])
