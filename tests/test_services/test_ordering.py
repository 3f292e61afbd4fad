"""
Tests for custom-order maintenance helpers.
"""

from dataclasses import dataclass

import pytest

from habital.domain.errors import InvalidOrderError
from habital.services import ordering


@dataclass
class Item:
    id: int
    order: int = 0
    list_order: int = 0


def items(*orders):
    return [Item(id=i + 1, order=o) for i, o in enumerate(orders)]


class TestCompact:
    def test_closes_gaps(self):
        result = ordering.compact(items(0, 3, 7))
        assert [i.order for i in result] == [0, 1, 2]

    def test_duplicates_broken_by_id(self):
        result = ordering.compact(items(1, 1, 0))
        assert [i.id for i in result] == [3, 1, 2]
        assert ordering.is_contiguous([i.order for i in result])

    def test_other_attribute(self):
        scope = [Item(id=1, list_order=5), Item(id=2, list_order=2)]
        ordering.compact(scope, attr="list_order")
        assert [(i.id, i.list_order) for i in scope] == [(1, 1), (2, 0)]


class TestMove:
    def test_move_down(self):
        result = ordering.move(items(0, 1, 2, 3), 0, 2)
        assert [i.id for i in result] == [2, 3, 1, 4]
        assert [i.order for i in result] == [0, 1, 2, 3]

    def test_move_up(self):
        result = ordering.move(items(0, 1, 2, 3), 3, 0)
        assert [i.id for i in result] == [4, 1, 2, 3]

    def test_out_of_range(self):
        with pytest.raises(InvalidOrderError):
            ordering.move(items(0, 1), 0, 5)


class TestArrange:
    def test_applies_sequence(self):
        result = ordering.arrange(items(0, 1, 2), [3, 1, 2])
        assert [(i.id, i.order) for i in result] == [(3, 0), (1, 1), (2, 2)]

    @pytest.mark.parametrize("ids", [[1, 2], [1, 2, 2], [1, 2, 4]])
    def test_rejects_non_permutation(self, ids):
        with pytest.raises(InvalidOrderError):
            ordering.arrange(items(0, 1, 2), ids)


class TestIsContiguous:
    def test_contiguous(self):
        assert ordering.is_contiguous([2, 0, 1])
        assert ordering.is_contiguous([])

    def test_not_contiguous(self):
        assert not ordering.is_contiguous([0, 2])
        assert not ordering.is_contiguous([0, 0])
