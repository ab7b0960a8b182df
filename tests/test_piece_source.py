import pytest

from blockdrop.piece_source import (
    BagPieceSource,
    RandomPieceSource,
    SequencePieceSource,
    make_piece_source,
)
from blockdrop.pieces import PieceType


def test_sequence_source_returns_types_in_order():
    source = SequencePieceSource([0, 1, 6])
    assert [source.next_type() for _ in range(3)] == [PieceType.SQUARE, PieceType.LINE, PieceType.J]
    with pytest.raises(IndexError):
        source.next_type()


def test_sequence_source_can_cycle():
    source = SequencePieceSource([PieceType.T], cycle=True)
    assert {source.next_type() for _ in range(5)} == {PieceType.T}


def test_sequence_source_rejects_bad_input():
    with pytest.raises(ValueError):
        SequencePieceSource([])
    with pytest.raises(ValueError):
        SequencePieceSource([9])


def test_bag_source_deals_each_piece_once_per_bag():
    source = BagPieceSource(seed=11)
    for _ in range(3):
        bag = [source.next_type() for _ in range(7)]
        assert sorted(bag) == list(PieceType)


def test_random_source_is_reproducible_with_seed():
    a = RandomPieceSource(seed=5)
    b = RandomPieceSource(seed=5)
    assert [a.next_type() for _ in range(20)] == [b.next_type() for _ in range(20)]


def test_make_piece_source_picks_kind():
    assert isinstance(make_piece_source(bag=True), BagPieceSource)
    assert isinstance(make_piece_source(seed=1), RandomPieceSource)
