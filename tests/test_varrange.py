import pytest

from pindakaas.core import Var
from pindakaas.varrange import VarRange


def test_empty_range():
    r = VarRange.empty()
    assert r.is_empty()
    assert len(r) == 0
    assert list(r) == []
    assert list(reversed(r)) == []


def test_iteration_matches_bounds():
    r = VarRange(Var(3), Var(7))
    assert list(r) == [Var(i) for i in range(3, 8)]
    assert len(r) == len(list(r))
    assert not r.is_empty()


def test_reversed_is_reverse_of_iteration():
    r = VarRange(Var(10), Var(15))
    assert list(reversed(r)) == list(r)[::-1]


def test_indexing_and_find_round_trip():
    r = VarRange(Var(4), Var(9))
    assert r[0] == r.start
    assert r[len(r) - 1] == r.end
    for i in range(len(r)):
        assert r.find(r[i]) == i


def test_negative_index():
    r = VarRange(Var(4), Var(9))
    assert r[-1] == r.end


def test_index_out_of_bounds():
    r = VarRange(Var(4), Var(9))
    with pytest.raises(IndexError):
        r[len(r)]
    with pytest.raises(IndexError):
        VarRange.empty()[0]


def test_find_outside_range():
    r = VarRange(Var(4), Var(9))
    assert r.find(Var(3)) is None
    assert r.find(Var(10)) is None


def test_contains():
    r = VarRange(Var(4), Var(9))
    assert Var(4) in r
    assert Var(9) in r
    assert Var(10) not in r
    assert Var(1) not in VarRange.empty()


def test_single_var_range():
    r = VarRange(Var(5), Var(5))
    assert list(r) == [Var(5)]
    assert r.find(Var(5)) == 0


def test_equality_and_hash():
    assert VarRange(Var(1), Var(3)) == VarRange(Var(1), Var(3))
    assert len({VarRange(Var(1), Var(3)), VarRange(Var(1), Var(3))}) == 1