from itertools import product

import pytest

from pindakaas.core import CheckError, Incomplete, Lit, Unsatisfiable
from pindakaas.linear import (
    Comparator,
    ConstraintKind,
    DirectEncoding,
    LimitComp,
    LinExp,
    Linear,
    LinearConstraint,
    LogEncoding,
    OrderEncoding,
    Part,
    PartKind,
    pos_coeff,
)


def make_valuation(assignment):
    values = {abs(v): v > 0 for v in assignment}

    def value(lit):
        var = lit.var().value
        if var not in values:
            return None
        return values[var] != lit.is_negated()

    return value


def construct_terms(terms):
    return [Part(PartKind.AMO, ((Lit(lit), coef),)) for lit, coef in terms]


def satisfying(check, n):
    found = set()
    for signs in product((False, True), repeat=n):
        assignment = tuple(v if s else -v for v, s in zip(range(1, n + 1), signs))
        try:
            check(make_valuation(assignment))
        except Unsatisfiable:
            continue
        found.add(assignment)
    return found


SUITE = [
    (
        [(1, 2), (2, 3), (3, 5)],
        LimitComp.LESS_EQ,
        6,
        3,
        [[-1, -2, -3], [1, -2, -3], [-1, 2, -3], [1, 2, -3], [-1, -2, 3]],
    ),
    (
        [(1, 1), (2, 2), (3, 4)],
        LimitComp.LESS_EQ,
        5,
        3,
        [[-1, -2, -3], [1, -2, -3], [-1, 2, -3], [1, 2, -3], [-1, -2, 3], [1, -2, 3]],
    ),
    (
        [(1, 4), (2, 6), (3, 7)],
        LimitComp.LESS_EQ,
        10,
        3,
        [[-1, -2, -3], [1, -2, -3], [-1, 2, -3], [1, 2, -3], [-1, -2, 3]],
    ),
    ([(1, 1), (2, 2), (3, 4)], LimitComp.EQUAL, 5, 3, [[1, -2, 3]]),
    ([(1, 1), (2, 2), (3, 3)], LimitComp.EQUAL, 3, 3, [[-1, -2, 3], [1, 2, -3]]),
    (
        [(1, 2), (2, 3), (3, 5), (4, 7)],
        LimitComp.EQUAL,
        10,
        4,
        [[-1, 2, -3, 4], [1, 2, 3, -4]],
    ),
    (
        [(1, 2), (2, 1), (3, 2), (4, 2)],
        LimitComp.EQUAL,
        4,
        4,
        [[1, -2, -3, 4], [-1, -2, 3, 4], [1, -2, 3, -4]],
    ),
]


@pytest.mark.parametrize("terms,cmp,k,n,expected", SUITE)
def test_linear_solutions(terms, cmp, k, n, expected):
    lin = Linear(construct_terms(terms), cmp, k)
    assert satisfying(lin.check, n) == {tuple(s) for s in expected}


@pytest.mark.parametrize("terms,cmp,k,n,expected", SUITE)
def test_linear_constraint_solutions(terms, cmp, k, n, expected):
    con = LinearConstraint.from_linear(Linear(construct_terms(terms), cmp, k))
    assert satisfying(con.check, n) == {tuple(s) for s in expected}


def test_small_le_2_bounds():
    lin = Linear(
        construct_terms([(-1, 3), (-2, 6), (-3, 1), (-4, 2), (-5, 3), (-6, 6)]),
        LimitComp.LESS_EQ,
        19,
    )
    lin.check(make_valuation([1, 2, 3, 4, 5, 6]))
    with pytest.raises(Unsatisfiable):
        lin.check(make_valuation([-1, -2, -3, -4, -5, -6]))
    assert len(lin) == 6


def test_pos_coeff_and_set_k():
    assert pos_coeff(0) == 0
    with pytest.raises(ValueError):
        pos_coeff(-1)
    lin = Linear(construct_terms([(1, 1)]), LimitComp.LESS_EQ, 1)
    lin.set_k(4)
    assert lin.k == 4
    with pytest.raises(ValueError):
        lin.set_k(-2)
    with pytest.raises(ValueError):
        Linear([], LimitComp.EQUAL, -1)


def test_ord_chain_values():
    exp = (
        LinExp()
        .add_chain([(Lit(1), 2), (Lit(2), 2), (Lit(3), 4)])
        .add_constant(2)
    )
    with pytest.raises(Unsatisfiable):
        exp.value(make_valuation([1, -2, 3]))
    with pytest.raises(Unsatisfiable):
        exp.value(make_valuation([-1, 2, -3]))
    assert exp.value(make_valuation([-1, -2, -3])) == 2
    assert exp.value(make_valuation([1, -2, -3])) == 4
    assert exp.value(make_valuation([1, 2, -3])) == 6
    assert exp.value(make_valuation([1, 2, 3])) == 10


def test_direct_encoding_value():
    exp = LinExp.from_int_encoding(DirectEncoding(3, [Lit(1), Lit(2), Lit(3)]))
    assert exp.value(make_valuation([-1, 2, -3])) == 4
    assert exp.value(make_valuation([-1, -2, -3])) == 0
    with pytest.raises(Unsatisfiable):
        exp.value(make_valuation([1, 2, -3]))


def test_order_encoding_value():
    exp = LinExp.from_int_encoding(OrderEncoding(5, [Lit(1), Lit(2)]))
    assert exp.value(make_valuation([1, -2])) == 6
    assert exp.value(make_valuation([1, 2])) == 7
    with pytest.raises(Unsatisfiable):
        exp.value(make_valuation([-1, 2]))


def test_log_encoding_signed():
    exp = LinExp.from_int_encoding(LogEncoding(True, [Lit(1), Lit(2), Lit(3)]))
    assert list(exp.terms()) == [(Lit(1), 1), (Lit(2), 2), (Lit(3), -4)]
    assert exp.value(make_valuation([1, -2, 3])) == -3
    with pytest.raises(ValueError):
        LinExp.from_int_encoding(LogEncoding(True, []))


def test_add_log_encoding_prepends():
    exp = LinExp.from_lit(Lit(5)) + LogEncoding(True, [Lit(1), Lit(2)])
    assert list(exp.terms()) == [(Lit(2), -2), (Lit(1), 1), (Lit(5), 1)]


def test_add_order_encoding_adds_constant():
    exp = LinExp.from_constant(1) + OrderEncoding(3, [Lit(1), Lit(2)])
    assert exp.add == 4
    groups = list(exp.groups())
    assert groups[1][0].kind is ConstraintKind.IMPLICATION_CHAIN


def test_bounded_log_encoding_domain():
    exp = LinExp().add_bounded_log_encoding([(Lit(1), 1), (Lit(2), 2)], 1, 2)
    assert exp.value(make_valuation([1, -2])) == 1
    assert exp.value(make_valuation([-1, 2])) == 2
    with pytest.raises(Unsatisfiable):
        exp.value(make_valuation([1, 2]))
    with pytest.raises(Unsatisfiable):
        exp.value(make_valuation([-1, -2]))


def test_add_choice():
    exp = LinExp().add_choice([(Lit(1), 3), (Lit(2), 5)])
    assert exp.value(make_valuation([-1, 2])) == 5
    with pytest.raises(CheckError):
        exp.value(make_valuation([1, 2]))
    single = LinExp().add_choice([(Lit(1), 3)])
    assert [c for c, _ in single.groups()] == [None]


def test_add_term_and_lit_push_front():
    exp = LinExp.from_lit(Lit(1)) + (Lit(2), 5)
    assert list(exp.terms()) == [(Lit(2), 5), (Lit(1), 1)]
    exp = exp.add_lit(Lit(-3))
    assert list(exp.terms())[0] == (Lit(-3), 1)


def test_add_linexp_applies_multipliers():
    left = LinExp.from_terms([(Lit(1), 1)]).add_constant(1) * 2
    right = (LinExp.from_terms([(Lit(2), 3)]) * 3).add_choice(
        [(Lit(3), 1), (Lit(4), 2)]
    )
    total = left + right
    assert total.mult == 1
    assert total.add == 2
    assert list(total.terms()) == [
        (Lit(2), 9),
        (Lit(1), 2),
        (Lit(3), 3),
        (Lit(4), 6),
    ]
    assert total.value(make_valuation([1, 2, -3, 4])) == 2 + 9 + 2 + 6


def test_mul_and_immutability():
    base = LinExp.from_terms([(Lit(1), 2)])
    doubled = base * 3
    assert doubled.value(make_valuation([1])) == 6
    assert base.value(make_valuation([1])) == 2


def test_from_slices():
    exp = LinExp.from_slices([2, 3], [Lit(1), Lit(2)])
    assert list(exp.terms()) == [(Lit(1), 2), (Lit(2), 3)]
    with pytest.raises(ValueError):
        LinExp.from_slices([1], [Lit(1), Lit(2)])


def test_missing_assignment():
    exp = LinExp.from_terms([(Lit(1), 1), (Lit(2), 1)])
    with pytest.raises(Incomplete):
        exp.value(make_valuation([1]))


def test_linear_constraint_comparators():
    exp = LinExp.from_terms([(Lit(1), 2), (Lit(2), 3)])
    sol = make_valuation([1, 2])
    LinearConstraint(exp, Comparator.GREATER_EQ, 5).check(sol)
    LinearConstraint(exp, Comparator.EQUAL, 5).check(sol)
    with pytest.raises(Unsatisfiable):
        LinearConstraint(exp, Comparator.GREATER_EQ, 6).check(sol)
    with pytest.raises(Unsatisfiable):
        LinearConstraint(exp, Comparator.LESS_EQ, 4).check(sol)


def test_comparator_from_limit_comp_and_str():
    assert Comparator.from_limit_comp(LimitComp.EQUAL) is Comparator.EQUAL
    assert Comparator.from_limit_comp(LimitComp.LESS_EQ) is Comparator.LESS_EQ
    assert str(LimitComp.EQUAL) == "=="
    assert str(LimitComp.LESS_EQ) == "<="


def test_part_validation_and_iteration():
    part = Part(PartKind.IC, [(Lit(1), 1), (Lit(2), 2)])
    assert list(part) == [(Lit(1), 1), (Lit(2), 2)]
    with pytest.raises(ValueError):
        Part(PartKind.AMO, [(Lit(1), -1)])
    with pytest.raises(ValueError):
        Part(PartKind.DOM, [(Lit(1), 1)])