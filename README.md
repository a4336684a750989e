# pindakaas

Building blocks for turning cardinality and pseudo-Boolean constraints
(∑ aᵢ·xᵢ ≷ k) into conjunctive normal form (CNF): Boolean variables and
literals, clause databases with DIMACS and WDIMACS input and output,
encoders for *at most one* and *exactly one* constraints, linear
expressions and constraints that can check an assignment, and Boolean
encodings of integer variables.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Variables, literals and clause databases

`pindakaas.core` defines `Var` (a Boolean variable, a non-zero integer)
and `Lit` (a variable or its negation; negative values are negations).
`~lit` negates a literal, `~var` gives the negated literal of a variable
and `Lit.from_var(var)` the positive one. Literals sort by variable, with
the positive literal before the negative one.

A `ClauseDatabase` hands out fresh variables with `new_var()` and takes
clauses with `add_clause(lits)`. `db.encode(constraint, encoder)` calls
`encoder.encode(db, constraint)`. `ConditionalDatabase(db, conditions)`
adds the given literals to every clause it passes on to `db`.

## CNF and WCNF formulas

`pindakaas.cnf.Cnf` is an in-memory clause database. Empty clauses are
ignored. `variables()`, `clauses()` and `literals()` count its contents,
iterating yields each clause as a tuple of literals, and `str(cnf)` is
the DIMACS text. `next_var_range(size)` reserves consecutive variables
as a `pindakaas.varrange.VarRange`.

`Wcnf` does the same for weighted formulas: `add_weighted_clause(lits,
weight)` adds a soft clause, `add_clause` a hard one (weight `None`), and
`str(wcnf)` is the WDIMACS text, where hard clauses carry the top weight
(one more than the sum of all weights). `Wcnf.from_cnf(cnf)` makes every
clause hard; `wcnf.to_cnf()` keeps only the hard clauses.

Both have `to_file(path, comment=None)`, which writes each comment line
as `c ...` before the formula, and `from_file(path)`. A malformed header
or weight raises `pindakaas.cnf.DimacsError`.

```python
from pindakaas.card_encoders import PairwiseEncoder
from pindakaas.cardinality import CardinalityOne
from pindakaas.cnf import Cnf
from pindakaas.core import Lit
from pindakaas.linear import LimitComp

cnf = Cnf()
lits = [Lit.from_var(cnf.new_var()) for _ in range(3)]

cnf.encode(CardinalityOne(lits=lits, cmp=LimitComp.EQUAL), PairwiseEncoder())

print(cnf)
# p cnf 3 4
# 1 2 3 0
# -1 -2 0
# -1 -3 0
# -2 -3 0
cnf.to_file("out.cnf", "exactly one of three")
```

## Constraints and checking

A valuation is any callable that maps a `Lit` to `True`, `False` or
`None` (unassigned). Each constraint has `check(valuation)`, which
returns nothing when the assignment satisfies it and raises
`pindakaas.core.Unsatisfiable` when it does not.

- `pindakaas.cardinality`: `CardinalityOne` (at most one with
  `LimitComp.LESS_EQ`, exactly one with `LimitComp.EQUAL`) and
  `Cardinality` (at most / exactly `k`); both convert with `to_linear()`.
- `pindakaas.linear`: `LinExp` is a linear expression with free terms,
  groups under side constraints (`add_choice`, `add_chain`,
  `add_bounded_log_encoding`), an additive constant and a multiplier; it
  supports `+` with terms, other expressions and the integer encodings
  `DirectEncoding`, `OrderEncoding` and `LogEncoding`, and `*` with an
  integer. `value(valuation)` evaluates it, raising `Unsatisfiable` when
  a side constraint is broken and `pindakaas.core.Incomplete` when a
  literal is unassigned. `Linear` is a constraint over `Part`s with
  non-negative coefficients; `LinearConstraint` compares a `LinExp`
  with `<=`, `==` or `>=` against a constant.
- `pindakaas.helpers`: `XorConstraint` with `XorEncoder` (one to three
  literals), and helpers such as `as_binary`, `negate_cnf` and
  `add_clauses_for`.

## Encoders

`pindakaas.card_encoders` holds three encoders for `CardinalityOne`:

- `PairwiseEncoder`: one binary clause for every pair of literals.
- `LadderEncoder`: a ladder of auxiliary variables channelled to the
  literals.
- `BitwiseEncoder`: a binary selector of auxiliary variables.

For exactly-one constraints each also adds the clause that at least one
literal holds.

## Integer variables

`pindakaas.intvar` has `IntVarOrd` (order encoding), `IntVarBin`
(binary encoding) and `IntVarConst`. They report their bounds and domain,
give the formulas for `x <= v` and `x >= v` (`leq`, `geq`, `leqs`,
`geqs`), and convert with `to_linexp()`. `IntVarOrd.consistent(db)` adds
the implication chain that keeps an order encoding well-formed.
`int_var_from_dom` picks a constant or an order encoding for a domain.

`pindakaas.model` has `Model`, `IntVar` and `Lin`: integer variables with
explicit domains under ternary constraints `x + y ≤ z` or `x + y = z`
(`Lin.tern`). `Model.propagate(Consistency.BOUNDS)` or
`Consistency.DOMAIN` prunes the domains to a fixpoint and raises
`Unsatisfiable` when a domain becomes empty.

## What this package does not do

- It contains no SAT solver; formulas are written out, in DIMACS or
  WDIMACS, for a solver of your choice.
- Only `CardinalityOne` and `XorConstraint` have encoders. `Cardinality`,
  `Linear` and `LinearConstraint` can be built, converted and checked,
  but there is no encoder that turns them into clauses.
- A `Model` propagates domains; it does not encode its constraints into
  clauses.
- There is no command-line program.