"""
Shared constraint-building primitives.

These small helper functions build bound checks, weighted sums and
exclusion (blocking) clauses out of the expression model in
:mod:`mzformula.constraint_system.expressions`.
"""

from mzformula.constraint_system.expressions import (
    And,
    Compare,
    CompareOp,
    Const,
    LinExpr,
    Not,
    Term,
)


def _as_expr(value):
    if isinstance(value, int):
        return Const(value)
    return value


def check_bounds(exact, lb, ub):
    """Validate that exactly one style of bound specification is used.

    Raises :class:`AssertionError` if all three are ``None``, or if *exact*
    is combined with *lb* or *ub*.

    Args:
        exact: Exact equality value, or ``None``.
        lb: Lower bound, or ``None``.
        ub: Upper bound, or ``None``.
    """
    bounds = [exact, lb, ub]
    assert not all([b is None for b in bounds])
    assert not (exact is not None and lb is not None)
    assert not (exact is not None and ub is not None)


def apply_bounds(expr, exact=None, *, lb=None, ub=None):
    """Return a constraint that bounds *expr*.

    Supports three modes:

    * ``exact`` -- returns ``expr == exact``
    * ``lb`` and/or ``ub`` -- returns ``expr >= lb``, ``expr <= ub``, or
      the conjunction of both.

    Args:
        expr: A numeric expression.
        exact: If given, the expression must equal this value.
        lb: Optional lower bound (inclusive).
        ub: Optional upper bound (inclusive).

    Returns:
        A :class:`Compare` or :class:`And` constraint.
    """
    check_bounds(exact, lb, ub)

    if exact is not None:
        return Compare(expr, CompareOp.EQ, _as_expr(exact))

    constraints = []
    if lb is not None:
        constraints.append(Compare(expr, CompareOp.GE, _as_expr(lb)))
    if ub is not None:
        constraints.append(Compare(expr, CompareOp.LE, _as_expr(ub)))

    if len(constraints) > 1:
        return And(*constraints)
    return constraints[0]


def weighted_sum(vars, weights, exact=None, *, lb=None, ub=None):
    """Return a constraint bounding the weighted sum of *vars*.

    Args:
        vars: Sequence of :class:`Var`.
        weights: Integer weights (same length as *vars*).
        exact: If given, the weighted sum must equal this value.
        lb: Optional lower bound on the sum (inclusive).
        ub: Optional upper bound on the sum (inclusive).
    """
    assert len(vars) == len(weights)
    weighted_vars = LinExpr(Term(w, v) for v, w in zip(vars, weights))
    return apply_bounds(weighted_vars, exact, lb=lb, ub=ub)


def exclusion_clause(assignment):
    """Forbid exactly one assignment: ``Not(And(v == n for each v))``.

    Args:
        assignment: Mapping (or iterable of pairs) from :class:`Var` to int.
            Must not be empty.
    """
    items = dict(assignment).items()
    return Not(And.of(apply_bounds(var, value) for var, value in items))
