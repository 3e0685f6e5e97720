"""
Tests for the compiler and the all-solutions search driver.

These tests verify:
1. Expressions compile to signed fixed-width bit-vectors with provenance
2. find_one returns a satisfying assignment or None when unsatisfiable
3. find_all enumerates every solution exactly once
4. Backend failures surface as SolverError, never as "no solution"
"""

import pytest
import z3

from mzformula import Query, SolverError
from mzformula.constraint_system import Compiler
from mzformula.constraint_system.expressions import (
    And,
    Compare,
    CompareOp,
    Const,
    LinExpr,
    Not,
    Or,
    Term,
    Var,
)
from mzformula.constraint_system.common import apply_bounds, weighted_sum


X, Y = Var("x"), Var("y")


def as_dicts(solutions):
    return [Query.as_dict(s) for s in solutions]


# =============================================================================
# COMPILER
# =============================================================================

class TestCompiler:

    def test_var_provenance(self):
        compiler = Compiler()
        bv, provenance = compiler.compile_expr(X)
        assert z3.is_bv(bv)
        assert bv.size() == 32
        assert list(provenance.values()) == [X]
        assert list(provenance.keys())[0].name() == "x"

    def test_constant_has_no_provenance(self):
        bv, provenance = Compiler().compile_expr(Const(7))
        assert provenance == {}

    def test_provenance_merged_over_constraint(self):
        con = Or(Compare(LinExpr([Term(2, X)]), CompareOp.EQ, Y), Not(Compare(X, CompareOp.LT, Const(0))))
        boolref, provenance = Compiler().compile_constraint(con)
        assert z3.is_bool(boolref)
        assert set(provenance.values()) == {X, Y}

    def test_custom_width(self):
        compiler = Compiler(width=8)
        bv, _ = compiler.compile_expr(X)
        assert bv.size() == 8
        assert compiler.fits(127)
        assert not compiler.fits(128)
        assert compiler.fits(-128)

    def test_shared_context(self):
        ctx = z3.Context()
        compiler = Compiler(ctx)
        bv, _ = compiler.compile_expr(X)
        assert bv.ctx == ctx

    def test_rejects_constraint_as_expression(self):
        with pytest.raises(TypeError):
            Compiler().compile_expr(Compare(X, CompareOp.EQ, Const(0)))
        with pytest.raises(TypeError):
            Compiler().compile_constraint(X)


# =============================================================================
# FIND ONE
# =============================================================================

class TestFindOne:

    def test_satisfiable(self):
        solution = Query().find_one([weighted_sum([X, Y], [1, 1], 5), apply_bounds(X, 2)])
        assert solution == {X: 2, Y: 3}

    def test_unsatisfiable_returns_none(self):
        constraints = [apply_bounds(X, lb=3), apply_bounds(X, ub=2)]
        assert Query().find_one(constraints) is None

    def test_signed_comparisons(self):
        solution = Query().find_one([Compare(X, CompareOp.LT, Const(0)), Compare(X, CompareOp.GT, Const(-2))])
        assert solution == {X: -1}

    def test_model_is_recorded(self):
        query = Query()
        query.find_one([apply_bounds(X, 1)])
        assert len(query.solutions) == 1


# =============================================================================
# FIND ALL
# =============================================================================

class TestFindAll:

    def test_enumerates_bounded_range(self):
        solutions = Query().find_all([apply_bounds(X, lb=-2, ub=2)])
        assert sorted(s[X] for s in as_dicts(solutions)) == [-2, -1, 0, 1, 2]

    def test_two_variables(self):
        constraints = [weighted_sum([X, Y], [1, 1], 3), apply_bounds(X, lb=0), apply_bounds(Y, lb=0)]
        solutions = Query().find_all(constraints)
        assert {(s[X], s[Y]) for s in as_dicts(solutions)} == {(0, 3), (1, 2), (2, 1), (3, 0)}

    def test_empty_when_unsatisfiable(self):
        assert Query().find_all([apply_bounds(X, lb=1, ub=0)]) == set()

    def test_caller_constraints_untouched(self):
        constraints = [apply_bounds(X, lb=0, ub=3)]
        Query().find_all(constraints)
        assert constraints == [apply_bounds(X, lb=0, ub=3)]

    def test_one_check_per_solution_plus_final(self):
        calls = []

        class CountingQuery(Query):
            def find_one(self, constraints):
                calls.append(len(constraints))
                return super().find_one(constraints)

        CountingQuery().find_all([apply_bounds(X, lb=0, ub=3)])
        assert calls == [1, 2, 3, 4, 5]

    def test_no_variables(self):
        solutions = Query().find_all([Compare(Const(1), CompareOp.EQ, Const(1))])
        assert solutions == {frozenset()}

    def test_disjunction(self):
        con = Or(apply_bounds(X, 4), apply_bounds(X, 9), And(apply_bounds(X, lb=20, ub=21)))
        solutions = Query().find_all([con])
        assert sorted(s[X] for s in as_dicts(solutions)) == [4, 9, 20, 21]


# =============================================================================
# BACKEND FAILURES
# =============================================================================

class FakeSolver:
    def __init__(self, result=None, error=None):
        self.result, self.error = result, error

    def add(self, con):
        pass

    def check(self):
        if self.error is not None:
            raise self.error
        return self.result

    def reason_unknown(self):
        return "canceled"


class TestSolverErrors:

    def test_unknown_raises(self):
        class UnknownQuery(Query):
            def _new_solver(self):
                return FakeSolver(result=z3.unknown)

        with pytest.raises(SolverError, match="canceled"):
            UnknownQuery().find_one([apply_bounds(X, 1)])

    def test_z3_exception_wrapped(self):
        class BrokenQuery(Query):
            def _new_solver(self):
                return FakeSolver(error=z3.Z3Exception("out of memory"))

        with pytest.raises(SolverError, match="out of memory"):
            BrokenQuery().find_all([apply_bounds(X, 1)])

    def test_solver_error_is_not_unsat(self):
        assert issubclass(SolverError, RuntimeError)
