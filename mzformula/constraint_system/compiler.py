"""
Compiler from the expression model to Z3 bit-vector terms.

Every numeric expression becomes a fixed-width signed bit-vector and every
constraint a Z3 boolean.  Alongside each compiled value the compiler
returns a provenance map from the Z3 declaration of each variable to the
:class:`~mzformula.constraint_system.expressions.Var` it came from, which
the search driver uses to read models back.

Overflow is not checked: callers must choose bounds that keep every partial
sum inside the configured width (see :meth:`Compiler.fits`).
"""

import z3

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

DEFAULT_WIDTH = 32


def fits_width(value, width) -> bool:
    """Whether *value* is representable as a signed *width*-bit integer."""
    bound = 1 << (width - 1)
    return -bound <= value < bound


# z3 overloads <, >, <=, >= on bit-vectors as signed comparisons
_COMPARE = {
    CompareOp.LT: lambda a, b: a < b,
    CompareOp.GT: lambda a, b: a > b,
    CompareOp.GE: lambda a, b: a >= b,
    CompareOp.LE: lambda a, b: a <= b,
    CompareOp.EQ: lambda a, b: a == b,
}


class Compiler:
    """Translate expressions and constraints into one Z3 context.

    Args:
        context: A :class:`z3.Context`.  A fresh one is created if omitted.
        width: Bit width of every numeric value.
    """

    def __init__(self, context=None, width=DEFAULT_WIDTH):
        self.context = context if context is not None else z3.Context()
        self.width = width

    def fits(self, value) -> bool:
        """Whether *value* is representable as a signed ``width``-bit integer."""
        return fits_width(value, self.width)

    def _zero(self):
        return z3.BitVecVal(0, self.width, ctx=self.context)

    def compile_expr(self, expr):
        """Compile a numeric expression.

        Args:
            expr: :class:`Const`, :class:`Var`, :class:`Term` or :class:`LinExpr`.

        Returns:
            ``(bitvec, provenance)`` where *provenance* maps
            :class:`z3.FuncDeclRef` to :class:`Var`.

        Raises:
            TypeError: If *expr* is not a numeric expression.
        """
        if isinstance(expr, Const):
            return z3.BitVecVal(expr.value, self.width, ctx=self.context), {}

        if isinstance(expr, Var):
            bv = z3.BitVec(expr.name, self.width, ctx=self.context)
            return bv, {bv.decl(): expr}

        if isinstance(expr, Term):
            coeff, coeff_vars = self.compile_expr(expr.coefficient)
            var, var_vars = self.compile_expr(expr.var)
            return coeff * var, {**coeff_vars, **var_vars}

        if isinstance(expr, LinExpr):
            total, provenance = None, {}
            for term in expr.terms:
                bv, term_vars = self.compile_expr(term)
                total = bv if total is None else total + bv
                provenance.update(term_vars)
            if total is None:
                total = self._zero()
            return total, provenance

        raise TypeError(f'Expected a numeric expression. Received type {type(expr)}.')

    def compile_constraint(self, constraint):
        """Compile a boolean constraint.

        Args:
            constraint: :class:`Compare`, :class:`And`, :class:`Or` or :class:`Not`.

        Returns:
            ``(boolref, provenance)`` with the provenance of every leaf merged.

        Raises:
            TypeError: If *constraint* is not a boolean constraint.
        """
        if isinstance(constraint, Compare):
            lhs, lhs_vars = self.compile_expr(constraint.lhs)
            rhs, rhs_vars = self.compile_expr(constraint.rhs)
            return _COMPARE[constraint.op](lhs, rhs), {**lhs_vars, **rhs_vars}

        if isinstance(constraint, (And, Or)):
            compiled, provenance = [], {}
            for op in constraint.operands:
                boolref, op_vars = self.compile_constraint(op)
                compiled.append(boolref)
                provenance.update(op_vars)
            combine = z3.And if isinstance(constraint, And) else z3.Or
            return combine(compiled), provenance

        if isinstance(constraint, Not):
            boolref, provenance = self.compile_constraint(constraint.operand)
            return z3.Not(boolref, ctx=self.context), provenance

        raise TypeError(f'Expected a boolean constraint. Received type {type(constraint)}.')

    def compile_all(self, constraints):
        """Compile a sequence of constraints.

        Returns:
            ``(list_of_boolrefs, provenance)``.
        """
        compiled, provenance = [], {}
        for con in constraints:
            boolref, con_vars = self.compile_constraint(con)
            compiled.append(boolref)
            provenance.update(con_vars)
        return compiled, provenance
