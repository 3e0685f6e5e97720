"""
Backend-independent model of linear integer constraints.

Numeric expressions are :class:`Const`, :class:`Var`, :class:`Term`
(``coefficient * variable``) and :class:`LinExpr` (a sum of terms).
Boolean constraints are :class:`Compare` leaves combined with
:class:`And`, :class:`Or` and :class:`Not`.

All nodes are frozen dataclasses.  ``And``/``Or`` need at least one operand
and ``Not`` exactly one, so a badly shaped node fails with ``TypeError``
when it is built.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Tuple, Union


@dataclass(frozen=True)
class Const:
    """Integer constant."""
    value: int


@dataclass(frozen=True)
class Var:
    """Named integer unknown.  Identity is the name."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Term:
    """``coefficient * var``.  A plain ``int`` coefficient is wrapped in :class:`Const`."""
    coefficient: Const
    var: Var

    def __post_init__(self):
        if isinstance(self.coefficient, int):
            object.__setattr__(self, "coefficient", Const(self.coefficient))


@dataclass(frozen=True)
class LinExpr:
    """Sum of terms.

    Terms are kept as a set, so identical terms collapse into one:
    ``LinExpr([Term(2, x), Term(2, x)])`` is ``2*x``.  Distinct terms over the
    same variable are not merged but add up once compiled.  Callers must
    pre-sum coefficients per variable.
    """
    terms: FrozenSet[Term]

    def __post_init__(self):
        object.__setattr__(self, "terms", frozenset(self.terms))


Expr = Union[Const, Var, Term, LinExpr]


class CompareOp(Enum):
    """Comparison operators (signed semantics)."""
    LT = "<"
    GT = ">"
    GE = ">="
    LE = "<="
    EQ = "=="


@dataclass(frozen=True)
class Compare:
    """``lhs op rhs``."""
    lhs: Expr
    op: CompareOp
    rhs: Expr

    def __str__(self) -> str:
        return f"{_expr_str(self.lhs)} {self.op.value} {_expr_str(self.rhs)}"


@dataclass(frozen=True, init=False)
class And:
    """Conjunction of one or more constraints."""
    operands: Tuple["BooleanExpr", ...]

    def __init__(self, first, *rest):
        object.__setattr__(self, "operands", (first,) + tuple(rest))

    @classmethod
    def of(cls, constraints):
        """Build from a non-empty iterable of constraints."""
        return cls(*constraints)

    def __str__(self) -> str:
        return "(" + " and ".join(str(op) for op in self.operands) + ")"


@dataclass(frozen=True, init=False)
class Or:
    """Disjunction of one or more constraints."""
    operands: Tuple["BooleanExpr", ...]

    def __init__(self, first, *rest):
        object.__setattr__(self, "operands", (first,) + tuple(rest))

    @classmethod
    def of(cls, constraints):
        """Build from a non-empty iterable of constraints."""
        return cls(*constraints)

    def __str__(self) -> str:
        return "(" + " or ".join(str(op) for op in self.operands) + ")"


@dataclass(frozen=True)
class Not:
    """Negation of a single constraint."""
    operand: "BooleanExpr"

    def __str__(self) -> str:
        return f"not {self.operand}"


BooleanExpr = Union[Compare, And, Or, Not]


def _expr_str(expr) -> str:
    if isinstance(expr, Const):
        return str(expr.value)
    if isinstance(expr, Var):
        return expr.name
    if isinstance(expr, Term):
        return f"{expr.coefficient.value}*{expr.var.name}"
    if isinstance(expr, LinExpr):
        return " + ".join(sorted(_expr_str(t) for t in expr.terms)) or "0"
    return str(expr)


def collect_variables(node) -> set:
    """Return every :class:`Var` appearing in an expression or constraint.

    Args:
        node: Any numeric expression or boolean constraint.

    Returns:
        set of :class:`Var`.

    Raises:
        TypeError: If *node* is not part of the model.
    """
    if isinstance(node, Const):
        return set()
    if isinstance(node, Var):
        return {node}
    if isinstance(node, Term):
        return {node.var}
    if isinstance(node, LinExpr):
        return set().union(*(collect_variables(t) for t in node.terms))
    if isinstance(node, Compare):
        return collect_variables(node.lhs) | collect_variables(node.rhs)
    if isinstance(node, (And, Or)):
        return set().union(*(collect_variables(op) for op in node.operands))
    if isinstance(node, Not):
        return collect_variables(node.operand)
    raise TypeError(f'Expected an expression or constraint. Received type {type(node)}.')
