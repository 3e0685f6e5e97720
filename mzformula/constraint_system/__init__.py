"""
Constraint-system sub-package for mzformula.

- :mod:`~mzformula.constraint_system.expressions` -- backend-independent
  linear expressions and boolean constraints.
- :mod:`~mzformula.constraint_system.common` -- bound, weighted-sum and
  exclusion-clause helpers.
- :class:`Compiler` -- translates the model into Z3 bit-vector terms and
  records which Z3 declaration stands for which variable.
- :class:`FormulaSystem` -- atom-count variables and the bounded
  integral-mass problem for one element set.
"""

from .expressions import Const, Var, Term, LinExpr, CompareOp, Compare, And, Or, Not, collect_variables
from .compiler import Compiler
from .formula import FormulaSystem
