"""
Query sub-package for mzformula.

Provides the base :class:`Query` search session that wraps the Z3 solver
(one solution or all solutions), and :class:`MzToFormula`, which maps an
observed m/z onto chemical formulae.
"""

from .base import Query, SolverError
from .mz import MzToFormula
