"""
mzformula -- Chemical formulae from mass spectrometry m/z values.

Enumerates every combination of atom counts whose integral mass matches an
observed mass using the Z3 SMT solver over fixed-width bit-vectors, then
keeps the formulae whose exact monoisotopic mass agrees with the input.

Typical usage::

    from mzformula import MzToFormula

    query = MzToFormula({"C", "H", "N", "O"}, precision=3)
    for formula in query.formulae_for_mz(151.063):
        print(query.format_formula(formula))
"""

from .util.atoms import Atom, AtomCollection
from .query.base import Query, SolverError
from .query.mz import MzToFormula
