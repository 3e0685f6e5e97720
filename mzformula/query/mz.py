"""
High-level query for turning an observed m/z into chemical formulae.

:class:`MzToFormula` rounds the (neutral) mass to a small window of integer
targets, enumerates every integer solution of
``sum(integral_mass * count) == target`` with :class:`~mzformula.query.base.Query`,
and keeps the candidates whose exact monoisotopic mass matches the input.
"""

import logging
import math
import multiprocessing

import numpy as np

from mzformula.util.atoms import Atom, AtomCollection, CHNOPS
from mzformula.util.mass import formula_mass, neutral_mass
from mzformula.constraint_system import FormulaSystem
from mzformula.constraint_system.compiler import DEFAULT_WIDTH
from mzformula.query.base import Query

log = logging.getLogger(__name__)


def _solve_int_mass(atom_masses, target, width, timeout_ms):
    """Enumerate formulae for one integer target in a fresh context.

    Takes and returns plain data so it can run in a worker process.

    Returns:
        list of ``{symbol: count}`` dicts, zero counts omitted.
    """
    atoms = AtomCollection(Atom(symbol, mass) for symbol, mass in atom_masses)
    system = FormulaSystem(atoms, width)
    query = Query(width=width, timeout_ms=timeout_ms)
    solutions = query.find_all(system.build_constraint_over_ints(target))
    return [{atom.symbol: count for atom, count in system.to_formula(s).items()} for s in solutions]


def _solve_int_mass_star(args):
    return _solve_int_mass(*args)


class MzToFormula:
    """Enumerate chemical formulae whose monoisotopic mass matches an m/z.

    Args:
        atoms: An :class:`~mzformula.util.atoms.AtomCollection` or an
            iterable of element symbols.  Defaults to CHNOPS.
        precision: Number of decimal places the exact mass must agree on.
            Sets the default tolerance to ``0.5 * 10 ** -precision`` Da.
        window: Integer targets ``c - window .. c + window`` around the mass
            rounded half up to ``c`` are searched.
        tolerance: Absolute mass tolerance in Da.  Overrides *precision*.
        ion: Adduct name (see :data:`~mzformula.util.mass.ION_MASSES`) the
            m/z was observed as, or ``None`` for a neutral mass.
        processes: Solve the integer targets in this many worker processes.
            ``None`` or ``1`` solves them in-process.
        timeout_ms: Optional per-check solver timeout in milliseconds.
        width: Bit width of the solver arithmetic.
    """

    def __init__(
            self,
            atoms=None,
            precision=5,
            *,
            window=1,
            tolerance=None,
            ion=None,
            processes=None,
            timeout_ms=None,
            width=DEFAULT_WIDTH):
        if atoms is None:
            atoms = CHNOPS
        if not isinstance(atoms, AtomCollection):
            atoms = AtomCollection(atoms)
        if window < 0:
            raise ValueError(f'window must be non-negative, got {window}.')

        self.atoms = atoms
        self.precision = precision
        self.window = window
        self._tolerance = tolerance
        self.ion = ion
        self.processes = processes
        self.timeout_ms = timeout_ms
        self.width = width
        self.system = FormulaSystem(atoms, width)

    @property
    def tolerance(self):
        """float: Largest accepted difference (Da) between exact and observed mass."""
        if self._tolerance is not None:
            return self._tolerance
        return 0.5 * 10 ** -self.precision

    @tolerance.setter
    def tolerance(self, val):
        self._tolerance = val

    def integer_targets(self, mz):
        """Integer masses searched for an observed *mz*."""
        # halves round up
        centre = math.floor(neutral_mass(mz, self.ion) + 0.5)
        return {centre + delta for delta in range(-self.window, self.window + 1)}

    def build_constraint_over_ints(self, target):
        """The bounded integer problem for one target mass.

        See :meth:`~mzformula.constraint_system.FormulaSystem.build_constraint_over_ints`.
        """
        return self.system.build_constraint_over_ints(target)

    def candidates_for_int_mass(self, target):
        """All formulae whose integral mass equals *target*.

        Returns:
            set of formulae, each a ``frozenset`` of ``(Atom, count)`` pairs
            with zero counts omitted.
        """
        query = Query(width=self.width, timeout_ms=self.timeout_ms)
        solutions = query.find_all(self.build_constraint_over_ints(target))
        return {frozenset(self.system.to_formula(s).items()) for s in solutions}

    def _atom_masses(self):
        return [(atom.symbol, atom.monoisotopic_mass) for atom in self.atoms]

    def candidates_for_mz(self, mz):
        """Union of :meth:`candidates_for_int_mass` over the integer window.

        Returns:
            set of formulae, each a ``frozenset`` of ``(Atom, count)`` pairs.
        """
        targets = sorted(self.integer_targets(mz))

        if self.processes is not None and self.processes > 1:
            jobs = [(self._atom_masses(), t, self.width, self.timeout_ms) for t in targets]
            with multiprocessing.Pool(min(self.processes, len(jobs))) as pool:
                results = pool.map(_solve_int_mass_star, jobs)
            candidates = {frozenset((self.atoms[symbol], count) for symbol, count in formula.items())
                          for formulae in results for formula in formulae}
        else:
            candidates = set()
            for t in targets:
                candidates |= self.candidates_for_int_mass(t)

        log.info("%d candidate formula(e) for integer masses %s", len(candidates), targets)
        return candidates

    def formulae_for_mz(self, mz):
        """Chemical formulae whose exact mass matches *mz*.

        Candidates from :meth:`candidates_for_mz` are kept only if their
        exact monoisotopic mass is within :pyattr:`tolerance` of the neutral
        mass of *mz*.

        Args:
            mz: Observed mass-to-charge value (or neutral mass if
                :pyattr:`ion` is ``None``).

        Returns:
            list of ``{Atom: count}`` dicts without duplicates, ordered by
            increasing mass error, then by formula string.
        """
        target = neutral_mass(mz, self.ion)
        candidates = [dict(c) for c in self.candidates_for_mz(mz)]
        if not candidates:
            return []

        counts = np.array([[c.get(atom, 0) for atom in self.atoms] for c in candidates], dtype=float)
        errors = np.abs(counts @ self.atoms.masses - target)

        keep = [(err, self.format_formula(c), c)
                for err, c in zip(errors, candidates)
                if err <= self.tolerance]
        keep.sort(key=lambda x: (x[0], x[1]))
        log.info("%d of %d candidate(s) within %g Da of %.6f",
                 len(keep), len(candidates), self.tolerance, target)
        return [c for _, _, c in keep]

    def exact_mass(self, formula):
        """Exact monoisotopic mass of a formula over this query's atoms."""
        return formula_mass(self.system.to_formula(formula))

    def format_formula(self, formula):
        """Formula string in this query's element order, e.g. ``"C6O2"``."""
        return self.system.format_formula(formula)
