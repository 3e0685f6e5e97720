"""
Formula constraint system.

Defines :class:`FormulaSystem`, which holds one integer count variable per
atom and builds the bounded linear-equality problem
``sum(integral_mass[a] * count[a]) == target`` together with the count
bounds that keep every solution inside the compiler's bit width.  It also
maps solver assignments back to chemical formulae.
"""

from mzformula.util.atoms import Atom, AtomCollection
from mzformula.constraint_system.compiler import DEFAULT_WIDTH, fits_width
from mzformula.constraint_system.expressions import Var
from mzformula.constraint_system.common import apply_bounds, weighted_sum
import pymatgen.core as pg


class FormulaSystem:
    """Integer atom-count variables for one element set.

    Args:
        atoms: An :class:`~mzformula.util.atoms.AtomCollection`.
        width: Bit width the constraints will be compiled to.  Used to
            reject targets whose bounds could overflow.

    Raises:
        TypeError: If *atoms* is not an
            :class:`~mzformula.util.atoms.AtomCollection`.
    """

    def __init__(self, atoms, width=DEFAULT_WIDTH):
        if not isinstance(atoms, AtomCollection):
            raise TypeError("atoms argument must be an AtomCollection.")

        self.atoms = atoms
        self.width = width

        self.count_variable_collection = {}
        self.atom_collection = {}
        self._setup()

    def _new_count_var(self, atom):
        """Create the count variable for *atom*, named after its symbol."""
        var = Var(atom.symbol)
        self.count_variable_collection[atom.symbol] = var
        self.atom_collection[var] = atom

    def _setup(self):
        for atom in self.atoms:
            self._new_count_var(atom)

    def count_vars(self, atom=None):
        """Return the count variable(s).

        Args:
            atom: Atom or element symbol.  If ``None``, returns the full
                ``{symbol: var}`` dict.
        """
        if atom is not None:
            return self.count_variable_collection[str(atom)]
        return self.count_variable_collection

    def atom_for_var(self, var):
        """Return the atom counted by *var*."""
        return self.atom_collection[var]

    @property
    def integral_masses(self):
        """dict: ``{atom: int}`` of monoisotopic masses rounded to integers."""
        return {atom: atom.integral_mass for atom in self.atoms}

    def mass_constraint(self, target: int):
        """``sum(integral_mass * count) == target`` over every atom."""
        vars = [self.count_vars(atom) for atom in self.atoms]
        weights = [atom.integral_mass for atom in self.atoms]
        return weighted_sum(vars, weights, target)

    def count_bounds(self, target: int):
        """Lower and upper bounds on every count for a molecule of mass *target*.

        The lower bound is 0 and the upper bound is
        ``ceil(target / monoisotopic_mass)``, so no count can wrap around
        into negative two's-complement values.

        Returns:
            list of constraints, all lower bounds followed by all upper bounds.
        """
        lower, upper = [], []
        for atom in self.atoms:
            var = self.count_vars(atom)
            lower.append(apply_bounds(var, lb=0))
            upper.append(apply_bounds(var, ub=atom.max_count(target)))
        return lower + upper

    def build_constraint_over_ints(self, target: int):
        """Build the full bounded problem for an integer target mass.

        Args:
            target: Integer mass the formula must add up to.

        Returns:
            list of constraints: the mass equality followed by the bounds.

        Raises:
            ValueError: If the target or the largest reachable partial sum
                does not fit the configured bit width.
        """
        target = int(target)
        worst_case = sum(atom.integral_mass * atom.max_count(target) for atom in self.atoms)
        if not (fits_width(target, self.width) and fits_width(worst_case, self.width)):
            raise ValueError(f'Target mass {target} overflows {self.width}-bit arithmetic.')

        return [self.mass_constraint(target)] + self.count_bounds(target)

    def _atom(self, key):
        if isinstance(key, Var):
            return self.atom_for_var(key)
        if isinstance(key, Atom):
            return key
        return self.atoms[key]

    def to_formula(self, assignment):
        """Convert a solver assignment into ``{Atom: count}``.

        Zero counts are omitted; atoms absent from the result have count 0.

        Args:
            assignment: Mapping (or iterable of pairs) from :class:`Var`,
                :class:`~mzformula.util.atoms.Atom` or element symbol to int.
        """
        return {self._atom(key): count
                for key, count in dict(assignment).items()
                if count != 0}

    def to_composition(self, assignment) -> pg.Composition:
        """Convert a solver assignment into a pymatgen :class:`Composition`."""
        return pg.Composition({atom.element: count for atom, count in self.to_formula(assignment).items()})

    def format_formula(self, assignment) -> str:
        """Write an assignment out as a formula string.

        Atoms follow the collection's order; each non-zero count is written
        as ``symbol + count`` (a count of 1 keeps its digit).  Zero counts
        contribute nothing.

        Example:
            ``{C: 6, N: 0, O: 2}`` over C, N, O gives ``"C6O2"``.
        """
        formula = self.to_formula(assignment)
        return "".join(f"{atom.symbol}{formula[atom]}" for atom in self.atoms if atom in formula)
