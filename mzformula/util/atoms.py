"""
Atom and atom collection utilities.

:class:`Atom` pairs a pymatgen :class:`~pymatgen.core.Element` with the
monoisotopic mass used for formula enumeration.

:class:`AtomCollection` is an ordered, immutable set of atoms that fixes
the element order used when formulae are written out (Hill order: carbon,
then hydrogen, then the rest alphabetically; strictly alphabetical when no
carbon is present).
"""

import math
from .data import element_for_symbol, monoisotopic_mass
import pymatgen.core as pg
import numpy as np

CHNOPS = ("C", "H", "N", "O", "P", "S")


class Atom:
    """A chemical element with a fixed monoisotopic mass.

    Args:
        symbol: Element symbol (e.g. ``"C"``) or pymatgen
            :class:`~pymatgen.core.Element`.
        mass: Monoisotopic mass in Da.  Looked up in the bundled table when
            omitted.
    """

    def __init__(self, symbol, mass=None):
        self._element = element_for_symbol(symbol)
        self._mass = float(mass) if mass is not None else monoisotopic_mass(self._element)

    @property
    def symbol(self) -> str:
        """str: Element symbol."""
        return self._element.symbol

    @property
    def element(self) -> pg.Element:
        """pymatgen.Element: The underlying element."""
        return self._element

    @property
    def monoisotopic_mass(self) -> float:
        """float: Monoisotopic mass in Da."""
        return self._mass

    @property
    def integral_mass(self) -> int:
        """int: Monoisotopic mass rounded to the nearest integer."""
        return int(round(self._mass))

    def max_count(self, target) -> int:
        """Largest count of this atom that fits in a molecule of mass *target*."""
        return max(0, math.ceil(target / self._mass))

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:
        return f"Atom({self.symbol}, {self._mass})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Atom):
            return NotImplemented
        return self.symbol == other.symbol and self._mass == other._mass

    def __hash__(self) -> int:
        return hash((self.symbol, self._mass))


def hill_order_key(symbol):
    """Sort key placing C first and H second, everything else alphabetical."""
    return {"C": (0, ""), "H": (1, "")}.get(symbol, (2, symbol))


class AtomCollection:
    """Ordered, immutable set of :class:`Atom` objects.

    Iteration always follows Hill order so that formula strings built from
    the same collection are reproducible.  If carbon is absent, hydrogen is
    sorted alphabetically like any other element.

    Args:
        data: Iterable of :class:`Atom` objects or element symbols.

    Raises:
        ValueError: If two atoms share a symbol.
    """

    def __init__(self, data):
        atoms = [a if isinstance(a, Atom) else Atom(a) for a in data]
        symbols = [a.symbol for a in atoms]
        if len(set(symbols)) != len(symbols):
            raise ValueError(f'Duplicate elements in atom collection: {symbols}.')

        if "C" in symbols:
            key = lambda a: hill_order_key(a.symbol)
        else:
            key = lambda a: a.symbol
        self._atoms = tuple(sorted(atoms, key=key))
        self._by_symbol = {a.symbol: a for a in self._atoms}

    @classmethod
    def for_elements(cls, elements=CHNOPS):
        """Build a collection from element symbols using tabulated masses.

        Args:
            elements: Iterable of element symbols.  Defaults to CHNOPS.

        Returns:
            :class:`AtomCollection`
        """
        return cls(Atom(el) for el in elements)

    @property
    def symbols(self):
        """tuple: Element symbols in collection order."""
        return tuple(self._by_symbol.keys())

    @property
    def masses(self) -> np.ndarray:
        """numpy.ndarray: Monoisotopic masses in collection order."""
        return np.array([a.monoisotopic_mass for a in self._atoms], dtype=float)

    def __getitem__(self, symbol) -> Atom:
        return self._by_symbol[str(symbol)]

    def __iter__(self):
        return iter(self._atoms)

    def __len__(self) -> int:
        return len(self._atoms)

    def __contains__(self, item) -> bool:
        if isinstance(item, Atom):
            return self._by_symbol.get(item.symbol) == item
        return str(item) in self._by_symbol

    def __eq__(self, other) -> bool:
        if not isinstance(other, AtomCollection):
            return NotImplemented
        return self._atoms == other._atoms

    def __hash__(self) -> int:
        return hash(self._atoms)

    def __repr__(self) -> str:
        return f"AtomCollection({', '.join(self.symbols)})"
