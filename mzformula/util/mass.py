"""
Exact-mass calculation.

Computes the precise monoisotopic mass of a chemical formula and converts
between neutral masses and the m/z of common singly-charged adducts.
"""

import numpy as np
import pymatgen.core as pg

from .atoms import Atom
from .data import ELECTRON_MASS, monoisotopic_mass

PROTON_MASS = monoisotopic_mass("H") - ELECTRON_MASS

ION_MASSES = {
    "M": 0.0,
    "M+H": PROTON_MASS,
    "M+Na": monoisotopic_mass("Na") - ELECTRON_MASS,
    "M+K": monoisotopic_mass("K") - ELECTRON_MASS,
    "M+NH4": monoisotopic_mass("N") + 4 * monoisotopic_mass("H") - ELECTRON_MASS,
    "M-H": -PROTON_MASS,
}
"""dict: Mass shift (Da) from the neutral molecule to each ion, all with |charge| <= 1."""


def _ion_shift(ion):
    if ion is None:
        return 0.0
    try:
        return ION_MASSES[ion]
    except KeyError:
        raise ValueError(f'Unknown ion {ion!r}. Expected one of {list(ION_MASSES)}.') from None


def formula_mass(formula) -> float:
    """Return the exact monoisotopic mass of *formula*.

    Args:
        formula: A formula string (``"C6H12O6"``), a pymatgen
            :class:`~pymatgen.core.Composition`, or a mapping from
            :class:`~mzformula.util.atoms.Atom` (or element symbol) to count.
            Atoms carry their own mass; symbols use the bundled table.

    Returns:
        The mass in Da.
    """
    if isinstance(formula, str):
        formula = pg.Composition(formula)

    masses, counts = [], []
    for key, count in dict(formula).items():
        if isinstance(key, Atom):
            masses.append(key.monoisotopic_mass)
        else:
            masses.append(monoisotopic_mass(key))
        counts.append(count)

    if not counts:
        return 0.0
    return float(np.dot(np.asarray(counts, dtype=float), np.asarray(masses, dtype=float)))


def neutral_mass(mz, ion=None) -> float:
    """Convert an observed m/z into the neutral monoisotopic mass.

    Args:
        mz: Observed mass-to-charge value.
        ion: Adduct name from :data:`ION_MASSES`, or ``None`` when *mz* is
            already a neutral mass.
    """
    return mz - _ion_shift(ion)


def ion_mz(mass, ion=None) -> float:
    """Convert a neutral monoisotopic mass into the m/z of *ion*."""
    return mass + _ion_shift(ion)
