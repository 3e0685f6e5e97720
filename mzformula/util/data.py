"""
Data loading utilities.

Loads the monoisotopic-mass table from a bundled data file and provides
helpers that validate element symbols against pymatgen's periodic table
before looking up their masses.
"""

from pathlib import Path
import pymatgen.core as pg
import json

_DATA_DIR = Path(__file__).resolve().parent / "data_files"
_mass_data_file = "monoisotopic_masses.json"

with open(_DATA_DIR / _mass_data_file, encoding="utf-8") as f:
    MASS_DATA = json.load(f)
"""dict: Isotope data keyed by element symbol, loaded from ``monoisotopic_masses.json``."""

MONOISOTOPIC_MASSES = {el: item["monoisotopic mass"] for el, item in MASS_DATA.items()}
"""dict: Monoisotopic mass (Da) of the most abundant isotope, keyed by element symbol."""

ELECTRON_MASS = 0.000548579909
"""float: Rest mass of the electron in Da, removed from cationic adducts."""


def element_for_symbol(symbol) -> pg.Element:
    """Return the pymatgen :class:`Element` for *symbol*.

    Args:
        symbol: Element symbol string or pymatgen :class:`Element`.

    Raises:
        ValueError: If *symbol* is not a chemical element.
    """
    if isinstance(symbol, pg.Element):
        return symbol
    if not pg.Element.is_valid_symbol(str(symbol)):
        raise ValueError(f'{symbol!r} is not a valid element symbol.')
    return pg.Element(str(symbol))


def monoisotopic_mass(symbol) -> float:
    """Look up the monoisotopic mass of an element.

    Args:
        symbol: Element symbol string or pymatgen :class:`Element`.

    Returns:
        The mass in Da of the element's most abundant isotope.

    Raises:
        ValueError: If *symbol* is not a chemical element.
        KeyError: If the element is valid but absent from the bundled table.
    """
    el = element_for_symbol(symbol)
    try:
        return MONOISOTOPIC_MASSES[el.symbol]
    except KeyError:
        raise KeyError(f'No monoisotopic mass tabulated for {el.symbol}. '
                       f'Known elements: {sorted(MONOISOTOPIC_MASSES)}.') from None
