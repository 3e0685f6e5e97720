"""Quick-start example: formulae for a few m/z values.

Run from the repository root:
    python examples/run_example.py

Output: examples/output/example_formulae.txt

First enumerates every C/N/O formula of integral mass 104 (six of them),
then resolves two observed m/z values to exact formulae.
"""

import logging
from pathlib import Path

from mzformula import AtomCollection, MzToFormula, Query
from mzformula.constraint_system import FormulaSystem
from mzformula.util.mass import formula_mass, ion_mz

EXAMPLES_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = EXAMPLES_DIR / "output"
OUTPUT_FILE = OUTPUT_DIR / "example_formulae.txt"

INTEGRAL_TARGET = 104
CNO = {"C", "N", "O"}
CHNO = {"C", "H", "N", "O"}

# (observed m/z, adduct) pairs
OBSERVATIONS = [
    (ion_mz(formula_mass("C8H9NO2"), "M+H"), "M+H"),
    (formula_mass("C3H7NO2"), None),
]


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    log = logging.getLogger(__name__)

    lines = []

    system = FormulaSystem(AtomCollection.for_elements(CNO))
    solutions = Query().find_all(system.build_constraint_over_ints(INTEGRAL_TARGET))
    names = sorted(system.format_formula(s) for s in solutions)
    log.info("%d formulae over C, N, O with integral mass %d: %s", len(names), INTEGRAL_TARGET, names)
    lines.append(f"{INTEGRAL_TARGET}\t" + ",".join(names))

    query = MzToFormula(CHNO, precision=4)
    for mz, ion in OBSERVATIONS:
        query.ion = ion
        formulae = [query.format_formula(f) for f in query.formulae_for_mz(mz)]
        log.info("m/z %.5f (%s): %s", mz, ion or "neutral", formulae)
        lines.append(f"{mz:.5f}\t{ion or 'M'}\t" + ",".join(formulae))

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    with open(OUTPUT_FILE, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
    log.info("Done, %d line(s) written to %s", len(lines), OUTPUT_FILE)


if __name__ == "__main__":
    main()
