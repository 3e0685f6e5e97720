"""
Tests for the formula & bounds builder and formula serialization.

These tests verify:
1. The bounded integral-mass problem has exactly the expected solutions
2. Every solution satisfies the original equality and bounds
3. Unreachable targets yield no solution
4. Assignments serialize to canonical formula strings
"""

import pytest

from mzformula import Atom, AtomCollection, Query
from mzformula.constraint_system import FormulaSystem, Var
from mzformula.constraint_system.expressions import Compare, CompareOp, Const


CNO = AtomCollection.for_elements({"C", "N", "O"})

# Every C/N/O formula with integral mass 104
EXPECTED_104 = {
    (6, 0, 2),
    (5, 2, 1),
    (1, 2, 4),
    (2, 0, 5),
    (4, 4, 0),
    (0, 4, 3),
}


@pytest.fixture
def system():
    return FormulaSystem(CNO)


def as_counts(solution):
    solution = dict(solution)
    return tuple(solution[Var(sym)] for sym in ("C", "N", "O"))


# =============================================================================
# ATOMS
# =============================================================================

class TestAtoms:

    def test_integral_masses(self, system):
        assert {a.symbol: m for a, m in system.integral_masses.items()} == {"C": 12, "N": 14, "O": 16}

    def test_hill_order(self):
        atoms = AtomCollection.for_elements(["O", "S", "H", "N", "C", "P"])
        assert atoms.symbols == ("C", "H", "N", "O", "P", "S")

    def test_alphabetical_without_carbon(self):
        atoms = AtomCollection.for_elements(["O", "N", "H"])
        assert atoms.symbols == ("H", "N", "O")

    def test_duplicate_elements_rejected(self):
        with pytest.raises(ValueError):
            AtomCollection([Atom("C"), Atom("C", 12.1)])

    def test_invalid_symbol(self):
        with pytest.raises(ValueError):
            Atom("Xq")

    def test_untabulated_element(self):
        with pytest.raises(KeyError):
            Atom("U")

    def test_custom_mass(self):
        assert Atom("U", 238.0507882).integral_mass == 238

    def test_requires_atom_collection(self):
        with pytest.raises(TypeError):
            FormulaSystem(["C", "N", "O"])


# =============================================================================
# CONSTRAINT BUILDER
# =============================================================================

class TestBuildConstraintOverInts:

    def test_shape(self, system):
        constraints = system.build_constraint_over_ints(104)
        assert len(constraints) == 1 + 2 * len(CNO)
        assert constraints[0].op is CompareOp.EQ
        assert constraints[0].rhs == Const(104)

    def test_upper_bounds(self, system):
        upper = system.count_bounds(104)[len(CNO):]
        assert upper == [
            Compare(Var("C"), CompareOp.LE, Const(9)),
            Compare(Var("N"), CompareOp.LE, Const(8)),
            Compare(Var("O"), CompareOp.LE, Const(7)),
        ]

    def test_lower_bounds(self, system):
        lower = system.count_bounds(104)[:len(CNO)]
        assert all(c.op is CompareOp.GE and c.rhs == Const(0) for c in lower)

    def test_overflow_rejected(self):
        narrow = FormulaSystem(CNO, width=8)
        with pytest.raises(ValueError):
            narrow.build_constraint_over_ints(104)


# =============================================================================
# ENUMERATION
# =============================================================================

class TestEnumeration:

    def test_all_formulae_for_104(self, system):
        solutions = Query().find_all(system.build_constraint_over_ints(104))
        assert {as_counts(s) for s in solutions} == EXPECTED_104
        assert len(solutions) == 6

    def test_solutions_satisfy_constraints(self, system):
        constraints = system.build_constraint_over_ints(104)
        for s in Query().find_all(constraints):
            c, n, o = as_counts(s)
            assert 12 * c + 14 * n + 16 * o == 104
            assert 0 <= c <= 9 and 0 <= n <= 8 and 0 <= o <= 7

    def test_find_one_is_a_member(self, system):
        constraints = system.build_constraint_over_ints(104)
        assert as_counts(Query().find_one(constraints)) in EXPECTED_104

    def test_unreachable_target(self, system):
        constraints = system.build_constraint_over_ints(1)
        assert Query().find_one(constraints) is None
        assert Query().find_all(constraints) == set()

    def test_fresh_sessions_agree(self, system):
        constraints = system.build_constraint_over_ints(58)
        assert Query().find_all(constraints) == Query().find_all(constraints)

    def test_round_trip_known_formula(self):
        chno = AtomCollection.for_elements({"C", "H", "N", "O"})
        system = FormulaSystem(chno)
        # glycine, C2H5NO2: 24 + 5 + 14 + 32
        solutions = Query().find_all(system.build_constraint_over_ints(75))
        glycine = frozenset({Var("C"): 2, Var("H"): 5, Var("N"): 1, Var("O"): 2}.items())
        assert glycine in solutions


# =============================================================================
# SERIALIZATION
# =============================================================================

class TestFormatFormula:

    def test_zero_counts_omitted(self, system):
        assert system.format_formula({Var("C"): 6, Var("N"): 0, Var("O"): 2}) == "C6O2"

    def test_count_of_one_keeps_digit(self, system):
        assert system.format_formula({Var("C"): 5, Var("N"): 2, Var("O"): 1}) == "C5N2O1"

    def test_all_zero(self, system):
        assert system.format_formula({Var("C"): 0, Var("N"): 0, Var("O"): 0}) == ""

    def test_accepts_find_all_output(self, system):
        solutions = Query().find_all(system.build_constraint_over_ints(104))
        assert sorted(system.format_formula(s) for s in solutions) == sorted(
            ["C6O2", "C5N2O1", "C1N2O4", "C2O5", "C4N4", "N4O3"])

    def test_to_formula_and_composition(self, system):
        assignment = {Var("C"): 6, Var("N"): 0, Var("O"): 2}
        formula = system.to_formula(assignment)
        assert {a.symbol: n for a, n in formula.items()} == {"C": 6, "O": 2}
        assert system.to_composition(assignment).reduced_formula == "C3O"
