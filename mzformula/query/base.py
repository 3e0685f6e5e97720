"""
Base query class that wraps the Z3 SMT solver.

Provides the core solve loop: compile the accumulated constraints, invoke
the solver, read the satisfying model back into logical variables, and
block each model found so that every solution is enumerated exactly once.
"""

import logging

import z3

from mzformula.constraint_system.common import exclusion_clause
from mzformula.constraint_system.compiler import Compiler, DEFAULT_WIDTH

log = logging.getLogger(__name__)


class SolverError(RuntimeError):
    """The backend failed or gave up; distinct from an unsatisfiable problem."""


class Query:
    """Search session over one Z3 context.

    Every constraint compiled by the session is allocated in the same
    :class:`z3.Context`; blocking clauses added by :meth:`find_all` stay in
    force for the rest of that call.  A session is not meant to be shared
    between threads.

    Args:
        context: A :class:`z3.Context`.  A fresh one is created if omitted.
        width: Bit width of the integer arithmetic.
        timeout_ms: Optional per-check solver timeout in milliseconds.  A
            check that times out raises :class:`SolverError`.

    Attributes:
        solutions: Z3 models found so far, one per satisfiable check.
    """

    def __init__(self, context=None, width=DEFAULT_WIDTH, timeout_ms=None):
        self.compiler = Compiler(context, width)
        self.timeout_ms = timeout_ms
        self.solutions = []

    @property
    def context(self):
        """z3.Context: The context every constraint is compiled into."""
        return self.compiler.context

    def _new_solver(self):
        s = z3.Solver(ctx=self.context)
        if self.timeout_ms is not None:
            s.set("timeout", self.timeout_ms)
        return s

    def get_monitored_vars(self, model, provenance):
        """Read the value of every tracked variable out of a Z3 model.

        Values are decoded as signed integers.  Variables the model leaves
        unconstrained are filled in by model completion.

        Args:
            model: A satisfying Z3 model.
            provenance: ``{z3.FuncDeclRef: Var}`` from the compiler.

        Returns:
            dict mapping :class:`Var` to ``int``.
        """
        assignment = {}
        for decl in model.decls():
            var = provenance.get(decl)
            if var is None:
                continue
            assignment[var] = model[decl].as_signed_long()

        for decl, var in provenance.items():
            if var not in assignment:
                assignment[var] = model.eval(decl(), model_completion=True).as_signed_long()
        return assignment

    def find_one(self, constraints):
        """Find one assignment satisfying every constraint.

        Args:
            constraints: Iterable of boolean constraints, read as a conjunction.

        Returns:
            dict mapping :class:`Var` to ``int``, or ``None`` when the
            constraints are unsatisfiable.

        Raises:
            SolverError: If the solver fails or returns ``unknown``.
        """
        clauses, provenance = self.compiler.compile_all(constraints)

        s = self._new_solver()
        try:
            for con in clauses:
                s.add(con)
            result = s.check()
        except z3.Z3Exception as e:
            raise SolverError(f'Z3 failed while checking {len(clauses)} constraints: {e}') from e

        if result == z3.unknown:
            raise SolverError(f'Z3 returned unknown: {s.reason_unknown()}')
        if result != z3.sat:
            return None

        model = s.model()
        self.solutions.append(model)
        return self.get_monitored_vars(model, provenance)

    def find_all(self, constraints):
        """Enumerate every assignment satisfying the constraints.

        After each solution a clause forbidding exactly that assignment is
        appended and the solver is asked again, until it reports
        unsatisfiable.  The caller's list is not modified.  Terminates only
        when every variable has a finite domain.

        Args:
            constraints: Iterable of boolean constraints.

        Returns:
            set of assignments, each a ``frozenset`` of ``(Var, int)`` pairs.
            Use :meth:`as_dict` to turn one back into a dict.

        Raises:
            SolverError: If any check fails or returns ``unknown``.
        """
        constraints = list(constraints)
        found = set()
        while True:
            solution = self.find_one(constraints)
            if solution is None:
                break
            found.add(frozenset(solution.items()))
            log.debug("Solution %d: %s", len(found), solution)
            if not solution:
                # no variables, so this empty assignment is the only one
                break
            constraints.append(exclusion_clause(solution))

        log.info("Found %d solution(s)", len(found))
        return found

    @staticmethod
    def as_dict(assignment):
        """Convert a ``frozenset`` assignment from :meth:`find_all` into a dict."""
        return dict(assignment)
