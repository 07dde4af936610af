"""
The whole business of type-checking a TIP program, start to finish.
Each run gets its own store and its own Greek letters, so runs do not interfere.
"""
from typing import NamedTuple, Optional
from . import syntax
from .collection import Constraint, ConstraintCollector
from .diagnostics import Report
from .query import TypeQuery
from .resolution import resolve_scopes
from .solver import ConstraintSolver
from .unification import UnionFind
from .validation import TypeValidator

class Outcome(NamedTuple):
	constraints: list[Constraint]
	store: UnionFind
	errors: list[str]

	def query(self, depth_limit:Optional[int]=None) -> TypeQuery:
		return TypeQuery(self.store, depth_limit)

class TypeChecker:
	def __init__(self, report:Report):
		self._report = report
		self._collector = ConstraintCollector()

	def check_program(self, program:syntax.Program) -> Outcome:
		report = self._report
		before = len(report.issues)
		report.info("Resolving names in %d function(s)"%len(program.functions))
		resolve_scopes(program)
		constraints = self._collector.collect(program)
		report.info("Collected %d constraints"%len(constraints))
		store = UnionFind()
		ConstraintSolver(store, report).solve(constraints)
		TypeValidator(store, report).validate(constraints)
		errors = [str(i) for i in report.issues[before:]]
		report.info("Found %d type error(s)"%len(errors))
		return Outcome(constraints, store, errors)

def infer_types(program:syntax.Program, report:Optional[Report]=None) -> Outcome:
	if report is None: report = Report()
	return TypeChecker(report).check_program(program)
