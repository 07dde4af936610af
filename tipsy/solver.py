"""
Phase A of solving: get every operand into the store, unify what the constraints say,
then make the connections the constraints alone cannot express:
calls to returns, arguments to parameters, and field accesses to record fields.
"""
from typing import Optional
from . import syntax
from .algebra import INT, FunctionType, RecursiveType, RecordType, Deferred
from .collection import Constraint
from .diagnostics import Report
from .query import StoreRender
from .unification import UnionFind, is_unknown

def salt_for(index:int, c:Constraint) -> Optional[int]:
	# Assignments never salt: the assigned variable must land in its one true class.
	return None if isinstance(c.origin, syntax.Assign) else index

def declarations(constraints) -> dict[str, syntax.Function]:
	""" Functions by name, according to their declaration constraints. """
	found = {}
	for c in constraints:
		if isinstance(c.origin, syntax.Function) and isinstance(c.right[0], (FunctionType, RecursiveType)):
			found.setdefault(c.origin.name, c.origin)
	return found

def declared_callee(call:syntax.Call, decls) -> Optional[syntax.Function]:
	callee = call.callee
	if isinstance(callee, syntax.Variable) and callee.scope is None:
		return decls.get(callee.name)

class ConstraintSolver:
	def __init__(self, store:UnionFind, report:Report):
		self._store = store
		self._report = report
		self._render = StoreRender(store)

	def solve(self, constraints:list[Constraint]):
		info = self._report.info
		info("Registering operands of %d constraints"%len(constraints))
		self._register(constraints)
		info("Unifying")
		self._unify(constraints)
		decls = declarations(constraints)
		calls = [c.origin for c in constraints if isinstance(c.origin, syntax.Call)]
		info("Linking %d call sites to %d functions"%(len(calls), len(decls)))
		self._link_results(calls, decls)
		self._link_arguments(calls, decls)
		accesses = [c for c in constraints if isinstance(c.origin, syntax.FieldAccess)]
		info("Linking %d field accesses"%len(accesses))
		self._link_fields(constraints, accesses)
		self._settle_fields(accesses)

	def _register(self, constraints):
		for index, c in enumerate(constraints):
			salt = salt_for(index, c)
			for operand in c.left + c.right:
				self._store.register(operand, salt)

	def _unify(self, constraints):
		for index, c in enumerate(constraints):
			salt = salt_for(index, c)
			for left, right in c.pairs():
				self._join(c.origin, self._store.ident(left, salt), self._store.ident(right, salt))

	def _join(self, origin, id1:int, id2:int) -> bool:
		store = self._store
		if store.union(id1, id2): return True
		self._report.unification_conflict(
			origin,
			store.describe(id1), self._render(store.get_type(id1)),
			store.describe(id2), self._render(store.get_type(id2)),
		)
		return False

	def _expr(self, expr:syntax.Expression) -> int:
		return self._store.register(Deferred(expr))

	def _link_results(self, calls, decls):
		""" A call has the type of its callee's return expression. """
		for call in calls:
			fn = declared_callee(call, decls)
			if fn is not None:
				self._join(call, self._expr(call), self._expr(fn.result))

	def _link_arguments(self, calls, decls):
		store = self._store
		for call in calls:
			fn = declared_callee(call, decls)
			if fn is None: continue
			if len(fn.params) != len(call.args):
				self._report.arity_mismatch(call, len(fn.params), len(call.args))
			for position, (name, arg) in enumerate(zip(fn.params, call.args)):
				param_id, arg_id = self._expr(fn.symbols[name]), self._expr(arg)
				if not store.union(param_id, arg_id):
					self._report.argument_type_mismatch(
						call, position, name,
						self._render(store.get_type(param_id)),
						self._render(store.get_type(arg_id)),
					)

	def _link_fields(self, constraints, accesses):
		bindings = {}
		for c in constraints:
			origin = c.origin
			if isinstance(origin, syntax.Assign) and isinstance(origin.expr, syntax.RecordLiteral):
				bindings.setdefault(origin.target.key(), []).append(origin.expr)
		for c in accesses:
			self._link_field(c.origin, bindings)

	def _link_field(self, access:syntax.FieldAccess, bindings):
		if isinstance(access.record, syntax.Variable):
			# Directly through a record literal assigned to the variable.
			for literal in bindings.get(access.record.key(), ()):
				fields = literal.field_map()
				if access.name in fields:
					self._join(access, self._expr(access), self._expr(fields[access.name]))
					return
		record_type = self._store.type_of(Deferred(access.record))
		if isinstance(record_type, RecordType):
			field = record_type.field(access.name)
			if field is None:
				self._report.record_lacks_field(access, self._render(record_type))
				return
			field_id = self._store.register(field)
			if self._join(access, self._expr(access), field_id):
				if self._store.get_type(field_id) is None and _is_number(field):
					self._store.refine(field_id, INT)
		elif not is_unknown(record_type):
			self._report.type_has_no_fields(access, self._render(record_type))

	def _settle_fields(self, accesses):
		""" Pin down any field access still typed only by a variable. """
		store = self._store
		for c in accesses:
			access = c.origin
			record_type = store.type_of(Deferred(access.record))
			if not isinstance(record_type, RecordType): continue
			field = record_type.field(access.name)
			if field is None: continue
			field_type = INT if _is_number(field) else store.resolve(field)
			if is_unknown(field_type): continue
			store.refine(self._expr(access), field_type)
			for operand in c.right:
				store.refine(store.ident(operand), field_type)

def _is_number(t) -> bool:
	return isinstance(t, Deferred) and isinstance(t.expr, syntax.NumberLiteral)
