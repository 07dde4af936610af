"""
Phase B of solving: with the store settled, look for structural misuse it could not catch.
Each check walks the constraint list on its own and reports everything it finds.
Anything whose type is still unknown gets the benefit of the doubt.
"""
from typing import Optional
from . import syntax
from .algebra import TipType, PointerType, FunctionType, RecursiveType, Deferred
from .collection import Constraint
from .diagnostics import Report
from .query import StoreRender
from .solver import declarations
from .unification import UnionFind, is_unknown

# Calls to these names, when the program does not define them,
# must pass arguments with the given shape.
BUILT_IN_SIGNATURES = {
	"add": "int",
}

def shape(t:Optional[TipType]) -> Optional[str]:
	""" The outermost constructor of a type, for shallow comparison. """
	if is_unknown(t): return None
	if isinstance(t, RecursiveType): return "function"
	return t.tag

class TypeValidator:
	def __init__(self, store:UnionFind, report:Report):
		self._store = store
		self._report = report
		self._render = StoreRender(store)

	def validate(self, constraints:list[Constraint]):
		self._report.info("Validating")
		self._check_dereferences(constraints)
		self._check_pointer_stores(constraints)
		self._check_allocations(constraints)
		self._check_arithmetic(constraints)
		self._check_calls(constraints)
		self._check_variables(constraints)

	def _type(self, expr:syntax.Expression) -> Optional[TipType]:
		return self._store.type_of(Deferred(expr))

	def _check_dereferences(self, constraints):
		for c in constraints:
			origin = c.origin
			if isinstance(origin, syntax.Assign):
				suspects = [r.expr for r in c.right if isinstance(r, Deferred)]
			elif isinstance(origin, syntax.Function) and isinstance(c.right[0], (FunctionType, RecursiveType)):
				suspects = [origin.result]
			elif isinstance(origin, syntax.Return):
				suspects = [origin.expr]
			else:
				continue
			for expr in suspects:
				if isinstance(expr, syntax.Dereference):
					self._check_dereference(origin, expr)

	def _check_dereference(self, origin, deref:syntax.Dereference):
		inner = deref.expr
		if isinstance(inner, syntax.Dereference):
			# Twice over: the innermost operand must point to a pointer.
			outer_type = self._type(inner.expr)
			if shape(outer_type) not in (None, "pointer"):
				self._report.dereference_of_non_pointer(origin, inner.expr, self._render(outer_type))
				return
			if isinstance(outer_type, PointerType):
				target = self._store.resolve(outer_type.target)
				if shape(target) not in (None, "pointer"):
					self._report.dereference_of_non_pointer(origin, inner, self._render(target))
		else:
			got = self._type(inner)
			if shape(got) not in (None, "pointer"):
				self._report.dereference_of_non_pointer(origin, inner, self._render(got))

	def _check_pointer_stores(self, constraints):
		for c in constraints:
			store = c.origin
			if not isinstance(store, syntax.StorePointer): continue
			pointer_type = self._type(store.pointer)
			if not isinstance(pointer_type, PointerType): continue
			need = self._store.resolve(pointer_type.target)
			got = self._type(store.value)
			if None not in (shape(need), shape(got)) and shape(need) != shape(got):
				self._report.pointer_store_mismatch(store, store.pointer, self._render(need), self._render(got))

	def _check_allocations(self, constraints):
		for c in constraints:
			alloc = c.origin
			if isinstance(alloc, syntax.AllocExpression):
				got = self._type(alloc.expr)
				if shape(got) not in (None, "int"):
					self._report.invalid_alloc_argument(alloc, self._render(got))

	def _check_arithmetic(self, constraints):
		for c in constraints:
			binary = c.origin
			if not isinstance(binary, syntax.BinaryExpression): continue
			for operand in (binary.lhs, binary.rhs):
				got = self._operand_type(operand)
				if shape(got) not in (None, "int"):
					self._report.non_integer_operand(binary, operand, self._render(got))

	def _operand_type(self, operand:syntax.Expression) -> Optional[TipType]:
		if isinstance(operand, syntax.Call):
			callee_type = self._type(operand.callee)
			if isinstance(callee_type, RecursiveType): callee_type = callee_type.body
			if isinstance(callee_type, FunctionType) and callee_type.result is not None:
				result = self._store.resolve(callee_type.result)
				if not is_unknown(result): return result
		return self._type(operand)

	def _check_calls(self, constraints):
		decls = declarations(constraints)
		for c in constraints:
			call = c.origin
			if not isinstance(call, syntax.Call): continue
			got = self._type(call.callee)
			if shape(got) not in (None, "function"):
				self._report.not_callable(call, self._render(got))
			callee = call.callee
			if isinstance(callee, syntax.Variable) and callee.name in BUILT_IN_SIGNATURES and callee.name not in decls:
				need = BUILT_IN_SIGNATURES[callee.name]
				for position, arg in enumerate(call.args):
					arg_type = self._type(arg)
					if shape(arg_type) not in (None, need):
						self._report.bad_built_in_argument(call, position, need, self._render(arg_type))

	def _check_variables(self, constraints):
		""" Every plain assignment to a variable must agree on its outermost shape. """
		seen = {}
		for c in constraints:
			assign = c.origin
			if not isinstance(assign, syntax.Assign): continue
			tag = self._value_shape(assign.expr)
			if tag is not None:
				key = assign.target.key()
				if key not in seen: seen[key] = (assign, [])
				tags = seen[key][1]
				if tag not in tags: tags.append(tag)
		for first, tags in seen.values():
			if len(tags) > 1:
				self._report.inconsistent_variable_type(first, first.target.name, tags)

	def _value_shape(self, expr:syntax.Expression) -> Optional[str]:
		if isinstance(expr, syntax.AddressOf): return "pointer"
		if isinstance(expr, syntax.BinaryExpression): return "int"
		return shape(self._type(expr))
