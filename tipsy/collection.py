"""
Walk a resolved TIP program and write down what must be true of its types.

Each constraint says: the operands on the left must unify with the operands on the right,
pairwise, with the shorter side cycling. The origin is the syntax node responsible,
which is what diagnostics will talk about.
"""
from typing import NamedTuple, Any
from . import syntax
from .algebra import (
	TipType, INT, PointerType, FunctionType, RecordType, RecursiveType,
	Deferred, TypeVariableGenerator,
)
from .resolution import TopDown

class Constraint(NamedTuple):
	origin: Any
	left: tuple[TipType, ...]
	right: tuple[TipType, ...]

	def pairs(self):
		if not (self.left and self.right): return
		for i in range(max(len(self.left), len(self.right))):
			yield self.left[i % len(self.left)], self.right[i % len(self.right)]

	def kind(self) -> str: return type(self.origin).__name__

	def __str__(self):
		return "%s: [%s] ~ [%s]"%(
			self.kind(),
			", ".join(map(repr, self.left)),
			", ".join(map(repr, self.right)),
		)

def D(expr:syntax.Expression) -> Deferred: return Deferred(expr)

def result_slot(fn:syntax.Function) -> syntax.Variable:
	""" Where a recursive function's own calls find their result type. """
	slot = syntax.Variable("result")
	slot.scope = fn.name+"#"
	return slot

class _RecursionFinder(TopDown):
	def __init__(self, name:str):
		self.name = name
		self.found = False
	def visit_Call(self, expr:syntax.Call, env):
		if isinstance(expr.callee, syntax.Variable) and expr.callee.name == self.name:
			self.found = True
		super().visit_Call(expr, env)

def is_recursive(fn:syntax.Function) -> bool:
	""" Does the function call itself by name, anywhere? """
	finder = _RecursionFinder(fn.name)
	finder.visit(fn, None)
	return finder.found

class _AssignmentFinder(TopDown):
	def visit_Assign(self, stmt:syntax.Assign, env):
		env.add(stmt.target.name)
	def visit_Function(self, fn, env):
		self.walk_block(fn.body, env)
	def visit_Output(self, stmt, env): pass
	def visit_Return(self, stmt, env): pass
	def visit_StorePointer(self, stmt, env): pass
	def visit_StoreField(self, stmt, env): pass
	def visit_If(self, stmt, env):
		self.walk_block(stmt.then_part, env)
		self.walk_block(stmt.else_part, env)
	def visit_While(self, stmt, env):
		self.walk_block(stmt.body, env)

def assigned_names(fn:syntax.Function) -> set[str]:
	""" Names given a value by plain assignment somewhere in the body, at any depth. """
	names = set()
	_AssignmentFinder().visit(fn, names)
	return names

class ConstraintCollector(TopDown):
	"""
	Expressions are visited before the constraints that mention them,
	so that null literals have their occurrence numbers before anything takes their key.
	"""
	def __init__(self):
		self._greek = TypeVariableGenerator()
		self.reset()

	def reset(self):
		self.constraints = []
		self._nr_nulls = 0
		self._greek.reset()

	def collect(self, program:syntax.Program) -> list[Constraint]:
		self.reset()
		self.visit(program, None)
		return self.constraints

	def _fresh(self) -> Deferred:
		return D(syntax.Variable(self._greek.fresh()))

	def _equate(self, origin, left, right):
		self.constraints.append(Constraint(origin, tuple(left), tuple(right)))

	def visit_Function(self, fn:syntax.Function, env):
		self.visit(fn.result, fn)
		arrow = FunctionType([D(fn.symbols[p]) for p in fn.params], D(fn.result))
		if is_recursive(fn):
			arrow = RecursiveType(self._greek.fresh(), arrow)
		self._equate(fn, [D(syntax.Variable(fn.name))], [arrow])
		assigned = assigned_names(fn)
		for name in fn.locals:
			if name not in assigned:
				self._equate(fn, [D(fn.symbols[name])], [PointerType(self._fresh())])
		self.walk_block(fn.body, fn)

	def visit_NumberLiteral(self, expr, env): self._equate(expr, [D(expr)], [INT])
	def visit_InputExpression(self, expr, env): self._equate(expr, [D(expr)], [INT])

	def visit_BinaryExpression(self, expr:syntax.BinaryExpression, env):
		super().visit_BinaryExpression(expr, env)
		if expr.op == "==":
			self._equate(expr, [D(expr.lhs), D(expr)], [D(expr.rhs), INT])
		else:
			self._equate(expr, [D(expr)], [INT])

	def visit_AllocExpression(self, expr:syntax.AllocExpression, env):
		self.visit(expr.expr, env)
		self._equate(expr, [D(expr)], [PointerType(D(expr.expr))])

	def visit_AddressOf(self, expr:syntax.AddressOf, env):
		self._equate(expr, [D(expr)], [PointerType(D(expr.target))])

	def visit_NullLiteral(self, expr:syntax.NullLiteral, env):
		self._nr_nulls += 1
		expr.occurrence = self._nr_nulls
		self._equate(expr, [D(expr)], [PointerType(self._fresh())])

	def visit_Call(self, expr:syntax.Call, env):
		super().visit_Call(expr, env)
		callee = expr.callee
		if isinstance(callee, syntax.Variable) and callee.name == env.name:
			right = D(result_slot(env))
		else:
			right = self._fresh()
		self._equate(expr, [D(expr)], [right])

	def visit_RecordLiteral(self, expr:syntax.RecordLiteral, env):
		super().visit_RecordLiteral(expr, env)
		self._equate(expr, [D(expr)], [RecordType([(f.name, D(f.value)) for f in expr.fields])])

	def visit_FieldAccess(self, expr:syntax.FieldAccess, env):
		self.visit(expr.record, env)
		self._equate(expr, [D(expr)], [self._fresh()])

	def visit_Assign(self, stmt:syntax.Assign, env):
		self.visit(stmt.expr, env)
		self._equate(stmt, [D(stmt.target)], [D(stmt.expr)])

	def visit_Output(self, stmt:syntax.Output, env):
		self.visit(stmt.expr, env)
		self._equate(stmt, [D(stmt.expr)], [INT])

	def visit_If(self, stmt:syntax.If, env):
		self.visit(stmt.condition, env)
		self._equate(stmt, [D(stmt.condition)], [INT])
		self.walk_block(stmt.then_part, env)
		self.walk_block(stmt.else_part, env)

	def visit_While(self, stmt:syntax.While, env):
		self.visit(stmt.condition, env)
		self._equate(stmt, [D(stmt.condition)], [INT])
		self.walk_block(stmt.body, env)

	def visit_StorePointer(self, stmt:syntax.StorePointer, env):
		super().visit_StorePointer(stmt, env)
		self._equate(stmt, [D(syntax.Dereference(stmt.pointer))], [D(stmt.value)])

	def visit_Return(self, stmt:syntax.Return, env):
		self.visit(stmt.expr, env)
		self._equate(stmt, [D(stmt.expr)], [D(env.result)])
