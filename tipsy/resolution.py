"""
Name resolution for TIP programs.
By the time this pass is finished, every variable knows whether it is local to some function,
and every function has a symbol table of its parameters and locals.
Anything not in a function's symbol table is global, which in TIP means a function name.
"""
from boozetools.support.foundation import Visitor
from . import syntax

class TopDown(Visitor):
	"""
	Convenience base-class to handle the dreary bits of a
	perfectly ordinary top-down walk through a syntax tree.
	Subclasses override just the bits they care about.
	"""

	def visit_Program(self, program:syntax.Program, env):
		for fn in program.functions:
			self.visit(fn, env)

	def visit_Function(self, fn:syntax.Function, env):
		self.walk_block(fn.body, env)
		self.visit(fn.result, env)

	def walk_block(self, block, env):
		for stmt in block:
			self.visit(stmt, env)

	def visit_Assign(self, stmt:syntax.Assign, env):
		self.visit(stmt.target, env)
		self.visit(stmt.expr, env)

	def visit_Output(self, stmt:syntax.Output, env): self.visit(stmt.expr, env)
	def visit_Return(self, stmt:syntax.Return, env): self.visit(stmt.expr, env)

	def visit_If(self, stmt:syntax.If, env):
		self.visit(stmt.condition, env)
		self.walk_block(stmt.then_part, env)
		self.walk_block(stmt.else_part, env)

	def visit_While(self, stmt:syntax.While, env):
		self.visit(stmt.condition, env)
		self.walk_block(stmt.body, env)

	def visit_StorePointer(self, stmt:syntax.StorePointer, env):
		self.visit(stmt.pointer, env)
		self.visit(stmt.value, env)

	def visit_StoreField(self, stmt:syntax.StoreField, env):
		self.visit(stmt.record, env)
		self.visit(stmt.value, env)

	def visit_NumberLiteral(self, expr, env): pass
	def visit_InputExpression(self, expr, env): pass
	def visit_NullLiteral(self, expr, env): pass
	def visit_Variable(self, expr, env): pass

	def visit_BinaryExpression(self, expr:syntax.BinaryExpression, env):
		self.visit(expr.lhs, env)
		self.visit(expr.rhs, env)

	def visit_AllocExpression(self, expr:syntax.AllocExpression, env): self.visit(expr.expr, env)
	def visit_Dereference(self, expr:syntax.Dereference, env): self.visit(expr.expr, env)
	def visit_AddressOf(self, expr:syntax.AddressOf, env): self.visit(expr.target, env)
	def visit_FieldAccess(self, expr:syntax.FieldAccess, env): self.visit(expr.record, env)

	def visit_RecordLiteral(self, expr:syntax.RecordLiteral, env):
		for field in expr.fields:
			self.visit(field.value, env)

	def visit_Call(self, expr:syntax.Call, env):
		for arg in expr.args:
			self.visit(arg, env)
		self.visit(expr.callee, env)

class ScopeResolver(TopDown):
	""" Gives each function its symbol table, and each variable its scope. """

	def visit_Function(self, fn:syntax.Function, env):
		table = {}
		for name in fn.params + fn.locals:
			if name not in table:
				table[name] = var = syntax.Variable(name)
				var.scope = fn.name
		fn.symbols = table
		super().visit_Function(fn, table)

	def visit_Variable(self, expr:syntax.Variable, env):
		if expr.name in env:
			expr.scope = env[expr.name].scope
		else:
			expr.scope = None

def resolve_scopes(program:syntax.Program):
	ScopeResolver().visit(program, None)
