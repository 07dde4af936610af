"""
The set of TIP syntax nodes in simple form.
The front end (or a test) calls these constructors bottom-up.
Class-level type annotations make peace with pycharm wherever later passes add fields.

Every expression can produce a structural fingerprint via key().
Two expressions with the same key denote the same thing to the type checker,
which is how (for example) every mention of a local variable lands in one equivalence class.
"""
from typing import Optional, Sequence, NamedTuple

class Expression:
	def key(self) -> tuple: raise NotImplementedError(type(self))
	def wants_salt(self) -> bool:
		""" True for an expression with no identity of its own. """
		return False
	def __repr__(self): return "<%s: %s>"%(type(self).__name__, self)

class NumberLiteral(Expression):
	def __init__(self, value:int): self.value = value
	def key(self): return "number", self.value
	def __str__(self): return str(self.value)

class Variable(Expression):
	scope: Optional[str] = None  # Set during name resolution. None means global.
	def __init__(self, name:str): self.name = name
	def key(self): return "var", self.scope, self.name
	def __str__(self): return self.name

class BinaryExpression(Expression):
	def __init__(self, op:str, lhs:Expression, rhs:Expression):
		self.op, self.lhs, self.rhs = op, lhs, rhs
	def key(self): return "binary", self.op, self.lhs.key(), self.rhs.key()
	def __str__(self): return "%s %s %s"%(_operand(self.lhs), self.op, _operand(self.rhs))

class InputExpression(Expression):
	def key(self): return "input",
	def __str__(self): return "input"

class AllocExpression(Expression):
	def __init__(self, expr:Expression): self.expr = expr
	def key(self): return "alloc", self.expr.key()
	def __str__(self): return "alloc "+_operand(self.expr)

class AddressOf(Expression):
	def __init__(self, name:str): self.target = Variable(name)
	def key(self): return "address", self.target.key()
	def __str__(self): return "&"+self.target.name

class Dereference(Expression):
	def __init__(self, expr:Expression): self.expr = expr
	def key(self): return "deref", self.expr.key()
	def __str__(self): return "*"+_operand(self.expr)

class NullLiteral(Expression):
	occurrence: Optional[int] = None  # Numbered during constraint collection.
	def key(self): return "null", self.occurrence
	def wants_salt(self): return self.occurrence is None
	def __str__(self): return "null"

class Field(NamedTuple):
	name: str
	value: Expression

class RecordLiteral(Expression):
	def __init__(self, fields:Sequence[Field]):
		self.fields = [Field(*f) for f in fields]
	def key(self): return "record", tuple((f.name, f.value.key()) for f in self.fields)
	def field_map(self) -> dict[str, Expression]:
		return {f.name: f.value for f in self.fields}
	def __str__(self): return "{%s}"%", ".join("%s: %s"%f for f in self.fields)

class FieldAccess(Expression):
	def __init__(self, record:Expression, name:str):
		self.record, self.name = record, name
	def key(self): return "field", self.record.key(), self.name
	def __str__(self): return "%s.%s"%(_operand(self.record), self.name)

class Call(Expression):
	def __init__(self, callee:Expression, args:Sequence[Expression]):
		self.callee, self.args = callee, list(args)
	def key(self): return "call", self.callee.key(), tuple(a.key() for a in self.args)
	def __str__(self): return "%s(%s)"%(_operand(self.callee), ", ".join(map(str, self.args)))

def _operand(expr:Expression) -> str:
	if isinstance(expr, (BinaryExpression, AllocExpression)): return "(%s)"%expr
	else: return str(expr)

class Statement:
	def __repr__(self): return "<%s: %s>"%(type(self).__name__, self)

class Assign(Statement):
	def __init__(self, name:str, expr:Expression):
		self.target, self.expr = Variable(name), expr
	def __str__(self): return "%s = %s"%(self.target, self.expr)

class Output(Statement):
	def __init__(self, expr:Expression): self.expr = expr
	def __str__(self): return "output %s"%self.expr

class If(Statement):
	def __init__(self, condition:Expression, then_part:Sequence[Statement], else_part:Sequence[Statement]=()):
		self.condition = condition
		self.then_part = list(then_part)
		self.else_part = list(else_part)
	def __str__(self): return "if (%s)"%self.condition

class While(Statement):
	def __init__(self, condition:Expression, body:Sequence[Statement]):
		self.condition, self.body = condition, list(body)
	def __str__(self): return "while (%s)"%self.condition

class StorePointer(Statement):
	def __init__(self, pointer:Expression, value:Expression):
		self.pointer, self.value = pointer, value
	def __str__(self): return "*%s = %s"%(_operand(self.pointer), self.value)

class StoreField(Statement):
	def __init__(self, record:Expression, name:str, value:Expression):
		self.record, self.name, self.value = record, name, value
	def __str__(self): return "%s.%s = %s"%(_operand(self.record), self.name, self.value)

class Return(Statement):
	def __init__(self, expr:Expression): self.expr = expr
	def __str__(self): return "return %s"%self.expr

class Function:
	symbols: dict[str, Variable]  # Set during name resolution.
	def __init__(self, name:str, params:Sequence[str], locals_:Sequence[str], body:Sequence[Statement], result:Expression):
		self.name = name
		self.params = list(params)
		self.locals = list(locals_)
		self.body = list(body)
		self.result = result
	def __str__(self): return "function %s(%s)"%(self.name, ", ".join(self.params))
	def __repr__(self): return "<%s>"%self

class Program:
	def __init__(self, functions:Sequence[Function]):
		self.functions = list(functions)
