"""
The algebra of TIP types.

These are value objects: two types with the same structure are equal and hash alike,
which lets the union-find store number them with an equivalence classifier.

Design Note:
-------------
A Deferred type stands for "the type of expression E", whatever that turns out to be.
It is how a constraint refers to a program fragment, and how a compound type
(such as a pointer to the type of x) refers to the type of something else.
"""
import re
from typing import Optional, Sequence
from . import syntax

GREEK = "αβγδεζηθικλμνξοπρστυφχψω"
_GREEK_NAME = re.compile(r"[α-ω]\d*")

def is_type_variable_name(name:str) -> bool:
	return bool(_GREEK_NAME.fullmatch(name))

class TipType:
	tag: str
	def __init__(self, *detail):
		self._key = (self.tag,) + detail
		self._hash = hash(self._key)
	def key(self) -> tuple: return self._key
	def __hash__(self): return self._hash
	def __eq__(self, other): return isinstance(other, TipType) and self._key == other._key
	def visit(self, visitor): raise NotImplementedError(type(self))
	def __repr__(self): return self.visit(Render())

def _key_of(t:Optional[TipType]):
	return None if t is None else t.key()

#########################

class IntType(TipType):
	tag = "int"
	def visit(self, visitor): return visitor.on_int(self)

INT = IntType()

class PointerType(TipType):
	tag = "pointer"
	def __init__(self, target:Optional[TipType]=None):
		self.target = target
		super().__init__(_key_of(target))
	def visit(self, visitor): return visitor.on_pointer(self)

class FunctionType(TipType):
	tag = "function"
	def __init__(self, params:Sequence[TipType], result:Optional[TipType]=None):
		self.params = tuple(params)
		self.result = result
		super().__init__(tuple(p.key() for p in self.params), _key_of(result))
	def visit(self, visitor): return visitor.on_function(self)

class RecordType(TipType):
	""" Field order is for display only. Identity goes by name. """
	tag = "record"
	def __init__(self, fields:Sequence[tuple[str, TipType]]):
		self.fields = tuple(fields)
		self._by_name = dict(self.fields)
		assert len(self._by_name) == len(self.fields), "Duplicate field name"
		super().__init__(tuple(sorted((name, t.key()) for name, t in self.fields)))
	def visit(self, visitor): return visitor.on_record(self)
	def field(self, name:str) -> Optional[TipType]: return self._by_name.get(name)
	def names(self) -> set[str]: return set(self._by_name)

class TypeVariable(TipType):
	tag = "typevar"
	def __init__(self, name:str):
		self.name = name
		super().__init__(name)
	def visit(self, visitor): return visitor.on_variable(self)

class RecursiveType(TipType):
	""" μα.function(...) for a function which calls itself. """
	tag = "recursive"
	def __init__(self, variable:str, body:FunctionType):
		assert isinstance(body, FunctionType)
		self.variable, self.body = variable, body
		super().__init__(variable, body.key())
	def visit(self, visitor): return visitor.on_recursive(self)

class Deferred(TipType):
	tag = "deferred"
	def __init__(self, expr:syntax.Expression):
		self.expr = expr
		super().__init__(expr.key())
	def visit(self, visitor): return visitor.on_deferred(self)
	def is_type_variable(self) -> bool:
		return isinstance(self.expr, syntax.Variable) and is_type_variable_name(self.expr.name)

#########################

class TypeVisitor:
	def on_int(self, t:IntType): raise NotImplementedError(type(self))
	def on_pointer(self, t:PointerType): raise NotImplementedError(type(self))
	def on_function(self, t:FunctionType): raise NotImplementedError(type(self))
	def on_record(self, t:RecordType): raise NotImplementedError(type(self))
	def on_variable(self, t:TypeVariable): raise NotImplementedError(type(self))
	def on_recursive(self, t:RecursiveType): raise NotImplementedError(type(self))
	def on_deferred(self, t:Deferred): raise NotImplementedError(type(self))

#########################

class Render(TypeVisitor):
	"""
	Return a string representation of the type, without consulting any store.
	Deferred types show up as the expression they stand for, in brackets.
	"""
	def on_int(self, t): return "int"
	def on_pointer(self, t):
		return "pointer(%s)"%("?" if t.target is None else t.target.visit(self))
	def on_function(self, t):
		result = "?" if t.result is None else t.result.visit(self)
		return "function(%s) -> %s"%(", ".join(p.visit(self) for p in t.params), result)
	def on_record(self, t):
		return "{%s}"%", ".join("%s: %s"%(name, f.visit(self)) for name, f in t.fields)
	def on_variable(self, t): return t.name
	def on_recursive(self, t): return "μ%s.%s"%(t.variable, t.body.visit(self))
	def on_deferred(self, t):
		if t.is_type_variable(): return t.expr.name
		return "⟦%s⟧"%t.expr

#########################

class TypeVariableGenerator:
	""" Hands out α, β, γ, ... ω, then α1, β1, and so on. Reset once per run. """
	def __init__(self):
		self.reset()
	def reset(self):
		self._count = 0
	def fresh(self) -> str:
		cycle, letter = divmod(self._count, len(GREEK))
		self._count += 1
		return GREEK[letter] + (str(cycle) if cycle else "")
