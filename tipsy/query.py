"""
Ask the store what it worked out, and say it in words.
"""
from typing import Optional
from . import syntax
from .algebra import TipType, TypeVisitor, TypeVariable, Deferred
from .unification import UnionFind, is_unknown

class StoreRender(TypeVisitor):
	"""
	Like algebra.Render, but looks through deferred types to whatever the store knows.
	A class already being rendered further up is shown by reference, so cycles terminate.
	"""
	def __init__(self, store:UnionFind, depth_limit:Optional[int]=None):
		self.store = store
		self.depth_limit = depth_limit
		self.active = []

	def __call__(self, t:Optional[TipType]) -> str:
		return "?" if t is None else t.visit(self)

	def on_int(self, t): return "int"
	def on_pointer(self, t): return "pointer(%s)"%self(t.target)
	def on_function(self, t):
		return "function(%s) -> %s"%(", ".join(map(self, t.params)), self(t.result))
	def on_record(self, t):
		return "{%s}"%", ".join("%s: %s"%(name, self(f)) for name, f in t.fields)
	def on_variable(self, t): return t.name
	def on_recursive(self, t): return "μ%s.%s"%(t.variable, self(t.body))

	def on_deferred(self, t):
		root = self.store.lookup(t)
		known = self.store.resolve(t)
		if root is not None and (root in self.active or (self.depth_limit is not None and len(self.active) >= self.depth_limit)):
			# Already on the way down, so name it rather than expand it.
			return "…" if is_unknown(known) else known.tag
		if known is None: return "?"
		self.active.append(root)
		try: return known.visit(self)
		finally: self.active.pop()

class TypeQuery:
	def __init__(self, store:UnionFind, depth_limit:Optional[int]=None):
		self.store = store
		self.depth_limit = depth_limit

	def type_of(self, expr:syntax.Expression) -> Optional[TipType]:
		"""
		The type of an expression, preferring something concrete.
		If the class root says only "some type variable", look for a concrete sibling.
		"""
		root = self.store.lookup(Deferred(expr))
		if root is None: return self.store.resolve(Deferred(expr))
		typ = self.store.local_type(root)
		if isinstance(typ, TypeVariable):
			for member in self.store.members(root):
				sibling = self.store.local_type(member)
				if not is_unknown(sibling): return sibling
		return typ

	def resolve(self, t:Optional[TipType]) -> Optional[TipType]:
		return self.store.resolve(t)

	def render(self, t:Optional[TipType]) -> str:
		return StoreRender(self.store, self.depth_limit)(t)

	def describe(self, expr:syntax.Expression) -> str:
		renderer = StoreRender(self.store, self.depth_limit)
		root = self.store.lookup(Deferred(expr))
		if root is not None: renderer.active.append(root)
		return renderer(self.type_of(expr))

	def equivalence_classes(self) -> list[tuple[str, list[str]]]:
		""" Each class, as its rendered type with the things that have it. """
		return [
			(self.render(self.store.get_type(root)), [self.store.describe(m) for m in members])
			for root, members in self.store.all_groups().items()
		]

	def expression_types(self, constraints) -> dict[str, str]:
		""" The final type of each expression a constraint mentions on its left. """
		found = {}
		for c in constraints:
			for operand in c.left:
				if isinstance(operand, Deferred) and not operand.is_type_variable():
					found.setdefault(str(operand.expr), self.describe(operand.expr))
		return found
