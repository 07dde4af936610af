"""
The union-find store at the heart of TIP type inference.

Every operand (a type, or the type of some expression) gets a small integer
by way of an equivalence classifier over its structural key.
Equivalence classes of those integers carry an optional type payload at the root.

A union that would join two classes with incompatible payloads is refused,
and the store is left exactly as it was.
"""
from typing import Optional
from boozetools.support.foundation import EquivalenceClassifier
from .algebra import (
	TipType, PointerType, FunctionType, RecordType,
	TypeVariable, RecursiveType, Deferred, Render,
)

def payload_of(operand:TipType) -> Optional[TipType]:
	""" What a freshly-registered operand knows about its own type. """
	if isinstance(operand, Deferred):
		if operand.is_type_variable(): return TypeVariable(operand.expr.name)
		else: return None
	return operand

def is_unknown(t:Optional[TipType]) -> bool:
	return t is None or isinstance(t, TypeVariable)

def _catalog_key(operand:TipType, salt=None) -> tuple:
	""" A salt only matters to expressions lacking an identity of their own. """
	key = operand.key()
	if salt is not None and isinstance(operand, Deferred) and operand.expr.wants_salt():
		key += (salt,)
	return key

class UnionFind:
	def __init__(self):
		self._catalog = EquivalenceClassifier()
		self._operand = {}
		self._parent = {}
		self._rank = {}
		self._payload = {}

	def ident(self, operand:TipType, salt=None) -> int:
		""" The canonical number for an operand. """
		return self._catalog.classify(_catalog_key(operand, salt))

	def lookup(self, operand:TipType) -> Optional[int]:
		"""
		The root of an operand's class, or None if the store has never seen it.
		Leaves the store exactly as it was.
		"""
		uid = self._catalog.catalog.get(_catalog_key(operand))
		if uid is None or uid not in self._parent: return None
		return self._root(uid)

	def register(self, operand:TipType, salt=None) -> int:
		uid = self.ident(operand, salt)
		if uid not in self._parent:
			self.make_set(uid, payload_of(operand))
			self._operand[uid] = operand
		return uid

	def make_set(self, uid:int, typ:Optional[TipType]=None):
		self._parent[uid] = uid
		self._rank[uid] = 0
		self._payload[uid] = typ

	def parent(self, uid:int) -> int:
		return self._parent[uid]

	def find(self, uid:int) -> int:
		if uid not in self._parent:
			self.make_set(uid)
		root = self._root(uid)
		while uid != root:
			step = self._parent[uid]
			self._parent[uid] = root
			uid = step
		return root

	def _root(self, uid:int) -> int:
		""" Find without compression, and without creating anything. """
		if uid not in self._parent: return uid
		while self._parent[uid] != uid:
			uid = self._parent[uid]
		return uid

	def union(self, id1:int, id2:int) -> bool:
		r1, r2 = self.find(id1), self.find(id2)
		if r1 == r2: return True
		t1, t2 = self._payload[r1], self._payload[r2]
		if not (is_unknown(t1) or is_unknown(t2) or self.is_compatible(t1, t2)):
			return False
		if self._rank[r1] < self._rank[r2]:
			r1, r2 = r2, r1
		self._parent[r2] = r1
		if self._rank[r1] == self._rank[r2]:
			self._rank[r1] += 1
		self._payload[r1] = self._more_specific(t1, t2)
		return True

	def _more_specific(self, t1, t2):
		if is_unknown(t1) and not is_unknown(t2): return t2
		if is_unknown(t2): return t1 if t1 is not None else t2
		if isinstance(t1, FunctionType) and isinstance(t2, RecursiveType): return t2
		if isinstance(t1, PointerType) and isinstance(t2, PointerType):
			if self._pointer_is_vague(t1) and not self._pointer_is_vague(t2): return t2
		if isinstance(t1, RecordType) and isinstance(t2, RecordType):
			if len(t2.fields) > len(t1.fields): return t2
		return t1

	def _pointer_is_vague(self, p:PointerType) -> bool:
		return p.target is None or self.mentions_variable(p.target)

	def get_type(self, uid:int) -> Optional[TipType]:
		return self._payload[self.find(uid)]

	def type_of(self, operand:TipType) -> Optional[TipType]:
		root = self.lookup(operand)
		return None if root is None else self._payload[root]

	def local_type(self, uid:int) -> Optional[TipType]:
		""" The payload as recorded at this very id, which is stale except at a root. """
		return self._payload.get(uid)

	def refine(self, uid:int, typ:TipType):
		""" Fill in a type for a class that has none, or only a type variable. """
		root = self.find(uid)
		if is_unknown(self._payload[root]):
			self._payload[root] = typ

	def resolve(self, t:Optional[TipType]) -> Optional[TipType]:
		""" Look through a deferred operand to whatever its class knows. Pure. """
		if isinstance(t, Deferred):
			root = self.lookup(t)
			known = None if root is None else self._payload[root]
			if known is None and t.is_type_variable(): return TypeVariable(t.expr.name)
			return known
		return t

	def all_groups(self) -> dict[int, list[int]]:
		groups = {}
		for uid in self._parent:
			groups.setdefault(self.find(uid), []).append(uid)
		return groups

	def members(self, uid:int) -> list[int]:
		root = self._root(uid)
		return [m for m in self._parent if self._root(m) == root]

	def describe(self, uid:int) -> str:
		""" The operand an id was registered for, in human terms. """
		operand = self._operand.get(uid)
		if operand is None: return "#%d"%uid
		elif isinstance(operand, Deferred): return str(operand.expr)
		else: return operand.visit(Render())

	#########################

	def is_compatible(self, t1:TipType, t2:TipType) -> bool:
		""" Could these two types describe the same values? Pure predicate. """
		return self._compatible(t1, t2, set())

	def _compatible(self, t1, t2, seen:set) -> bool:
		if isinstance(t1, Deferred) or isinstance(t2, Deferred):
			pair = (t1.key(), t2.key())
			if pair in seen: return True
			seen.add(pair)
			t1, t2 = self.resolve(t1), self.resolve(t2)
			if is_unknown(t1) or is_unknown(t2): return True
			return self._compatible(t1, t2, seen)
		tags = {t1.tag, t2.tag}
		if tags == {"pointer", "int"}: return False
		if isinstance(t1, RecursiveType) and isinstance(t2, FunctionType):
			return self._compatible(t1.body, t2, seen)
		if isinstance(t2, RecursiveType) and isinstance(t1, FunctionType):
			return self._compatible(t1, t2.body, seen)
		if len(tags) > 1: return False
		if isinstance(t1, PointerType):
			if self._pointer_is_vague(t1) or self._pointer_is_vague(t2): return True
			return self._compatible(t1.target, t2.target, seen)
		if isinstance(t1, FunctionType):
			if len(t1.params) != len(t2.params): return False
			if not all(self._compatible(a, b, seen) for a, b in zip(t1.params, t2.params)): return False
			if t1.result is None or t2.result is None: return True
			return self._compatible(t1.result, t2.result, seen)
		if isinstance(t1, RecordType):
			# Either may be a subtype of the other, but shared fields must agree.
			if not (t1.names() <= t2.names() or t2.names() <= t1.names()): return False
			return all(self._compatible(t1.field(n), t2.field(n), seen) for n in t1.names() & t2.names())
		if isinstance(t1, RecursiveType):
			return t1.variable == t2.variable and self._compatible(t1.body, t2.body, seen)
		# int with int, or variable with variable
		return True

	def mentions_variable(self, t:Optional[TipType]) -> bool:
		""" Does a type hold an unresolved type variable anywhere inside? """
		return self._mentions(t, set())

	def _mentions(self, t, seen:set) -> bool:
		if t is None: return False
		if isinstance(t, TypeVariable): return True
		if isinstance(t, Deferred):
			if t.is_type_variable(): return True
			root = self.lookup(t)
			if root is None: return True
			if root in seen: return False
			seen.add(root)
			known = self._payload.get(root)
			return known is None or self._mentions(known, seen)
		if isinstance(t, PointerType): return self._mentions(t.target, seen)
		if isinstance(t, FunctionType):
			return any(self._mentions(p, seen) for p in t.params) or self._mentions(t.result, seen)
		if isinstance(t, RecordType): return any(self._mentions(f, seen) for _, f in t.fields)
		if isinstance(t, RecursiveType): return self._mentions(t.body, seen)
		return False

	#########################
	# Best-effort lookups, for diagnostics only.

	def find_connected_type(self, operand:TipType) -> Optional[TipType]:
		""" Any concrete type recorded among the members of an operand's class. """
		root = self.lookup(operand)
		if root is None: return None
		for member in self.members(root):
			t = self._payload.get(member)
			if not is_unknown(t): return t
		return self._payload[root]

	def find_type_by_pattern(self, text:str) -> Optional[TipType]:
		""" The type of the first registered operand whose description mentions the text. """
		for uid in self._operand:
			if text in self.describe(uid):
				t = self.get_type(uid)
				if t is not None: return t
		return None
