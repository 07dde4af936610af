"""
Reads TIP programs in the JSON AST interchange format,
which is what the usual TIP parser emits:

	{"type": "Program", "functions": [{"type": "FunctionDeclaration", ...}, ...]}

That format sometimes wraps lists in further lists; those get flattened here.
A parser result of the form {"success": true, "ast": {...}} is also accepted.
"""
import json
from pathlib import Path
from . import syntax

class MalformedAST(ValueError):
	""" The input does not have the shape of a TIP syntax tree. """

def _flat(items) -> list:
	if items is None: return []
	if not isinstance(items, list): raise MalformedAST("Expected a list, got %r"%(items,))
	found = []
	for item in items:
		if isinstance(item, list): found.extend(_flat(item))
		else: found.append(item)
	return found

def _need(node:dict, field:str):
	try: return node[field]
	except KeyError: raise MalformedAST("%s lacks '%s'"%(node.get("type", "node"), field)) from None

class _Reader:
	def node(self, node):
		if not isinstance(node, dict): raise MalformedAST("Expected a node, got %r"%(node,))
		kind = node.get("type")
		method = getattr(self, "read_%s"%kind, None)
		if method is None: raise MalformedAST("No such node type as %r"%(kind,))
		return method(node)

	def block(self, items):
		return [self.node(n) for n in _flat(items)]

	def read_Program(self, n):
		return syntax.Program(self.block(_need(n, "functions")))

	def read_FunctionDeclaration(self, n):
		return syntax.Function(
			_need(n, "name"),
			_flat(n.get("parameters")),
			_flat(n.get("localVariables")),
			self.block(n.get("body")),
			self.node(_need(n, "returnExpression")),
		)

	def read_AssignmentStatement(self, n):
		return syntax.Assign(_need(n, "variable"), self.node(_need(n, "expression")))
	def read_OutputStatement(self, n):
		return syntax.Output(self.node(_need(n, "expression")))
	def read_ReturnStatement(self, n):
		return syntax.Return(self.node(_need(n, "expression")))
	def read_IfStatement(self, n):
		return syntax.If(self.node(_need(n, "condition")), self.block(n.get("thenStatement")), self.block(n.get("elseStatement")))
	def read_WhileStatement(self, n):
		return syntax.While(self.node(_need(n, "condition")), self.block(n.get("body")))
	def read_PointerAssignmentStatement(self, n):
		return syntax.StorePointer(self.node(_need(n, "pointer")), self.node(_need(n, "value")))
	def read_PropertyAssignmentStatement(self, n):
		return syntax.StoreField(self.node(_need(n, "object")), _need(n, "property"), self.node(_need(n, "value")))
	def read_DirectPropertyAssignmentStatement(self, n):
		return syntax.StoreField(syntax.Variable(_need(n, "object")), _need(n, "property"), self.node(_need(n, "value")))

	def read_NumberLiteral(self, n): return syntax.NumberLiteral(_need(n, "value"))
	def read_Variable(self, n): return syntax.Variable(_need(n, "name"))
	def read_InputExpression(self, n): return syntax.InputExpression()
	def read_NullLiteral(self, n): return syntax.NullLiteral()
	def read_BinaryExpression(self, n):
		return syntax.BinaryExpression(_need(n, "operator"), self.node(_need(n, "left")), self.node(_need(n, "right")))
	def read_AllocExpression(self, n): return syntax.AllocExpression(self.node(_need(n, "expression")))
	def read_AddressExpression(self, n): return syntax.AddressOf(_need(n, "variable"))
	def read_DereferenceExpression(self, n): return syntax.Dereference(self.node(_need(n, "expression")))
	def read_PropertyAccess(self, n): return syntax.FieldAccess(self.node(_need(n, "object")), _need(n, "property"))
	def read_FunctionCall(self, n):
		return syntax.Call(self.node(_need(n, "callee")), self.block(n.get("arguments")))

	def read_ObjectLiteral(self, n):
		fields = [(_need(p, "key"), self.node(_need(p, "value"))) for p in _flat(n.get("properties"))]
		names = [name for name, _ in fields]
		for name in names:
			if names.count(name) > 1: raise MalformedAST("Record literal repeats the field %r"%name)
		return syntax.RecordLiteral(fields)

	def read_UnaryExpression(self, n):
		op, operand = _need(n, "operator"), self.node(_need(n, "operand"))
		if op == "*": return syntax.Dereference(operand)
		if op == "&" and isinstance(operand, syntax.Variable): return syntax.AddressOf(operand.name)
		raise MalformedAST("Cannot apply unary %r to %s"%(op, operand))

def program_from_json(data) -> syntax.Program:
	if isinstance(data, dict) and "type" not in data and "ast" in data:
		data = data["ast"]
	program = _Reader().node(data)
	if not isinstance(program, syntax.Program): raise MalformedAST("Expected a Program at top level.")
	return program

def load_program(path) -> syntax.Program:
	with open(Path(path), "r", encoding="utf-8") as fh:
		return program_from_json(json.load(fh))
