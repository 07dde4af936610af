import io
import json
import tempfile
from contextlib import redirect_stdout, redirect_stderr
from pathlib import Path
import unittest

from tipsy import syntax, cmdline
from tipsy.front_end import program_from_json, load_program, MalformedAST

base_folder = Path(__file__).parent.parent
zoo_ok = base_folder/"zoo/ok"
zoo_fail = base_folder/"zoo/fail"

def _wrap(*body, result=None, locals_=("x",)):
	return {"type": "Program", "functions": [{
		"type": "FunctionDeclaration",
		"name": "main",
		"parameters": [],
		"localVariables": list(locals_),
		"body": list(body),
		"returnExpression": result or {"type": "NumberLiteral", "value": 0},
	}]}

_twice_x = {"type": "ObjectLiteral", "properties": [
	{"key": "x", "value": {"type": "NumberLiteral", "value": 1}},
	{"key": "x", "value": {"type": "NullLiteral"}},
]}

class FrontEndTests(unittest.TestCase):

	def test_load_pointers(self):
		program = load_program(zoo_ok/"pointers.json")
		[main] = program.functions
		self.assertEqual("main", main.name)
		self.assertEqual(["x", "y", "z"], main.locals)
		self.assertEqual(
			[syntax.Assign, syntax.Assign, syntax.StorePointer, syntax.Assign, syntax.Output],
			[type(s) for s in main.body],
		)
		self.assertIsInstance(main.result, syntax.Variable)

	def test_nested_lists_are_flattened(self):
		[get_x] = load_program(zoo_ok/"records.json").functions
		self.assertEqual(["p"], get_x.locals)
		record = get_x.body[0].expr
		self.assertIsInstance(record, syntax.RecordLiteral)
		self.assertEqual(["x", "y"], [f.name for f in record.fields])

	def test_parser_envelope(self):
		program = load_program(zoo_ok/"factorial.json")
		self.assertEqual(["fact", "main"], [f.name for f in program.functions])
		branch = program.functions[0].body[0]
		self.assertIsInstance(branch, syntax.If)
		self.assertEqual(1, len(branch.else_part))
		call = branch.else_part[0].expr.rhs
		self.assertIsInstance(call, syntax.Call)
		self.assertEqual("fact(n - 1)", str(call))

	def test_unary_operators(self):
		program = program_from_json(_wrap(
			{"type": "AssignmentStatement", "variable": "x", "expression": {
				"type": "UnaryExpression", "operator": "&", "operand": {"type": "Variable", "name": "x"}}},
			result={"type": "UnaryExpression", "operator": "*", "operand": {"type": "Variable", "name": "x"}},
		))
		main = program.functions[0]
		self.assertIsInstance(main.body[0].expr, syntax.AddressOf)
		self.assertIsInstance(main.result, syntax.Dereference)

	def test_property_stores(self):
		program = program_from_json(_wrap(
			{"type": "DirectPropertyAssignmentStatement", "object": "x", "property": "f", "value": {"type": "NullLiteral"}},
			{"type": "PropertyAssignmentStatement", "property": "g", "value": {"type": "InputExpression"},
				"object": {"type": "DereferenceExpression", "expression": {"type": "Variable", "name": "x"}}},
		))
		direct, indirect = program.functions[0].body
		self.assertIsInstance(direct, syntax.StoreField)
		self.assertIsInstance(direct.record, syntax.Variable)
		self.assertEqual("*x.g = input", str(indirect))

	def test_malformed_input(self):
		with self.assertRaises(MalformedAST):
			program_from_json(_wrap({"type": "GotoStatement"}))
		with self.assertRaises(MalformedAST):
			program_from_json(_wrap(result={"type": "UnaryExpression", "operator": "&", "operand": {"type": "NumberLiteral", "value": 1}}))
		with self.assertRaises(MalformedAST):
			program_from_json(_wrap({"type": "AssignmentStatement", "variable": "x"}))
		with self.assertRaises(MalformedAST):
			program_from_json({"type": "NumberLiteral", "value": 1})
		with self.assertRaises(MalformedAST):
			program_from_json(_wrap(result=_twice_x))

class CommandLineTests(unittest.TestCase):

	def _run(self, *argv):
		out, err = io.StringIO(), io.StringIO()
		with redirect_stdout(out), redirect_stderr(err):
			status = cmdline.main(list(argv))
		return status, out.getvalue(), err.getvalue()

	def test_good_program(self):
		status, out, err = self._run(str(zoo_ok/"pointers.json"), "-t", "-c", "-g")
		self.assertEqual(0, status)
		self.assertIn("z : int", out)
		self.assertIn("y : pointer(int)", out)
		self.assertIn("Constraints:", out)
		self.assertIn("Equivalence classes:", out)

	def test_bad_program(self):
		status, out, err = self._run(str(zoo_fail/"dereference_int.json"))
		self.assertEqual(1, status)
		self.assertIn("DereferenceOfNonPointer", err)

	def test_giving_up(self):
		status, out, err = self._run(str(zoo_fail/"address_of_int.json"), "--max-issues", "1")
		self.assertEqual(1, status)
		self.assertIn("Giving up", err)

	def test_repeated_field_is_unreadable(self):
		with tempfile.TemporaryDirectory() as folder:
			path = Path(folder)/"twice.json"
			path.write_text(json.dumps(_wrap(result=_twice_x)), encoding="utf-8")
			status, out, err = self._run(str(path))
		self.assertEqual(2, status)
		self.assertIn("repeats the field", err)

	def test_missing_file(self):
		status, out, err = self._run(str(base_folder/"no/such/file.json"))
		self.assertEqual(2, status)

	def test_no_arguments_explains_usage(self):
		status, out, err = self._run()
		self.assertEqual(0, status)
		self.assertIn("usage: tipsy", out)

if __name__ == '__main__':
	unittest.main()
