from pathlib import Path
import unittest
from unittest import mock

from tipsy import syntax
from tipsy.algebra import INT, PointerType, RecursiveType, Deferred
from tipsy.checker import TypeChecker, Outcome
from tipsy.diagnostics import Report
from tipsy.front_end import load_program

base_folder = Path(__file__).parent.parent
zoo_ok = base_folder/"zoo/ok"

V, N = syntax.Variable, syntax.NumberLiteral

def _local(name, scope="main"):
	v = syntax.Variable(name)
	v.scope = scope
	return v

def _good(program:syntax.Program) -> Outcome:
	report = Report(verbose=False)
	outcome = TypeChecker(report).check_program(program)
	report.assert_no_issues("Ostensibly-good example failed to type-check.")
	assert outcome.errors == []
	return outcome

class ZooOfOk(unittest.TestCase):
	""" Well-typed programs: test for no smoke, then look at what was inferred. """

	def test_pointers(self):
		query = _good(load_program(zoo_ok/"pointers.json")).query()
		self.assertEqual(INT, query.type_of(_local("x")))
		self.assertEqual(INT, query.type_of(_local("z")))
		y = query.type_of(_local("y"))
		self.assertIsInstance(y, PointerType)
		self.assertEqual(INT, query.resolve(y.target))
		self.assertEqual("pointer(int)", query.describe(_local("y")))

	def test_records(self):
		query = _good(load_program(zoo_ok/"records.json")).query()
		self.assertEqual(INT, query.type_of(syntax.FieldAccess(_local("p", "getX"), "x")))
		self.assertEqual("{x: int, y: int}", query.describe(_local("p", "getX")))

	def test_factorial(self):
		query = _good(load_program(zoo_ok/"factorial.json")).query()
		self.assertIsInstance(query.type_of(V("fact")), RecursiveType)
		self.assertEqual(INT, query.type_of(_local("n", "fact")))
		self.assertEqual(INT, query.type_of(_local("r", "fact")))
		self.assertEqual("μα.function(int) -> int", query.describe(V("fact")))

class ConstructedOk(unittest.TestCase):

	def test_nulls_do_not_alias(self):
		outcome = _good(syntax.Program([syntax.Function("main", [], ["x", "y"], [
			syntax.Assign("x", syntax.NullLiteral()),
			syntax.Assign("y", syntax.NullLiteral()),
		], N(0))]))
		query, store = outcome.query(), outcome.store
		self.assertIsInstance(query.type_of(_local("x")), PointerType)
		self.assertIsInstance(query.type_of(_local("y")), PointerType)
		self.assertNotEqual(store.find(store.ident(Deferred(_local("x")))), store.find(store.ident(Deferred(_local("y")))))

	def test_swap(self):
		swap = syntax.Function("swap", ["a", "b"], ["t"], [
			syntax.Assign("t", syntax.Dereference(V("a"))),
			syntax.StorePointer(V("a"), syntax.Dereference(V("b"))),
			syntax.StorePointer(V("b"), V("t")),
		], N(0))
		main = syntax.Function("main", [], ["x", "y", "z"], [
			syntax.Assign("x", N(1)),
			syntax.Assign("y", N(2)),
			syntax.Assign("z", syntax.Call(V("swap"), [syntax.AddressOf("x"), syntax.AddressOf("y")])),
		], V("z"))
		query = _good(syntax.Program([swap, main])).query()
		self.assertEqual("pointer(int)", query.describe(_local("a", "swap")))
		self.assertEqual(INT, query.type_of(_local("z")))
		self.assertEqual("function(pointer(int), pointer(int)) -> int", query.describe(V("swap")))

	def test_early_return(self):
		pick = syntax.Function("pick", ["n"], [], [
			syntax.If(syntax.BinaryExpression(">", V("n"), N(0)), [syntax.Return(N(1))]),
		], V("n"))
		query = _good(syntax.Program([pick])).query()
		self.assertEqual(INT, query.type_of(_local("n", "pick")))

	def test_function_pointer_parameter(self):
		twice = syntax.Function("twice", ["f", "x"], [], [], syntax.Call(V("f"), [syntax.Call(V("f"), [V("x")])]))
		inc = syntax.Function("inc", ["n"], [], [], syntax.BinaryExpression("+", V("n"), N(1)))
		main = syntax.Function("main", [], [], [], syntax.Call(V("twice"), [V("inc"), N(3)]))
		query = _good(syntax.Program([twice, inc, main])).query()
		# Nothing constrains the parameter of inc, only its result.
		self.assertEqual("function(?) -> int", query.describe(_local("f", "twice")))
		self.assertEqual(INT, query.type_of(_local("x", "twice")))

	def test_checker_chatters_when_verbose(self):
		report = Report(verbose=1)
		with mock.patch("builtins.print") as fake:
			TypeChecker(report).check_program(load_program(zoo_ok/"pointers.json"))
		self.assertTrue(fake.called)

	def test_equivalence_classes_and_expression_types(self):
		outcome = _good(load_program(zoo_ok/"pointers.json"))
		query = outcome.query()
		types = query.expression_types(outcome.constraints)
		self.assertEqual("int", types["z"])
		self.assertEqual("pointer(int)", types["y"])
		classes = dict((tuple(members), rendered) for rendered, members in query.equivalence_classes())
		int_members = [members for members, rendered in classes.items() if rendered == "int"]
		self.assertEqual(1, len(int_members))
		self.assertTrue({"x", "z", "1", "2", "*y"} <= set(int_members[0]))

	def test_queries_leave_the_store_alone(self):
		outcome = _good(syntax.Program([syntax.Function("main", [], ["x"], [syntax.Assign("x", N(1))], V("x"))]))
		query, store = outcome.query(), outcome.store
		before = store.all_groups()
		self.assertIsNone(query.type_of(_local("nowhere")))
		self.assertEqual("?", query.describe(_local("nowhere")))
		self.assertEqual("pointer(?)", query.render(PointerType(Deferred(_local("nowhere")))))
		self.assertIsNone(store.type_of(Deferred(_local("nowhere"))))
		self.assertIsNone(store.lookup(Deferred(_local("nowhere"))))
		self.assertEqual(before, store.all_groups())
		self.assertEqual(INT, query.type_of(_local("x")))

	def test_rendering_a_cycle_terminates(self):
		outcome = _good(syntax.Program([syntax.Function("main", [], ["x"], [
			syntax.Assign("x", syntax.AddressOf("x")),
		], N(0))]))
		self.assertEqual("pointer(pointer)", outcome.query().describe(_local("x")))

	def test_rendering_depth_limit(self):
		outcome = _good(syntax.Program([syntax.Function("main", [], ["a", "b", "c"], [
			syntax.Assign("a", N(1)),
			syntax.Assign("b", syntax.AddressOf("a")),
			syntax.Assign("c", syntax.AddressOf("b")),
		], V("c"))]))
		self.assertEqual("pointer(pointer(int))", outcome.query().describe(_local("c")))
		self.assertEqual("pointer(pointer)", outcome.query(depth_limit=1).describe(_local("c")))

if __name__ == '__main__':
	unittest.main()
