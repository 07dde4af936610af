import sys, random
from enum import Enum
from typing import NamedTuple, Any, Optional, Sequence

class TooManyIssues(Exception):
	pass

class Kind(Enum):
	UNIFICATION_CONFLICT = "UnificationConflict"
	DEREFERENCE_OF_NON_POINTER = "DereferenceOfNonPointer"
	POINTER_STORE_MISMATCH = "PointerStoreMismatch"
	INVALID_ALLOC_ARGUMENT = "InvalidAllocArgument"
	NON_INTEGER_OPERAND = "NonIntegerOperand"
	NOT_CALLABLE = "NotCallable"
	ARGUMENT_TYPE_MISMATCH = "ArgumentTypeMismatch"
	ARITY_MISMATCH = "ArityMismatch"
	INCONSISTENT_VARIABLE_TYPE = "InconsistentVariableType"
	MISSING_FIELD = "MissingField"

class Issue(NamedTuple):
	kind: Kind
	origin: Any  # The syntax node in question
	message: str
	def __str__(self): return "%s: %s"%(self.kind.value, self.message)

def _outburst():
	particle = ["Oh, ", "Well, ", "Hmm, ", "", ""]
	minced_oaths = [
		'Bother', 'Blast', 'Crumbs', 'Drat', 'Fiddlesticks',
		'Gosh', 'Heavens', 'Rats', 'Shucks', 'Yikes',
	]
	resignations = [
		'These types do not add up.',
		'Something here will not type-check.',
		'I cannot make this program make sense.',
	]
	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Report:
	"""
	Collects every type error of a run, in the order found.
	Checking is cumulative: nothing here stops at the first problem, unless asked.
	"""
	_issues : list[Issue]

	def __init__(self, *, verbose:int=0, max_issues:Optional[int]=None):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	@property
	def issues(self) -> Sequence[Issue]: return tuple(self._issues)

	def errors(self) -> list[str]: return [str(i) for i in self._issues]
	def kinds(self) -> list[Kind]: return [i.kind for i in self._issues]

	def issue(self, kind:Kind, origin, message:str):
		self._issues.append(Issue(kind, origin, message))
		self.info("  found", self._issues[-1])
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def reset(self):
		self._issues.clear()

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		if self._issues:
			print("*"*60, file=sys.stderr)
			print(_outburst(), file=sys.stderr)
		for i in self._issues:
			print("  -"*20, file=sys.stderr)
			print(i, file=sys.stderr)
			print("    in %s"%_site(i.origin), file=sys.stderr)
		sys.stderr.flush()

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

	# Methods the solver calls:

	def unification_conflict(self, origin, this:str, t1, that:str, t2):
		pattern = "Cannot unify %s (%s) with %s (%s) in %s %s."
		self.issue(Kind.UNIFICATION_CONFLICT, origin, pattern%(this, t1, that, t2, type(origin).__name__, origin))

	def argument_type_mismatch(self, call, position:int, param:str, need, got):
		pattern = "Argument %d of %s does not suit parameter '%s': need %s, got %s."
		self.issue(Kind.ARGUMENT_TYPE_MISMATCH, call, pattern%(position+1, call, param, need, got))

	def arity_mismatch(self, call, need:int, got:int):
		plural = '' if need == 1 else 's'
		pattern = "%s takes %d argument%s, but got %d instead."
		self.issue(Kind.ARITY_MISMATCH, call, pattern%(call.callee, need, plural, got))

	def record_lacks_field(self, access, record_type):
		pattern = "Record %s has fields, but not one called '%s'."
		self.issue(Kind.MISSING_FIELD, access, pattern%(record_type, access.name))

	def type_has_no_fields(self, access, got):
		pattern = "%s is %s, which has no fields; in particular not '%s'."
		self.issue(Kind.MISSING_FIELD, access, pattern%(access.record, got, access.name))

	# Methods the validator calls:

	def dereference_of_non_pointer(self, origin, expr, got):
		pattern = "Cannot dereference %s, which is %s rather than a pointer."
		self.issue(Kind.DEREFERENCE_OF_NON_POINTER, origin, pattern%(expr, got))

	def pointer_store_mismatch(self, origin, pointer, need, got):
		pattern = "Storing %s through %s, which points to %s."
		self.issue(Kind.POINTER_STORE_MISMATCH, origin, pattern%(got, pointer, need))

	def invalid_alloc_argument(self, alloc, got):
		pattern = "Can only allocate an int, but %s is %s."
		self.issue(Kind.INVALID_ALLOC_ARGUMENT, alloc, pattern%(alloc.expr, got))

	def non_integer_operand(self, binary, operand, got):
		pattern = "Operator '%s' needs int operands, but %s is %s."
		self.issue(Kind.NON_INTEGER_OPERAND, binary, pattern%(binary.op, operand, got))

	def not_callable(self, call, got):
		pattern = "Dunno how to call %s, which is %s."
		self.issue(Kind.NOT_CALLABLE, call, pattern%(call.callee, got))

	def bad_built_in_argument(self, call, position:int, need, got):
		pattern = "Argument %d of built-in %s needs to be %s, but is %s."
		self.issue(Kind.ARGUMENT_TYPE_MISMATCH, call, pattern%(position+1, call, need, got))

	def inconsistent_variable_type(self, origin, name:str, tags:Sequence[str]):
		pattern = "Variable %s is used as %s."
		self.issue(Kind.INCONSISTENT_VARIABLE_TYPE, origin, pattern%(name, " and ".join(tags)))

def _site(origin) -> str:
	return "%s %s"%(type(origin).__name__, origin)
