"""
This is a type checker for TIP programs, given as JSON syntax trees.

{0}

For example:

    tipsy program.json

will infer types for program.json and explain anything that does not add up.

    tipsy -h

will explain all the arguments.
"""
import sys, argparse

parser = argparse.ArgumentParser(
	prog="tipsy",
	description="Type inference for TIP programs.",
)
parser.add_argument("program", help="a TIP syntax tree in JSON, such as zoo/ok/pointers.json")
parser.add_argument('-v', "--verbose", action="count", help="Chatter about progress on the console.")
parser.add_argument('-c', "--constraints", action="store_true", help="Print the constraints collected.")
parser.add_argument('-g', "--groups", action="store_true", help="Print the equivalence classes found.")
parser.add_argument('-t', "--types", action="store_true", help="Print the type of every expression.")
parser.add_argument("--max-issues", type=int, default=None, help="Give up after this many type errors.")

def run(args):
	from .checker import TypeChecker
	from .diagnostics import Report, TooManyIssues
	from .front_end import load_program
	report = Report(verbose=args.verbose, max_issues=args.max_issues)
	try: program = load_program(args.program)
	except OSError as ex:
		print("Could not read %s: %s"%(args.program, ex), file=sys.stderr)
		return 2
	except ValueError as ex:  # including MalformedAST
		print("Not a TIP syntax tree: %s"%ex, file=sys.stderr)
		return 2
	try:
		outcome = TypeChecker(report).check_program(program)
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	if args.constraints:
		print("Constraints:")
		for i, c in enumerate(outcome.constraints):
			print("  %3d  %s"%(i, c))
	query = outcome.query()
	if args.groups:
		print("Equivalence classes:")
		for rendered, members in query.equivalence_classes():
			print("  %s: %s"%(rendered, ", ".join(members)))
	if args.types:
		print("Types:")
		for text, rendered in query.expression_types(outcome.constraints).items():
			print("  %s : %s"%(text, rendered))
	if report.sick():
		report.complain_to_console()
		return 1
	report.info("Looks plausible to me.")
	return 0

def main(argv=None):
	if argv is None: argv = sys.argv[1:]
	if argv:
		return run(parser.parse_args(argv))
	else:
		print(__doc__.strip().format(parser.format_usage()))
		return 0

if __name__ == '__main__':
	sys.exit(main())
