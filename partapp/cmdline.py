"""
This expands partially applicable functions in a Python source file.

{0}

For example:

    partapp shapes.py

prints the generated carriers for every @part_app function in shapes.py, or
else tries to explain why not.

    partapp -c shapes.py

only checks the decorated definitions and reports what it finds.

    partapp -h

will explain all the arguments.
"""
import sys, argparse
from pathlib import Path

parser = argparse.ArgumentParser(
	prog="partapp",
	description="Expand functions decorated with @part_app into partially applicable carriers.",
)
parser.add_argument("program", help="a Python source file containing @part_app definitions.")
parser.add_argument('-c', "--check", action="store_true", help="Check the definitions but do not print the expansion.")
parser.add_argument('-v', "--verbose", action="count", help="Mention each function as it is expanded.")
parser.add_argument('-o', "--output", help="Write the expansion to this file instead of standard output.")
parser.add_argument("--max-issues", type=int, default=10, help="Give up after this many diagnostics.")

def run(args):
	from .diagnostics import Report, TooManyIssues
	from .front_end import PartAppParseError
	from .macro import expand_source
	path = Path.cwd() / args.program
	report = Report(verbose=args.verbose, max_issues=args.max_issues)
	try:
		text = path.read_text(encoding="utf-8")
	except OSError as ex:
		print("Could not read %s: %s" % (path, ex), file=sys.stderr)
		return 1
	try:
		artifact = expand_source(text, path, report)
	except PartAppParseError as ex:
		print(ex, file=sys.stderr)
		return 1
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	if report.sick(): report.complain_to_console()
	if args.check:
		if report.ok(): print("Looks plausible to me.", file=sys.stderr)
	elif args.output:
		Path(args.output).write_text(artifact, encoding="utf-8")
		report.info("Wrote", args.output)
	else:
		sys.stdout.write(artifact)
	return 0 if report.ok() else 1

def main():
	if len(sys.argv) > 1:
		exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
