"""
Tests of expansion from source text, as the command line does it, and of the command line itself.
"""
import io, os, re, sys, tempfile, unittest
from pathlib import Path
from unittest import mock

from partapp import cmdline
from partapp.diagnostics import Report, TooManyIssues
from partapp.front_end import PartAppParseError
from partapp.macro import expand_source

try:
	from mypy import api as mypy_api
except ImportError:
	mypy_api = None

ROOT = Path(__file__).resolve().parent.parent

class Silence(Report):
	def __init__(self, max_issues=None):
		super().__init__(verbose=False, max_issues=max_issues)
		self.complain_to_console = mock.Mock()

SHAPES = '''\
from partapp.macro import part_app

def helper(x):
    return x

@part_app
def add(a: int, b: int) -> int:
    return helper(a) + b

@part_app("poly", "Clone")
def label(text: str, *, width: int) -> str:
    return text.ljust(width)
'''

def _run_artifact(artifact:str) -> dict:
	namespace = {"__name__": "expanded"}
	exec(compile(artifact, "<expanded>", "exec"), namespace)
	return namespace

class ExpandSourceTests(unittest.TestCase):

	def setUp(self) -> None:
		self.report = Silence()

	def expand(self, text, path=None):
		return expand_source(text, path, self.report)

	def test_artifact_stands_alone(self):
		artifact = self.expand(SHAPES)
		self.assertTrue(self.report.ok())
		namespace = _run_artifact(artifact)
		self.assertEqual(5, namespace["add"]().b(lambda: 3).a(lambda: 2).call())
		half = namespace["label"]().width(lambda: 4)
		self.assertEqual("ab  ", half.clone().text(lambda: "ab").call())
		self.assertEqual("xyz ", half.text(lambda: "xyz").call())

	def test_artifact_contents(self):
		artifact = self.expand(SHAPES)
		self.assertTrue(artifact.startswith('"""Partially applicable add, label, generated by partapp."""'))
		self.assertEqual(1, artifact.count("from __future__ import annotations"))
		for expect in [
			"class add___Empty(FillLabel):",
			"class add___Added(FillLabel):",
			"add___a___L = TypeVar('add___a___L')",
			"class PartialApplication___add(Carrier, Generic[add___a___L, add___b___L]):",
			"def add___body(a: int, b: int) -> int:",
			"def a(self: PartialApplication___add[add___Empty, add___b___L], producer: Callable[[], int]) -> PartialApplication___add[add___Added, add___b___L]:",
			"def call(self: PartialApplication___add[add___Added, add___Added]) -> int:",
			"def add() -> PartialApplication___add[add___Empty, add___Empty]:",
			"def width(self: PartialApplication___label[label___text___L, label___Empty], producer: Callable[[], Any])",
			"def clone(self: PartialApplication___label[label___text___L, label___width___L]) -> PartialApplication___label[label___text___L, label___width___L]:",
			"return body___(thunks___[0].force(), width=thunks___[1].force())",
		]:
			with self.subTest(expect):
				self.assertIn(expect, artifact)
		self.assertNotIn("def clone", artifact.split("class PartialApplication___label")[0])
		self.assertNotIn("@part_app", artifact)

	def test_rest_of_the_module_keeps_its_place(self):
		artifact = self.expand(SHAPES)
		order = ["from partapp.macro import part_app", "def helper(x):", "def add()", "def label()"]
		places = [artifact.index(text) for text in order]
		self.assertEqual(sorted(places), places)
		self.assertLess(artifact.index("from partapp.runtime import"), places[0])

	def test_bodies_see_module_names(self):
		text = "import math\n\n@part_app\ndef hyp(a: float, b: float) -> float:\n    return math.sqrt(a * a + b * b)\n"
		namespace = _run_artifact(self.expand(text))
		self.assertEqual(5.0, namespace["hyp"]().a(lambda: 3.0).b(lambda: 4.0).call())

	def test_bodies_keep_their_closures(self):
		text = (
			"def make(offset):\n"
			"    @part_app\n"
			"    def shift(x):\n"
			"        return x + offset\n"
			"    return shift\n"
		)
		namespace = _run_artifact(self.expand(text))
		self.assertTrue(self.report.ok())
		self.assertEqual(11, namespace["make"](10)().x(lambda: 1).call())

	def test_own_docstring_and_future_imports_stay_first(self):
		text = '"""Shapes."""\nfrom __future__ import division\n\n@part_app\ndef half(a):\n    return a / 2\n'
		artifact = self.expand(text)
		self.assertTrue(artifact.startswith('"""Shapes."""\nfrom __future__ import division\nfrom __future__ import annotations\n'))
		self.assertNotIn("generated by partapp", artifact)
		self.assertEqual(1.5, _run_artifact(artifact)["half"]().a(lambda: 3).call())

	def test_decorators_above_and_below(self):
		text = (
			"def tagged(fn):\n"
			"    fn.tag = 'outer'\n"
			"    return fn\n"
			"def doubled(fn):\n"
			"    return lambda a: 2 * fn(a)\n"
			"@tagged\n"
			"@part_app\n"
			"@doubled\n"
			"def twice(a):\n"
			"    return a\n"
		)
		artifact = self.expand(text)
		self.assertIn("@doubled\ndef twice___body(a):", artifact)
		namespace = _run_artifact(artifact)
		self.assertEqual("outer", namespace["twice"].tag)
		self.assertEqual(14, namespace["twice"]().a(lambda: 7).call())

	def test_nothing_to_expand(self):
		self.assertEqual("x = 1\n", self.expand("x = 1\n"))

	def test_class_passes_through(self):
		text = "from partapp.macro import part_app\n\n@part_app\nclass Point:\n    x: int = 0\ny = Point.x + 1\n"
		artifact = self.expand(text, Path("point.py"))
		self.assertEqual(1, len(self.report.issues))
		self.assertNotIn("@part_app", artifact)
		self.assertLess(artifact.index("class Point:"), artifact.index("y = Point.x + 1"))
		namespace = _run_artifact(artifact)
		self.assertEqual(1, namespace["y"])

	def test_class_keeps_other_decorators(self):
		text = "import dataclasses\n\n@dataclasses.dataclass\n@part_app\nclass Point:\n    x: int = 0\n"
		artifact = self.expand(text)
		self.assertIn("@dataclasses.dataclass\nclass Point:", artifact)
		self.assertEqual(3, _run_artifact(artifact)["Point"](3).x)

	def test_method_in_text(self):
		text = "class Shape:\n    @part_app\n    def area(self, w, h):\n        return w * h\n"
		artifact = self.expand(text)
		self.assertEqual(1, len(self.report.issues))
		self.assertIn("parameters = ('w', 'h')", artifact)
		self.assertIn("Optional[Thunk[Any]]", artifact)
		self.assertIn("def Shape___area() ->", artifact)
		self.assertIn("    area = Shape___area", artifact)
		self.assertLess(artifact.index("class PartialApplication___Shape___area"), artifact.index("class Shape:"))

	def test_static_method(self):
		text = "class Shape:\n    @staticmethod\n    @part_app\n    def area(w, h):\n        return w * h\n"
		artifact = self.expand(text)
		self.assertTrue(self.report.ok())
		self.assertIn("area = staticmethod(Shape___area)", artifact)
		namespace = _run_artifact(artifact)
		self.assertEqual(6, namespace["Shape"].area().h(lambda: 3).w(lambda: 2).call())
		self.assertEqual(6, namespace["Shape"]().area().w(lambda: 2).h(lambda: 3).call())

	def test_self_at_module_level(self):
		artifact = self.expand("@part_app\ndef tag(self, name):\n    return self + name\n")
		self.assertTrue(self.report.ok())
		self.assertEqual("ab", _run_artifact(artifact)["tag"]().name(lambda: "b").self(lambda: "a").call())

	def test_option_tokens_from_text(self):
		text = "@part_app('Clone')\ndef f(a):\n    return a\n"
		artifact = self.expand(text)
		self.assertEqual(1, len(self.report.issues))
		self.assertIn("polymorphic = False", artifact)
		self.assertNotIn("def clone", artifact)

	def test_diagnostics_point_at_source(self):
		text = "@part_app\ndef f(a, *rest):\n    return a\n"
		self.expand(text, Path("rest.py"))
		rendered = self.report.issues[0].as_text()
		self.assertIn("rest.py", rendered)
		self.assertIn("def f(a, *rest):", rendered)

	@unittest.skipUnless(sys.version_info >= (3, 12), "type parameter syntax")
	def test_type_parameters(self):
		text = "@part_app\ndef first[T: int, U](a: T, b: U) -> T:\n    return a\n"
		artifact = self.expand(text)
		self.assertEqual(1, len(self.report.issues))
		self.assertIn("on T", self.report.issues[0].as_text())
		self.assertNotIn("TypeVar('T')", artifact)
		self.assertIn("class PartialApplication___first[T, U, first___a___L, first___b___L](Carrier):", artifact)
		self.assertIn("def first[T, U]() -> PartialApplication___first[T, U, first___Empty, first___Empty]:", artifact)
		self.assertIn("def call(self: PartialApplication___first[T, U, first___Added, first___Added]) -> T:", artifact)
		namespace = _run_artifact(artifact)
		self.assertEqual(1, namespace["first"]().b(lambda: "x").a(lambda: 1).call())

	def test_syntax_error_is_fatal(self):
		with self.assertRaises(PartAppParseError):
			self.expand("@part_app\ndef broken(:\n")

	def test_too_many_issues(self):
		report = Silence(max_issues=2)
		text = "@part_app('x', 'y', 'z')\ndef f(a):\n    return a\n"
		with self.assertRaises(TooManyIssues):
			expand_source(text, None, report)

TWINS = '''\
@part_app
def add(a: int, b: int) -> int:
    return a + b

@part_app
def sub(a: int, b: int) -> int:
    return a - b
'''

@unittest.skipIf(mypy_api is None, "mypy is not installed")
class StaticCheckTests(unittest.TestCase):
	""" The fill-state machine as a type checker sees the generated source. """

	def error_lines(self, usage:str) -> list[int]:
		""" Lines of `usage`, counted from one, where mypy finds an error. """
		folder = tempfile.TemporaryDirectory()
		self.addCleanup(folder.cleanup)
		artifact = expand_source(TWINS, None, Silence())
		path = Path(folder.name) / "twins.py"
		path.write_text(artifact + usage, encoding="utf-8")
		argv = [
			str(path), "--follow-imports=silent", "--ignore-missing-imports",
			"--no-incremental", "--cache-dir", str(Path(folder.name) / "cache"),
		]
		with mock.patch.dict(os.environ, {"MYPYPATH": str(ROOT)}):
			stdout, stderr, status = mypy_api.run(argv)
		offset = artifact.count("\n")
		found = [int(m.group(1)) - offset for m in re.finditer(r"twins\.py:(\d+): error:", stdout)]
		self.assertEqual(bool(found), status != 0, stdout + stderr)
		return found

	def test_valid_chains_over_shared_parameter_names(self):
		usage = (
			"x: int = add().a(lambda: 1).b(lambda: 2).call()\n"
			"y: int = sub().b(lambda: 2).a(lambda: 1).call()\n"
		)
		self.assertEqual([], self.error_lines(usage))

	def test_double_set_and_early_call(self):
		usage = (
			"def one() -> int:\n"
			"    return 1\n"
			"twice = add().a(one).a(one)\n"
			"early = add().a(one).call()\n"
			"fine = sub().a(one).b(one).call()\n"
		)
		self.assertEqual([3, 4], self.error_lines(usage))

class CommandLineTests(unittest.TestCase):

	def setUp(self) -> None:
		folder = tempfile.TemporaryDirectory()
		self.addCleanup(folder.cleanup)
		self.folder = Path(folder.name)

	def run_cli(self, *argv):
		stdout, stderr = io.StringIO(), io.StringIO()
		with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr):
			status = cmdline.run(cmdline.parser.parse_args(list(argv)))
		return status, stdout.getvalue(), stderr.getvalue()

	def write(self, name, text):
		path = self.folder / name
		path.write_text(text, encoding="utf-8")
		return str(path)

	def test_prints_expansion(self):
		status, out, err = self.run_cli(self.write("shapes.py", SHAPES))
		self.assertEqual(0, status)
		self.assertIn("def add() ->", out)
		self.assertIn("def helper(x):", out)
		self.assertEqual("", err)

	def test_check_only(self):
		status, out, err = self.run_cli("-c", self.write("shapes.py", SHAPES))
		self.assertEqual(0, status)
		self.assertEqual("", out)
		self.assertIn("Looks plausible", err)

	def test_output_file(self):
		target = self.folder / "expanded.py"
		status, out, err = self.run_cli("-o", str(target), self.write("shapes.py", SHAPES))
		self.assertEqual(0, status)
		self.assertIn("class PartialApplication___label", target.read_text(encoding="utf-8"))

	def test_issues_fail_but_still_expand(self):
		path = self.write("bad.py", "@part_app('Clone')\ndef f(a: int) -> int:\n    return a\n")
		status, out, err = self.run_cli(path)
		self.assertEqual(1, status)
		self.assertIn("Cannot implement duplication", err)
		self.assertIn("def f() ->", out)
		self.assertEqual(1, _run_artifact(out)["f"]().a(lambda: 1).call())

	def test_issues_fail_the_check(self):
		path = self.write("bad.py", "class Shape:\n    @part_app\n    def area(self, w):\n        return w\n")
		status, out, err = self.run_cli("-c", path)
		self.assertEqual(1, status)
		self.assertEqual("", out)
		self.assertIn("Cannot make methods partially applicable", err)
		self.assertNotIn("Looks plausible", err)

	def test_unparseable_file(self):
		status, out, err = self.run_cli(self.write("broken.py", "def (:\n"))
		self.assertEqual(1, status)
		self.assertIn("Failed to parse", err)

	def test_missing_file(self):
		status, out, err = self.run_cli(str(self.folder / "absent.py"))
		self.assertEqual(1, status)
		self.assertIn("Could not read", err)
