"""
Inspect Verification Portfolio - Mutation Testing.

Measures test suite adequacy by injecting small syntactic faults into the
modified source files and checking whether the existing tests notice.

Mutation taxonomy:
    - OPERATOR_REPLACEMENT: each arithmetic, comparison, or logical
      operator is swapped for its fixed opposite
      (+ <-> -, * <-> /, == <-> !=, < <-> >=, > <-> <=, and <-> or)
    - BOUNDARY_CHANGE: relational operators cross their boundary
      (< <-> <=, > <-> >=). A single ``<`` therefore yields two mutants,
      one per category.
    - CONDITION_NEGATION: a ``not`` expression loses its negation
    - STATEMENT_DELETION: declared for completeness; site discovery does
      not produce it

Mutants are applied strictly one at a time because they share the
on-disk source file. Every mutant follows the same cycle: read the file,
rewrite the first occurrence of the operator token on the mutant's line,
run the tests, and restore the original bytes no matter what happened.
"""

import ast
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from cobbler.verification.base import (
    Evidence,
    InspectInput,
    Technique,
    TechniqueResult,
    Verdict,
)
from cobbler.verification.commands import PackageCommand, SourceIO

logger = logging.getLogger(__name__)


class MutationType(str, Enum):
    """Kind of syntactic mutation applied."""

    OPERATOR_REPLACEMENT = "operator_replacement"
    CONDITION_NEGATION = "condition_negation"
    BOUNDARY_CHANGE = "boundary_change"
    STATEMENT_DELETION = "statement_deletion"  # Not produced by site discovery


# Source token for each mutable AST operator
OPERATOR_TOKENS: dict[type[ast.AST], str] = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Lt: "<",
    ast.GtE: ">=",
    ast.Gt: ">",
    ast.LtE: "<=",
    ast.And: "and",
    ast.Or: "or",
}

OPERATOR_REPLACEMENTS: dict[str, str] = {
    "+": "-",
    "-": "+",
    "*": "/",
    "/": "*",
    "==": "!=",
    "!=": "==",
    "<": ">=",
    ">=": "<",
    ">": "<=",
    "<=": ">",
    "and": "or",
    "or": "and",
}

BOUNDARY_CHANGES: dict[str, str] = {
    "<": "<=",
    "<=": "<",
    ">": ">=",
    ">=": ">",
}

NEGATION_TOKEN = "not "


@dataclass
class Mutant:
    """A single injected fault in one source file.

    Attributes:
        file_path: Source file containing the mutation
        line: 1-based line of the mutated token
        mutation_type: Kind of mutation applied
        original: Original token text
        mutated: Replacement token text
        killed: Whether the tests detected this mutant
        equivalent: Marked semantically equivalent (manual input only)
        killing_test: Test command that detected the mutant (if killed)
    """

    file_path: str
    line: int
    mutation_type: MutationType
    original: str
    mutated: str
    killed: bool = False
    equivalent: bool = False
    killing_test: str = ""

    @property
    def key(self) -> tuple[str, int, MutationType]:
        """Identity used to match manual equivalence overrides."""
        return (self.file_path, self.line, self.mutation_type)

    def describe(self) -> str:
        return (
            f"surviving mutant at line {self.line}: "
            f"{self.original!r} → {self.mutated!r} ({self.mutation_type.value})"
        )


class MutationSiteVisitor(ast.NodeVisitor):
    """AST visitor that collects mutation candidates in a single pass.

    Binary, comparison, and boolean operators are checked independently
    against the replacement and boundary tables, so each operator yields
    zero, one, or two mutants. Each ``not`` yields one negation mutant.
    """

    def __init__(self, file_path: str, source: str = "") -> None:
        """Initialize the visitor.

        Args:
            file_path: Path recorded on every mutant
            source: Source text, used to locate operators in multi-line expressions
        """
        self.file_path = file_path
        self.mutants: list[Mutant] = []
        self._lines = source.encode("utf-8").split(b"\n") if source else []

    def visit_BinOp(self, node: ast.BinOp) -> None:
        self._add_operator(node.op, node.left, node.right)
        self.generic_visit(node)

    def visit_Compare(self, node: ast.Compare) -> None:
        operands = [node.left, *node.comparators]
        for op, left, right in zip(node.ops, operands, operands[1:]):
            self._add_operator(op, left, right)
        self.generic_visit(node)

    def visit_BoolOp(self, node: ast.BoolOp) -> None:
        # One operator between each pair of values
        for left, right in zip(node.values, node.values[1:]):
            self._add_operator(node.op, left, right)
        self.generic_visit(node)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> None:
        if isinstance(node.op, ast.Not):
            self.mutants.append(
                Mutant(
                    file_path=self.file_path,
                    line=node.lineno,
                    mutation_type=MutationType.CONDITION_NEGATION,
                    original=NEGATION_TOKEN,
                    mutated="",
                )
            )
        self.generic_visit(node)

    def _add_operator(self, op: ast.AST, left: ast.expr, right: ast.expr) -> None:
        token = OPERATOR_TOKENS.get(type(op))
        if token is None:
            return

        line = self._operator_line(token, left, right)

        replacement = OPERATOR_REPLACEMENTS.get(token)
        if replacement is not None:
            self.mutants.append(
                Mutant(
                    file_path=self.file_path,
                    line=line,
                    mutation_type=MutationType.OPERATOR_REPLACEMENT,
                    original=token,
                    mutated=replacement,
                )
            )

        boundary = BOUNDARY_CHANGES.get(token)
        if boundary is not None:
            self.mutants.append(
                Mutant(
                    file_path=self.file_path,
                    line=line,
                    mutation_type=MutationType.BOUNDARY_CHANGE,
                    original=token,
                    mutated=boundary,
                )
            )

    def _operator_line(self, token: str, left: ast.expr, right: ast.expr) -> int:
        """1-based line holding the operator token between two operands.

        Operands on one line settle it. Otherwise the source between the
        end of the left operand and the start of the right one is scanned.
        """
        start_line = left.end_lineno or left.lineno
        end_line = right.lineno
        if start_line == end_line or not self._lines:
            return start_line

        needle = token.encode("utf-8")
        for lineno in range(start_line, min(end_line, len(self._lines)) + 1):
            segment = self._lines[lineno - 1]
            if lineno == end_line:
                segment = segment[: right.col_offset]
            if lineno == start_line:
                segment = segment[left.end_col_offset or 0 :]
            if needle in segment:
                return lineno
        return start_line


def discover_mutants(source: str, file_path: str = "<string>") -> list[Mutant]:
    """Parse source text and return every mutation candidate.

    Raises:
        SyntaxError: If the source cannot be parsed
    """
    tree = ast.parse(source, filename=file_path)
    visitor = MutationSiteVisitor(file_path, source)
    visitor.visit(tree)
    return visitor.mutants


class MutationRunner(Technique):
    """Mutation testing technique.

    For each modified, parseable, non-test source file, discovers mutation
    sites, applies one mutant at a time, runs the tests for the modified
    packages, and records whether the mutant was killed.

    Score is killed / non-equivalent mutants. Only surviving mutants are
    reported as evidence.

    Usage:
        runner = MutationRunner(run_tests=CommandRunner(["python", "-m", "pytest", "-q"]))
        result = runner.run(inspect_input)
    """

    def __init__(
        self,
        run_tests: PackageCommand,
        source_io: SourceIO | None = None,
        source_suffix: str = ".py",
        test_prefixes: Sequence[str] = ("test_",),
        test_suffixes: Sequence[str] = ("_test.py",),
        equivalents: Iterable[tuple[str, int, MutationType | str]] | None = None,
    ) -> None:
        """Initialize the mutation runner.

        Args:
            run_tests: Test command; returns False when the tests fail
            source_io: Byte-level file access (defaults to the local filesystem)
            source_suffix: Suffix identifying mutable source files
            test_prefixes: Basename prefixes identifying test files
            test_suffixes: Basename suffixes identifying test files
            equivalents: Manually identified equivalent mutants as
                (file_path, line, mutation_type) keys
        """
        self._run_tests = run_tests
        self._io = source_io or SourceIO()
        self._source_suffix = source_suffix
        self._test_prefixes = tuple(test_prefixes)
        self._test_suffixes = tuple(test_suffixes)
        self._equivalents = {
            (path, line, MutationType(mutation_type))
            for path, line, mutation_type in (equivalents or ())
        }
        self._unrestored: list[str] = []

    @property
    def name(self) -> str:
        return "mutation_testing"

    @property
    def fault_class(self) -> str:
        return "test suite inadequacy"

    @property
    def unrestored_files(self) -> list[str]:
        """Files whose original contents could not be written back during the last run."""
        return list(self._unrestored)

    def applicable(self, input: InspectInput) -> bool:
        return input.is_code_work and len(input.modified_packages) > 0

    def is_candidate(self, file_path: str) -> bool:
        """Whether a modified file is a mutable, non-test source file."""
        basename = PurePath(file_path).name
        if not basename.endswith(self._source_suffix):
            return False
        if basename.startswith(self._test_prefixes):
            return False
        return not basename.endswith(self._test_suffixes)

    def run(self, input: InspectInput) -> TechniqueResult:
        """Execute mutation testing against the modified packages."""
        self._unrestored = []
        if not self.applicable(input):
            return TechniqueResult.skipped(self.name)

        mutants: list[Mutant] = []
        for file_path in input.modified_files:
            if not self.is_candidate(file_path):
                continue
            mutants.extend(self.find_mutation_sites(file_path))

        if not mutants:
            logger.info("Mutation testing: no mutation sites found")
            return TechniqueResult.skipped(self.name)

        label = getattr(self._run_tests, "description", "tests")
        for mutant in mutants:
            if mutant.key in self._equivalents:
                mutant.equivalent = True
                continue
            mutant.killed = self.apply_and_test(mutant, input.modified_packages)
            if mutant.killed:
                mutant.killing_test = label

        killed = 0
        total = 0
        evidence = []
        for mutant in mutants:
            if mutant.equivalent:
                continue
            total += 1
            if mutant.killed:
                killed += 1
            else:
                evidence.append(Evidence(file_path=mutant.file_path, detail=mutant.describe()))

        if total == 0:
            return TechniqueResult.skipped(self.name)

        score = killed / total
        logger.info(f"Mutation testing: {killed}/{total} mutants killed (score={score:.2f})")

        return TechniqueResult(
            name=self.name,
            score=score,
            verdict=Verdict.PASS if score == 1.0 else Verdict.FAIL,
            evidence=evidence,
            deterministic=True,
        )

    def find_mutation_sites(self, file_path: str) -> list[Mutant]:
        """Parse a source file and list its mutation candidates.

        Files that cannot be read or parsed yield no candidates.
        """
        try:
            source = self._io.read_bytes(file_path).decode("utf-8")
            return discover_mutants(source, file_path)
        except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as e:
            logger.debug(f"Skipping {file_path}: {e}")
            return []

    def apply_and_test(self, mutant: Mutant, packages: Sequence[str]) -> bool:
        """Apply one mutant, run the tests, and restore the original file.

        Returns:
            True if the tests failed against the mutated file (killed)
        """
        try:
            content = self._io.read_bytes(mutant.file_path)
        except OSError as e:
            logger.debug(f"Cannot read {mutant.file_path}: {e}")
            return False

        lines = content.split(b"\n")
        if mutant.line < 1 or mutant.line > len(lines):
            return False

        original_line = lines[mutant.line - 1]
        mutated_line = original_line.replace(
            mutant.original.encode("utf-8"), mutant.mutated.encode("utf-8"), 1
        )
        if mutated_line == original_line:
            return False  # Token not on this line; mutant does not apply

        lines[mutant.line - 1] = mutated_line
        try:
            self._io.write_bytes(mutant.file_path, b"\n".join(lines))
        except OSError as e:
            logger.warning(f"Could not write mutant to {mutant.file_path}: {e}")
            # A failed write may still have truncated the file
            self._restore(mutant.file_path, content)
            return False

        try:
            return not self._run_tests(packages)
        finally:
            self._restore(mutant.file_path, content)

    def _restore(self, file_path: str, original: bytes) -> None:
        try:
            self._io.write_bytes(file_path, original)
        except OSError as e:
            logger.error(
                f"Failed to restore {file_path} after mutation; "
                f"the workspace may be left in a mutated state: {e}"
            )
            self._unrestored.append(file_path)
