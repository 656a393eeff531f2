"""
Benchmark runner — replays recorded model responses against input files and
checks that the resulting suggestions reproduce the expected content.

Case layout::

    cases/
      add-null-check/
        input.ts         -- document; may contain the cursor marker ␣
        response.txt     -- raw model response
        expected.ts      -- optional; defaults to the input without marker
        metadata.yaml    -- optional; name, description, category
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Optional

import yaml
from tqdm import tqdm

from .api import SuggestionContext, build_suggestions
from .config import Config
from .errors import BenchmarkCaseError, GhostError
from .editing.document import Position, Range, StringDocument

logger = logging.getLogger(__name__)

CURSOR_MARKER = "␣"
LEGACY_CURSOR_MARKERS = ("<|cursor|>", "<| cursor |>")

_RESPONSE_FILE = "response.txt"
_METADATA_FILE = "metadata.yaml"


@dataclass
class BenchmarkCase:
    name: str
    path: str
    input_file: str
    input_content: str
    response: str
    expected_content: str
    cursor: Optional[Position] = None
    description: str = ""
    category: str = "general"


@dataclass
class CaseResult:
    case: BenchmarkCase
    passed: bool
    actual_content: str = ""
    groups: int = 0
    applied: int = 0
    dropped: int = 0
    elapsed_ms: float = 0.0
    error: Optional[str] = None


@dataclass
class BenchmarkSummary:
    results: list[CaseResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def pass_rate(self) -> float:
        return self.passed / self.total * 100 if self.total else 0.0


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def extract_cursor(raw: str) -> tuple[str, Optional[Position]]:
    """Remove the first cursor marker and return the clean text and position."""
    for marker in (CURSOR_MARKER, *LEGACY_CURSOR_MARKERS):
        index = raw.find(marker)
        if index == -1:
            continue
        before = raw[:index].split("\n")
        position = Position(len(before) - 1, len(before[-1]))
        return raw[:index] + raw[index + len(marker):], position
    return raw, None


def _find_by_stem(case_dir: str, stem: str) -> Optional[str]:
    for name in sorted(os.listdir(case_dir)):
        if os.path.splitext(name)[0] == stem and os.path.isfile(os.path.join(case_dir, name)):
            return name
    return None


def _read(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _load_metadata(case_dir: str) -> dict:
    path = os.path.join(case_dir, _METADATA_FILE)
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise BenchmarkCaseError(f"Invalid metadata in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BenchmarkCaseError(f"Metadata in {path} must be a mapping")
    return data


def load_case(case_dir: str) -> BenchmarkCase:
    """Load one case directory.

    Raises
    ------
    BenchmarkCaseError
        If the input or response file is missing or the metadata is invalid.
    """
    if not os.path.isdir(case_dir):
        raise BenchmarkCaseError(f"Case directory not found: {case_dir}")

    input_name = _find_by_stem(case_dir, "input")
    if input_name is None:
        raise BenchmarkCaseError(f"No input.* file in {case_dir}")
    response_path = os.path.join(case_dir, _RESPONSE_FILE)
    if not os.path.isfile(response_path):
        raise BenchmarkCaseError(f"No {_RESPONSE_FILE} in {case_dir}")

    metadata = _load_metadata(case_dir)
    content, cursor = extract_cursor(_read(os.path.join(case_dir, input_name)))

    expected_name = _find_by_stem(case_dir, "expected")
    expected = _read(os.path.join(case_dir, expected_name)) if expected_name else content

    return BenchmarkCase(
        name=str(metadata.get("name") or os.path.basename(os.path.normpath(case_dir))),
        path=case_dir,
        input_file=input_name,
        input_content=content,
        response=_read(response_path),
        expected_content=expected,
        cursor=cursor,
        description=str(metadata.get("description", "")),
        category=str(metadata.get("category", "general")),
    )


def load_cases(cases_dir: str, category: Optional[str] = None) -> list[BenchmarkCase]:
    """Load every case under *cases_dir*, skipping malformed ones."""
    if not os.path.isdir(cases_dir):
        raise BenchmarkCaseError(f"Benchmark directory not found: {cases_dir}")

    cases: list[BenchmarkCase] = []
    for name in sorted(os.listdir(cases_dir)):
        case_dir = os.path.join(cases_dir, name)
        if not os.path.isdir(case_dir):
            continue
        try:
            case = load_case(case_dir)
        except BenchmarkCaseError as exc:
            logger.warning("[Bench] Skipping %s: %s", name, exc)
            continue
        if category and case.category != category:
            continue
        cases.append(case)
    return cases


# ---------------------------------------------------------------------------
# Running
# ---------------------------------------------------------------------------

def run_case(case: BenchmarkCase, config: Optional[Config] = None) -> CaseResult:
    """Run the pipeline for one case and compare with the expected content."""
    document = StringDocument(case.input_content, uri=case.input_file)
    selection = Range(case.cursor, case.cursor) if case.cursor else None
    context = SuggestionContext(document=document, selection=selection,
                                config=config or Config())

    t0 = time.perf_counter()
    try:
        result = build_suggestions(case.response, context)
    except GhostError as exc:
        logger.error("[Bench] %s failed: %s", case.name, exc.details())
        return CaseResult(case=case, passed=False, error=str(exc))
    elapsed_ms = (time.perf_counter() - t0) * 1000

    primary = result.primary_file
    actual = primary.apply_to(case.input_content) if primary else case.input_content
    apply_result = result.apply_result
    return CaseResult(
        case=case,
        passed=actual == case.expected_content,
        actual_content=actual,
        groups=len(primary.groups) if primary else 0,
        applied=len(apply_result.applied) if apply_result else 0,
        dropped=len(apply_result.dropped) if apply_result else 0,
        elapsed_ms=elapsed_ms,
    )


def run_benchmarks(
    cases_dir: str,
    category: Optional[str] = None,
    config: Optional[Config] = None,
    show_progress: bool = True,
) -> BenchmarkSummary:
    """Load and run all cases, reporting progress with tqdm."""
    cases = load_cases(cases_dir, category)
    summary = BenchmarkSummary()

    pbar = tqdm(cases, unit="case", desc="Benchmark", disable=not show_progress)
    for case in pbar:
        pbar.set_postfix_str(case.name, refresh=False)
        summary.results.append(run_case(case, config))
    pbar.close()

    logger.info(
        "[Bench] %d/%d case(s) passed (%.0f%%)",
        summary.passed, summary.total, summary.pass_rate,
    )
    return summary
