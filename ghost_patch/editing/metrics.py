"""
Suggestion metrics — tracks pipeline outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".ghostpatch"
_METRICS_FILE = "suggestion_metrics.jsonl"


def _metrics_path(metrics_dir: str | None = None, project_root: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir or _METRICS_DIR, _METRICS_FILE)


def log_suggestion_metric(
    data: dict,
    metrics_dir: str | None = None,
    project_root: str | None = None,
) -> None:
    """Append a single pipeline entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (format, changes_parsed, changes_applied,
        changes_dropped, strategies, operations, groups, ...).
    metrics_dir:
        Directory (relative to *project_root*) holding the log.
    project_root:
        Optional project root directory. Defaults to CWD.
    """
    path = _metrics_path(metrics_dir, project_root)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Metrics] Failed to write metrics: %s", exc)


def read_suggestion_stats(
    last_n: int = 50,
    metrics_dir: str | None = None,
    project_root: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        total_runs, suggestion_rate, apply_rate, drop_rate, fuzzy_rate,
        formats and strategies.
    """
    path = _metrics_path(metrics_dir, project_root)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[Metrics] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_runs": 0,
            "suggestion_rate": 0.0,
            "apply_rate": 0.0,
            "drop_rate": 0.0,
            "fuzzy_rate": 0.0,
            "formats": {},
            "strategies": {},
        }

    total = len(entries)
    with_suggestions = sum(1 for e in entries if e.get("groups", 0) > 0)
    parsed = sum(e.get("changes_parsed", 0) for e in entries)
    applied = sum(e.get("changes_applied", 0) for e in entries)
    dropped = sum(e.get("changes_dropped", 0) for e in entries)

    strategies: Counter = Counter()
    for e in entries:
        strategies.update(e.get("strategies", []))
    fuzzy = sum(n for name, n in strategies.items() if name != "exact")
    located = sum(strategies.values())

    return {
        "total_runs": total,
        "suggestion_rate": with_suggestions / total * 100,
        "apply_rate": applied / parsed * 100 if parsed else 0.0,
        "drop_rate": dropped / parsed * 100 if parsed else 0.0,
        "fuzzy_rate": fuzzy / located * 100 if located else 0.0,
        "formats": dict(Counter(e.get("format", "unknown") for e in entries)),
        "strategies": dict(strategies),
    }
