from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class PhaseSummary:
    phase: str
    events: int = 0
    warnings: int = 0
    errors: int = 0
    first_timestamp: str = ""
    last_timestamp: str = ""
    event_counts: Counter = field(default_factory=Counter)
    results: Counter = field(default_factory=Counter)
    finished: bool = False


_FINISH_EVENTS = {"extraction_finished", "evaluation_finished"}


def summarize_log(fp: Path) -> PhaseSummary:
    """Parse one phase JSONL log.

    Lines that are not valid JSON objects are ignored.
    """
    summary = PhaseSummary(phase=fp.stem)

    for line in fp.read_text(encoding="utf-8").splitlines():
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(obj, dict):
            continue

        summary.events += 1
        level = obj.get("level")
        if level == "WARNING":
            summary.warnings += 1
        elif level in ("ERROR", "CRITICAL"):
            summary.errors += 1

        ts = obj.get("timestamp")
        if isinstance(ts, str):
            summary.first_timestamp = summary.first_timestamp or ts
            summary.last_timestamp = ts

        msg = obj.get("message")
        if isinstance(msg, str):
            summary.event_counts[msg] += 1
            if msg in _FINISH_EVENTS:
                summary.finished = True
            if msg == "verdict_saved" and isinstance(obj.get("result"), str):
                summary.results[obj["result"]] += 1

    return summary


def summarize_logs(logs_dir: Path) -> dict[str, PhaseSummary]:
    if not logs_dir.exists():
        return {}
    return {fp.stem: summarize_log(fp) for fp in sorted(logs_dir.glob("*.jsonl"))}


def format_phase_summary(summary: PhaseSummary) -> list[str]:
    lines = [
        f"Phase:    {summary.phase}",
        f"Status:   {'finished' if summary.finished else 'incomplete'}",
        f"Started:  {summary.first_timestamp or '-'}",
        f"Last:     {summary.last_timestamp or '-'}",
        f"Events:   {summary.events} (warnings: {summary.warnings}, errors: {summary.errors})",
    ]
    if summary.results:
        rendered = ", ".join(f"{k}={summary.results[k]}" for k in sorted(summary.results))
        lines.append(f"Verdicts: {rendered}")
    if summary.event_counts:
        lines.append("")
        lines.append("Event counts:")
        for name, count in sorted(summary.event_counts.items()):
            lines.append(f"  {name}: {count}")
    return lines


def format_summary_table(summaries: dict[str, PhaseSummary]) -> list[str]:
    if not summaries:
        return ["No logs found."]
    header = f"{'PHASE':<18} {'STATUS':<11} {'EVENTS':>7} {'WARN':>5} {'ERR':>5}  LAST"
    lines = [header, "-" * len(header)]
    for phase, s in summaries.items():
        status = "finished" if s.finished else "incomplete"
        lines.append(
            f"{phase:<18} {status:<11} {s.events:>7} {s.warnings:>5} {s.errors:>5}  {s.last_timestamp or '-'}"
        )
    return lines
