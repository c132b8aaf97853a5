"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from ..core.domain.models import BenchmarkReport, GroundTruthRecord, Verdict, VerdictCounts


def _pct(value: float | None) -> str:
    return f"{value * 100:.1f}%" if value is not None else "N/A"


def format_extract_result(records: list[GroundTruthRecord]) -> str:
    """Format extracted ground truth for human-readable CLI output.

    Args:
        records: Ground truth records produced by extraction

    Returns:
        Formatted string for display
    """
    if not records:
        return "No ground truth records extracted."

    lines = []
    lines.append(f"Extracted {len(records)} ground truth records:")
    lines.append("")
    lines.append("-" * 100)
    lines.append(f"{'Vulnerability':<20} {'CWE':<10} {'Origin':<12} {'File'}")
    lines.append("-" * 100)
    for r in records:
        vuln_id = r.vulnerability_id
        if len(vuln_id) > 20:
            vuln_id = vuln_id[:17] + "..."
        lines.append(f"{vuln_id:<20} {r.cwe_id:<10} {r.original_commit_id[:10]:<12} {r.file_path}")
    lines.append("-" * 100)
    return "\n".join(lines)


def format_verdicts(detector: str, verdicts: list[Verdict]) -> str:
    """Format verdicts of one detector run with a result tally."""
    counts = VerdictCounts()
    for v in verdicts:
        counts.add(v.result)

    lines = []
    lines.append(f"{detector} evaluation: {len(verdicts)} verdicts")
    lines.append(f"  TP={counts.TP} FP={counts.FP} FN={counts.FN} SKIPPED={counts.SKIPPED}")
    lines.append("")
    for v in verdicts:
        lines.append(f"  [{v.result.value:<7}] {v.vulnerability_id} {v.file_path} ({v.cwe_id})")
        lines.append(f"            {v.rationale}")
    return "\n".join(lines)


def format_report(report: BenchmarkReport) -> str:
    """Format the benchmark report as text tables.

    Args:
        report: Summary of ground truth and detector verdicts

    Returns:
        Formatted string for display
    """
    lines = []
    lines.append("=" * 80)
    lines.append("BENCHMARK REPORT")
    lines.append("=" * 80)

    lines.append(f"\nGround truth records: {report.ground_truth_total}")
    for cwe, count in report.ground_truth_by_cwe.items():
        lines.append(f"  {cwe:<12} {count:>6}")
    if report.ground_truth_by_type:
        lines.append("\nBy vulnerability type:")
        for vtype, count in report.ground_truth_by_type.items():
            lines.append(f"  {vtype:<40} {count:>6}")

    for summary in report.detectors:
        t = summary.totals
        lines.append("\n" + "-" * 80)
        lines.append(f"DETECTOR: {summary.detector}")
        lines.append("-" * 80)
        lines.append(
            f"TP={t.TP} FP={t.FP} FN={t.FN} SKIPPED={t.SKIPPED} "
            f"precision={_pct(t.precision)} recall={_pct(t.recall)}"
        )
        if summary.by_cwe:
            lines.append("")
            lines.append(f"{'CWE':<12} {'TP':>5} {'FP':>5} {'FN':>5} {'SKIP':>5}")
            for cwe, c in summary.by_cwe.items():
                lines.append(f"{cwe:<12} {c.TP:>5} {c.FP:>5} {c.FN:>5} {c.SKIPPED:>5}")

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)


def report_to_dict(report: BenchmarkReport) -> dict[str, Any]:
    """Convert a report to JSON-serializable data, including precision and recall."""

    def counts(c: VerdictCounts) -> dict[str, Any]:
        return {**asdict(c), "precision": c.precision, "recall": c.recall}

    return {
        "ground_truth": {
            "total": report.ground_truth_total,
            "by_cwe": report.ground_truth_by_cwe,
            "by_type": report.ground_truth_by_type,
        },
        "detectors": {
            s.detector: {
                "totals": counts(s.totals),
                "by_cwe": {cwe: counts(c) for cwe, c in s.by_cwe.items()},
            }
            for s in report.detectors
        },
    }


def record_to_dict(record: GroundTruthRecord) -> dict[str, Any]:
    return asdict(record)


def verdict_to_dict(verdict: Verdict) -> dict[str, Any]:
    data = asdict(verdict)
    data["result"] = verdict.result.value
    data["detected_line_range"] = (
        list(verdict.detected_line_range) if verdict.detected_line_range is not None else None
    )
    return data
