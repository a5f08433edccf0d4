"""
Aggregation and serialization of scan results.

Helpers in this module turn the orchestrator's FileScanResult sequence into
severity summaries and plain dictionaries, used both for JSONL report export and
for the payload stored in the scan history.
"""

from collections.abc import Iterable

from core.file_io import FileWriter
from core.models import FileScanResult, Finding, Severity


def finding_to_dict(finding: Finding) -> dict:
    """Serialize a finding using the field names of the stored history records."""
    return {
        "type": finding.category,
        "severity": finding.severity.value,
        "lineNumber": finding.line_number,
        "description": finding.description,
        "codeSnippet": finding.evidence_snippet,
        "suggestion": finding.remediation or "",
    }


def result_to_record(result: FileScanResult, include_code: bool = False) -> dict:
    record = {
        "file_name": result.file_name,
        "file_path": result.file_path,
        "status": result.status.value,
        "vulnerabilities": [finding_to_dict(f) for f in result.findings],
    }
    if include_code and result.raw_code is not None:
        record["raw_code"] = result.raw_code
    return record


def all_findings(results: Iterable[FileScanResult]) -> list[Finding]:
    """Flatten findings across results, keeping result and classifier order."""
    return [finding for result in results for finding in result.findings]


def summarize(results: Iterable[FileScanResult]) -> dict[Severity, int]:
    """
    Count findings per severity.

    Every severity is present in the returned mapping, ordered from Critical to
    Info, so the result can be rendered directly as a summary row.
    """
    counts = {severity: 0 for severity in sorted(Severity, reverse=True)}
    for finding in all_findings(results):
        counts[finding.severity] += 1
    return counts


def highest_severity(findings: Iterable[Finding]) -> Severity | None:
    return max((f.severity for f in findings), default=None)


def export_results(
    results: Iterable[FileScanResult],
    writer: FileWriter,
    target: str = "",
    include_code: bool = False,
) -> int:
    """
    Write one JSON line per file result, preceded by a header line.

    Returns:
        The number of result lines written.

    Raises:
        InvalidFilePathError, FileWriteError: Propagated from the writer.
    """
    results = list(results)
    writer.write_file("", mode="w")
    writer.append_jsonl_line(
        {
            "type": "scan",
            "target": target,
            "files": len(results),
            "summary": {s.value: n for s, n in summarize(results).items()},
        }
    )
    for result in results:
        writer.append_jsonl_line(
            {"type": "file", **result_to_record(result, include_code)}
        )
    return len(results)
