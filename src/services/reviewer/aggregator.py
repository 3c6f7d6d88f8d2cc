"""Draft PR comment from reviewed findings."""

from typing import Iterable

from src.services.reviewer.schemas import Finding, FindingStatus, UserDecision

NO_ISSUES_COMMENT = "## PR Review\n\n✅ No issues found."
SUMMARY_HEADER = "## PR Review Summary\n\n"

STATUS_ICONS = {
    FindingStatus.PASS: "✅",
    FindingStatus.FAIL: "❌",
    FindingStatus.CLARIFY: "❓",
}


def is_included(finding: Finding) -> bool:
    """Approved findings and findings the user has not decided on yet."""
    return finding.user_decision in (None, UserDecision.APPROVED)


def render_finding(finding: Finding) -> str:
    lines = [f"### {STATUS_ICONS[finding.status]} {finding.status.value}: {finding.summary}"]

    if finding.evidence:
        evidence = finding.evidence[0]
        location = f"- File: `{evidence.file_path}`"
        if evidence.start_line:
            location += f" (line {evidence.start_line}"
            if evidence.end_line:
                location += f"-{evidence.end_line}"
            location += ")"
        lines.append(location)

    if finding.reason:
        lines.append(f"- Reason: {finding.reason}")
    if finding.suggestion:
        lines.append(f"- Suggestion: {finding.suggestion}")

    return "\n".join(lines) + "\n\n"


def generate_draft_comment(findings: Iterable[Finding]) -> str:
    """Render included findings as a Markdown comment, in their given order."""
    included = [f for f in findings if is_included(f)]
    if not included:
        return NO_ISSUES_COMMENT
    return SUMMARY_HEADER + "".join(render_finding(f) for f in included)
