"""Renders violations as corrective feedback text.

The output is meant to be pasted verbatim into a follow-up generation
request, so it names only payload paths and constraint descriptions.
Error codes and internal type names stay out of it.
"""

from collections.abc import Iterable

from schemaguard.core.errors import DecodeFailure, Violation, summarize_value

FEEDBACK_HEADER = "Your previous output did not match the required schema. Problems found ({count}):"
FEEDBACK_FOOTER = "Return corrected JSON only, matching the schema exactly."


def format_violation(violation: Violation, max_value_length: int = 80) -> str:
    """One line: ``- <path>: <rule> (received: <value>)``"""
    received = violation.received
    if max_value_length > 0 and len(received) > max_value_length:
        received = received[: max(max_value_length - 3, 0)] + "..."
    return f"- {violation.path_str}: {violation.message} (received: {received})"


def format_violations(violations: Iterable[Violation], max_value_length: int = 80) -> str:
    """Render violations one per line, in the order given"""
    return "\n".join(format_violation(v, max_value_length) for v in violations)


def build_feedback(violations: Iterable[Violation], max_value_length: int = 80,
                   header: str = FEEDBACK_HEADER, footer: str = FEEDBACK_FOOTER) -> str:
    """Wrap formatted violations in a corrective instruction block"""
    violations = list(violations)
    if not violations:
        return ""
    lines = [header.format(count=len(violations))]
    lines.append(format_violations(violations, max_value_length))
    if footer:
        lines.append(footer)
    return "\n".join(lines)


def describe_decode_failure(failure: DecodeFailure, max_value_length: int = 80) -> str:
    """Corrective text for output that was not parseable JSON at all"""
    location = ""
    if failure.line is not None:
        location = f" at line {failure.line}, column {failure.column}"
    excerpt = summarize_value(failure.raw_text, max_value_length) if failure.raw_text else '""'
    return (
        f"Your previous output was not valid JSON{location}: {failure.message}. "
        f"Output began with: {excerpt}\n{FEEDBACK_FOOTER}"
    )
