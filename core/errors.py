"""
Failure classification and enhancement for browser steps.

Failures coming out of Playwright (or plain assertions) are reduced to a
``RawFailure`` at the boundary, classified into a closed ``ErrorKind`` taxonomy
and rendered as a multi-block diagnostic that rides on ``EnhancedStepError``.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class ErrorKind(str, Enum):
    TIMEOUT = "Timeout"
    ELEMENT_NOT_FOUND = "ElementNotFound"
    STALE_ELEMENT = "StaleElement"
    NOT_VISIBLE = "NotVisible"
    DISABLED = "Disabled"
    NOT_CLICKABLE = "NotClickable"
    NAVIGATION_FAILURE = "NavigationFailure"
    ASSERTION_FAILURE = "AssertionFailure"
    UNKNOWN = "Unknown"


TIMEOUT_ERROR_NAMES = frozenset({"TimeoutError"})
ASSERTION_ERROR_NAMES = frozenset({"AssertionError"})

# Refinements for timeout messages; several may apply to the same message.
TIMEOUT_NOTES = (
    ("waiting for locator", "element not found or not interactive"),
    ("navigation", "page navigation timed out"),
    ("waiting for selector", "selector not found within timeout"),
)

KIND_LABELS = {
    ErrorKind.TIMEOUT: "⏱️  Timeout error",
    ErrorKind.ELEMENT_NOT_FOUND: "🔍 Element not found",
    ErrorKind.STALE_ELEMENT: "🔄 Stale element (detached from DOM)",
    ErrorKind.NOT_VISIBLE: "👻 Element not visible",
    ErrorKind.DISABLED: "🚫 Element disabled",
    ErrorKind.NOT_CLICKABLE: "🖱️  Element not clickable",
    ErrorKind.NAVIGATION_FAILURE: "🧭 Navigation failure",
    ErrorKind.ASSERTION_FAILURE: "❗ Assertion failed",
}

SUGGESTIONS = {
    ErrorKind.TIMEOUT: (
        "increase timeout if operation needs more time",
        "check if element selector is correct",
        "verify page is fully loaded",
    ),
    ErrorKind.NOT_VISIBLE: (
        "check if element is hidden by CSS",
        "scroll element into view",
        "wait for animations to complete",
    ),
}


@dataclass(frozen=True)
class RawFailure:
    """Structured view of an opaque failure, extracted at the collaborator boundary."""

    declared_kind: str
    message: str
    stack: Optional[str] = None


@dataclass(frozen=True)
class FailureRecord:
    step_name: str
    kind: ErrorKind
    original_message: str
    declared_kind: str
    context: Optional[str] = None
    suggestions: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = field(default=())
    stack_trace: Optional[str] = None


class EnhancedStepError(Exception):
    """A step failure carrying its classified diagnostic as the exception message."""

    def __init__(self, record: FailureRecord):
        super().__init__(format_failure(record))
        self.record = record

    @property
    def kind(self) -> ErrorKind:
        return self.record.kind


def describe_failure(error: BaseException) -> RawFailure:
    """Reduce any exception (Playwright, assertion, plain Python) to a RawFailure."""
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        message = str(error)
    stack = getattr(error, "stack", None)
    if not isinstance(stack, str) or not stack:
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
    return RawFailure(declared_kind=type(error).__name__, message=message, stack=stack or None)


def classify_kind(raw: RawFailure) -> ErrorKind:
    message = raw.message
    if raw.declared_kind in TIMEOUT_ERROR_NAMES or "timeout" in message:
        return ErrorKind.TIMEOUT
    if "Element is not attached" in message:
        return ErrorKind.STALE_ELEMENT
    if "not visible" in message:
        return ErrorKind.NOT_VISIBLE
    if "not enabled" in message or "disabled" in message:
        return ErrorKind.DISABLED
    if "not clickable" in message or "intercepted" in message:
        return ErrorKind.NOT_CLICKABLE
    if "Navigation" in message:
        return ErrorKind.NAVIGATION_FAILURE
    if raw.declared_kind in ASSERTION_ERROR_NAMES or "expect" in message:
        return ErrorKind.ASSERTION_FAILURE
    return ErrorKind.UNKNOWN


def classify_failure(
    error: Union[BaseException, RawFailure],
    step_name: str,
    context: Optional[str] = None,
) -> FailureRecord:
    raw = error if isinstance(error, RawFailure) else describe_failure(error)
    kind = classify_kind(raw)
    notes: Tuple[str, ...] = ()
    if kind is ErrorKind.TIMEOUT:
        notes = tuple(note for needle, note in TIMEOUT_NOTES if needle in raw.message)
    return FailureRecord(
        step_name=step_name,
        kind=kind,
        original_message=raw.message,
        declared_kind=raw.declared_kind,
        context=context,
        suggestions=SUGGESTIONS.get(kind, ()),
        notes=notes,
        stack_trace=raw.stack,
    )


def format_failure(record: FailureRecord) -> str:
    """Render the canonical multi-line diagnostic for a failure record."""
    label = KIND_LABELS.get(record.kind, f"❓ {record.declared_kind}")
    if record.notes:
        label = f"{label}: {'; '.join(record.notes)}"

    lines = [f"❌ Step failed: {record.step_name}", label, f"📝 Original error: {record.original_message}"]
    if record.context:
        lines.append(f"💡 Context: {record.context}")
    if record.suggestions:
        lines.append("🔧 Suggestions:")
        lines.extend(f"   • {suggestion}" for suggestion in record.suggestions)
    lines.append("📚 Stack trace:")
    lines.append(record.stack_trace or "(not available)")
    return "\n".join(lines)


def enhance_error(
    error: BaseException,
    step_name: str,
    context: Optional[str] = None,
) -> EnhancedStepError:
    """
    Build the enhanced error for ``error`` without raising it.

    An error that is already enhanced is returned as is so its kind is never
    re-classified.
    """
    if isinstance(error, EnhancedStepError):
        return error
    enhanced = EnhancedStepError(classify_failure(error, step_name, context))
    enhanced.__cause__ = error
    return enhanced


class ReportFormatError(ValueError):
    """The structured step/scenario report is missing or malformed."""


class EnvironmentSetupError(RuntimeError):
    """A scenario execution environment could not be acquired."""
