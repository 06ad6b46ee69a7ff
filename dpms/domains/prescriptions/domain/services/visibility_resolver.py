"""
Visibility Resolver

Decides, on every read, whether a scannable payload still shows its artifact.
"""

from dataclasses import dataclass
from typing import Iterable

from ..entities import MedicationLine, ScannablePayload
from ..value_objects import ViewerRole


@dataclass(frozen=True)
class VisibilityDecision:
    reveal_payload: bool
    all_priced: bool


def is_fully_priced(lines: Iterable[MedicationLine]) -> bool:
    """True when there is at least one line and every line has an amount."""
    lines = list(lines)
    return bool(lines) and all(line.is_priced for line in lines)


def resolve_visibility(lines: Iterable[MedicationLine], viewer_role: ViewerRole) -> VisibilityDecision:
    """
    Once every line is priced the artifact is hidden from everyone but admins.

    A prescription with no lines is never fully priced, so it stays visible.
    """
    all_priced = is_fully_priced(lines)
    reveal = not all_priced or viewer_role.can_see_issued_payload()
    return VisibilityDecision(reveal_payload=reveal, all_priced=all_priced)


def apply_visibility(
    payload: ScannablePayload,
    lines: Iterable[MedicationLine],
    viewer_role: ViewerRole,
) -> ScannablePayload:
    """Return the payload as the viewer may see it."""
    decision = resolve_visibility(lines, viewer_role)
    return payload if decision.reveal_payload else payload.redacted()
