"""Classification of response body lines by rate-limiter markers."""

from __future__ import annotations

from dataclasses import dataclass

ALLOWED_MARKER = "Allowed"
DISALLOWED_MARKER = "Disallowed"


@dataclass(frozen=True)
class LineVerdict:
    """Markers found on a single body line.

    The two checks are independent literal, case-sensitive substring
    matches. A line may carry both, either or neither.
    """

    allowed: bool
    disallowed: bool


def classify_line(line: str) -> LineVerdict:
    """Return which rate-limiter markers appear in ``line``."""
    return LineVerdict(
        allowed=ALLOWED_MARKER in line,
        disallowed=DISALLOWED_MARKER in line,
    )
