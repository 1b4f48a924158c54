"""Shorthand task syntax: ``project::title::description::duration``.

Two to four ``::``-separated segments. Project and title are required.

With three segments the extra slot is ambiguous: a valid duration ("1.5h")
becomes ``duration_minutes``, anything else becomes the description, and no
warning is produced either way. With four segments the last slot can only be a
duration, so text that fails the duration grammar is dropped with a warning.
Existing shorthand habits depend on this asymmetry; keep it.
"""
import math
import re

from ..schemas import TaskDraft

DELIMITER = "::"
MINUTES_PER_UNIT = {"m": 1, "h": 60, "d": 480}  # d = 8h workday
DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)(m|h|d)$", re.IGNORECASE)


def parse_duration(text: str) -> int | None:
    """Parse "15m" / "1.5h" / "0.5d" into minutes; None when it doesn't match."""
    match = DURATION_RE.match(text.strip())
    if not match:
        return None
    value = float(match.group(1))
    # half-up, not round()'s half-to-even
    return math.floor(value * MINUTES_PER_UNIT[match.group(2).lower()] + 0.5)


def is_shorthand(text: str) -> bool:
    return DELIMITER in text


def parse_shorthand(text: str) -> TaskDraft | None:
    segments = [s.strip() for s in text.split(DELIMITER)]

    if len(segments) < 2 or len(segments) > 4:
        return None
    if not segments[0] or not segments[1]:
        return None

    draft = TaskDraft(project=segments[0], title=segments[1])

    if len(segments) == 3 and segments[2]:
        minutes = parse_duration(segments[2])
        if minutes is not None:
            draft.duration_minutes = minutes
        else:
            draft.description = segments[2]

    if len(segments) == 4:
        if segments[2]:
            draft.description = segments[2]
        if segments[3]:
            minutes = parse_duration(segments[3])
            if minutes is not None:
                draft.duration_minutes = minutes
            else:
                draft.warnings.append(f'"{segments[3]}" is not a valid duration')

    return draft
