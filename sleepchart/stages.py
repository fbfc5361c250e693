"""
stages.py — Sleep stages, segment layout and indicator hit-testing.

A night is a list of stage transitions (SleepDetail).  build_segments()
turns it into Segments whose pixel widths are proportional to their
durations; iter_spans() places them left-to-right with no gaps.  The
painter draws bars from iter_spans() and hit_test() walks the very same
generator, so the highlighted segment is always the one under the
indicator.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SleepStage(Enum):
    LIGHT = 'light'
    DEEP = 'deep'
    AWAKE = 'awake'
    NOT_WORN = 'not_worn'
    REM = 'rem'
    UNKNOWN = 'unknown'


# Device mode codes
STAGE_MODES = {
    SleepStage.LIGHT: 1,
    SleepStage.DEEP: 2,
    SleepStage.AWAKE: 3,
    SleepStage.NOT_WORN: 4,
    SleepStage.REM: 5,
    SleepStage.UNKNOWN: -1,
}
MODE_STAGES = {mode: stage for stage, mode in STAGE_MODES.items()}

# Bar row, in units of height_unit * chart_height from the top of the chart
STAGE_LEVELS = {
    SleepStage.REM: 2,
    SleepStage.LIGHT: 4,
    SleepStage.DEEP: 6,
}
DEFAULT_LEVEL = 7

_STAGE_ALIASES = {
    'notworn': SleepStage.NOT_WORN,
    'not worn': SleepStage.NOT_WORN,
    'not-worn': SleepStage.NOT_WORN,
    'wake': SleepStage.AWAKE,
    'other': SleepStage.UNKNOWN,
}


def mode_from_stage(stage):
    return STAGE_MODES[stage]


def stage_from_mode(mode):
    """Device mode code -> SleepStage; unrecognised codes are UNKNOWN."""
    return MODE_STAGES.get(int(mode), SleepStage.UNKNOWN)


def stage_from_name(name):
    """Parse 'light', 'REM', 'not_worn', ... into a SleepStage."""
    key = str(name).strip().lower()
    if key in _STAGE_ALIASES:
        return _STAGE_ALIASES[key]
    try:
        return SleepStage(key.replace(' ', '_').replace('-', '_'))
    except ValueError:
        raise ValueError(f"Unknown sleep stage: {name!r}") from None


def level_from_stage(stage):
    return STAGE_LEVELS.get(stage, DEFAULT_LEVEL)


@dataclass(frozen=True)
class SleepDetail:
    """One stage transition: the device entered `stage` at `time`."""
    stage: SleepStage
    time: datetime


@dataclass(frozen=True)
class Segment:
    stage: SleepStage
    width: float           # px
    start_time: datetime
    end_time: datetime
    duration: int          # minutes


# ── Layout ──────────────────────────────────────────────────────────────
def layout_widths(durations, width, total=None):
    """Pixel width of each duration: width * duration / total.

    total defaults to sum(durations).  An empty list or a non-positive
    total gives no widths at all.
    """
    durations = list(durations)
    if total is None:
        total = sum(durations)
    if not durations or total <= 0:
        return []
    return [width * (d / total) for d in durations]


def iter_spans(segments):
    """Yield (index, segment, left) with each left edge the running sum
    of the preceding widths."""
    left = 0.0
    for i, seg in enumerate(segments):
        yield i, seg, left
        left += seg.width


def left_edges(segments):
    return [left for _, _, left in iter_spans(segments)]


def build_segments(details, width, total_duration=None, end_time=None):
    """Convert stage transitions into Segments spanning `width` pixels.

    Each detail lasts until the next one (whole minutes).  The last detail
    only marks the end of the session unless end_time is given, in which
    case it runs until end_time (ValueError if end_time is earlier).
    total_duration (minutes) defaults to the sum of all durations; a
    non-positive total gives an empty list.
    """
    details = sorted(details, key=lambda d: d.time)
    if not details:
        return []
    if end_time is not None and end_time < details[-1].time:
        raise ValueError(f"End time {end_time:%Y-%m-%d %H:%M} is before the "
                         f"last stage change at {details[-1].time:%Y-%m-%d %H:%M}")

    times = [d.time for d in details]
    if end_time is not None:
        times.append(end_time)

    spans = []
    for i in range(len(times) - 1):
        start, end = times[i], times[i + 1]
        minutes = int((end - start).total_seconds() // 60)
        spans.append((details[i].stage, start, end, max(minutes, 0)))

    durations = [s[3] for s in spans]
    widths = layout_widths(durations, width, total_duration)
    return [Segment(stage=stage, width=w, start_time=start, end_time=end,
                    duration=minutes)
            for (stage, start, end, minutes), w in zip(spans, widths)]


# ── Hit-testing ─────────────────────────────────────────────────────────
def hit_test(segments, x):
    """Return (index, segment, left) of the segment under x, or None.

    Intervals are [left, right) except the last one, which is [left, right]
    so that x == chart width still hits it.  The last right edge also
    matches values within float rounding of it.
    """
    last = len(segments) - 1
    for i, seg, left in iter_spans(segments):
        right = left + seg.width
        if i < last:
            if left <= x < right:
                return i, seg, left
        elif left <= x <= right or math.isclose(x, right, rel_tol=1e-9, abs_tol=1e-9):
            return i, seg, left
    return None


def clamp_indicator(x, width):
    return min(max(x, 0.0), width)
