"""Sleep-stage bar chart: segment layout, hit-testing and matplotlib rendering."""

from .stages import (
    SleepStage, SleepDetail, Segment,
    build_segments, layout_widths, iter_spans, left_edges,
    hit_test, clamp_indicator,
)
from .style import ChartStyle, LineStyle, PaintStyle, TransitionStyle, TransitionValue
from .painter import SleepDurationPainter

__version__ = '0.1.0'
