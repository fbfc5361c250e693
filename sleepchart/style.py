"""
style.py — Appearance settings for the sleep duration chart.

Colors are matplotlib color strings, lengths are pixels.
"""

from dataclasses import dataclass, field
from enum import Enum

from .stages import SleepStage, level_from_stage


@dataclass(frozen=True)
class LineStyle:
    """Dash pattern: `width` px drawn, `space` px skipped."""
    width: float = 5.0
    space: float = 3.0


@dataclass(frozen=True)
class PaintStyle:
    color: str = '#EEEEEE'
    stroke_width: float = 1.0
    capstyle: str = 'round'


class TransitionValue(Enum):
    DEEP_AND_LIGHT = 'deep_and_light'
    DEEP_AND_REM = 'deep_and_rem'
    LIGHT_AND_REM = 'light_and_rem'


TRANSITION_PAIRS = {
    frozenset((SleepStage.DEEP, SleepStage.LIGHT)): TransitionValue.DEEP_AND_LIGHT,
    frozenset((SleepStage.DEEP, SleepStage.REM)): TransitionValue.DEEP_AND_REM,
    frozenset((SleepStage.LIGHT, SleepStage.REM)): TransitionValue.LIGHT_AND_REM,
}


@dataclass(frozen=True)
class TransitionStyle:
    """Connector line between two stages: a top-to-bottom gradient or a
    solid color, never both."""
    value: TransitionValue
    gradient_colors: tuple = None
    color: str = None

    def __post_init__(self):
        if (self.gradient_colors is None) == (self.color is None):
            raise ValueError("TransitionStyle needs exactly one of "
                             "gradient_colors or color")

    @property
    def colors(self):
        if self.gradient_colors is not None:
            return list(self.gradient_colors)
        return [self.color, self.color]


DEFAULT_STAGE_COLORS = {
    SleepStage.LIGHT: '#4870F3',
    SleepStage.DEEP: '#21B2A1',
    SleepStage.REM: '#FCD166',
    SleepStage.AWAKE: '#FF6B6B',
    SleepStage.NOT_WORN: '#CCCCCC',
    SleepStage.UNKNOWN: '#999999',
}

DEFAULT_TRANSITION_STYLES = (
    TransitionStyle(TransitionValue.DEEP_AND_LIGHT,
                    gradient_colors=('#4870F3', '#21B2A1')),
    TransitionStyle(TransitionValue.DEEP_AND_REM,
                    gradient_colors=('#FCD166', '#21B2A1')),
    TransitionStyle(TransitionValue.LIGHT_AND_REM,
                    gradient_colors=('#FCD169', '#4870F3')),
)

STAGE_NAMES = {
    SleepStage.LIGHT: 'Light',
    SleepStage.DEEP: 'Deep',
    SleepStage.REM: 'REM',
    SleepStage.AWAKE: 'Awake',
    SleepStage.NOT_WORN: 'Not worn',
}


def default_date_formatter(dt):
    return dt.strftime('%m-%d %H:%M')


def format_clock(dt):
    return dt.strftime('%H:%M')


def stage_name(stage):
    return STAGE_NAMES.get(stage, 'Unknown')


@dataclass
class ChartStyle:
    # Geometry
    height_unit: float = 1 / 8
    title_height: float = 60.0
    title_gap: float = 10.0
    x_axis_title_offset: float = 4.0
    x_axis_title_height: float = 20.0
    bar_radius: float = 10.0

    # Background and grid
    bg_color: str = '#FAFBFF'
    horizontal_line_style: LineStyle = field(default_factory=LineStyle)
    vertical_line_style: LineStyle = field(default_factory=LineStyle)
    horizontal_line_count: int = 8
    divider_paint_style: PaintStyle = field(default_factory=PaintStyle)

    # Stages
    stage_colors: dict = field(default_factory=lambda: dict(DEFAULT_STAGE_COLORS))
    transition_styles: tuple = DEFAULT_TRANSITION_STYLES

    # Bottom info
    bottom_info_text: dict = field(default_factory=lambda: dict(
        color='#666666', fontsize=10))
    date_formatter: object = default_date_formatter

    # Tooltip
    tooltip_width: float = 129.0
    tooltip_height: float = 45.0
    tooltip_radius: float = 8.0
    tooltip_bg: tuple = (28 / 255, 107 / 255, 1.0, 0.03)
    tooltip_title_text: dict = field(default_factory=lambda: dict(
        color='#1B6BFF', fontsize=16))
    tooltip_minutes_text: dict = field(default_factory=lambda: dict(
        color='#1B6BFF', fontsize=20, fontweight='semibold'))
    tooltip_time_text: dict = field(default_factory=lambda: dict(
        color='#999999', fontsize=10, fontweight='bold'))

    # Indicator
    indicator_color: str = '#DADADA'
    handle_fill: str = '#F6F6F6'
    handle_width: float = 18.0
    handle_height: float = 9.0
    handle_radius: float = 6.0

    def stage_color(self, stage):
        return self.stage_colors.get(stage, DEFAULT_STAGE_COLORS[stage])

    def transition_colors(self, prev_stage, stage):
        """Top-to-bottom connector colors between two neighboring stages,
        or None for two bars on the same row."""
        if level_from_stage(prev_stage) == level_from_stage(stage):
            return None
        value = TRANSITION_PAIRS.get(frozenset((prev_stage, stage)))
        for ts in self.transition_styles:
            if value is not None and ts.value == value:
                return ts.colors
        upper, lower = sorted((prev_stage, stage), key=level_from_stage)
        return [self.stage_color(upper), self.stage_color(lower)]
