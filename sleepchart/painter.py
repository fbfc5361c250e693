"""
painter.py — Draws the sleep duration chart onto a matplotlib Axes.

The Axes is used as a pixel canvas: x runs 0..width left to right, y runs
0..height top to bottom, one unit per pixel.  paint() clears the Axes and
redraws everything, so it can be called again on every indicator move.

Layers, back to front:
  background, dashed grid, tooltip, indicator, stage bars, bottom dates
"""

import numpy as np
from matplotlib.collections import LineCollection
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.offsetbox import AnnotationBbox, HPacker, TextArea
from matplotlib.patches import PathPatch, Rectangle
from matplotlib.path import Path

from .stages import hit_test, iter_spans, level_from_stage
from .style import ChartStyle, format_clock, stage_name

ARC_POINTS = 8          # vertices per rounded corner
GRADIENT_STEPS = 32     # pieces per connector line
CURVE_EDGE_EXTRA = 3.0  # px a curve edge reaches past the bar


# ── Path helpers ────────────────────────────────────────────────────────
def rect_vertices(x, y, w, h):
    return [(x + w, y), (x + w, y + h), (x, y + h), (x, y)]


def rounded_rect_vertices(x, y, w, h, r):
    """Outline of a rounded rectangle, same winding as rect_vertices()."""
    r = max(0.0, min(r, w / 2, h / 2))
    if r == 0:
        return rect_vertices(x, y, w, h)
    corners = [
        (x + w - r, y + r, -90),
        (x + w - r, y + h - r, 0),
        (x + r, y + h - r, 90),
        (x + r, y + r, 180),
    ]
    verts = []
    for cx, cy, a0 in corners:
        a = np.deg2rad(np.linspace(a0, a0 + 90, ARC_POINTS))
        verts.extend(zip(cx + r * np.cos(a), cy + r * np.sin(a)))
    return verts


def closed_path(verts):
    verts = list(verts)
    return Path(verts + [verts[0]], closed=True)


def rounded_rect_path(x, y, w, h, r):
    return closed_path(rounded_rect_vertices(x, y, w, h, r))


def difference_clip(outer_verts, hole_verts):
    """Clip path covering the bounding box of both shapes minus the hole."""
    pts = np.array(list(outer_verts) + list(hole_verts))
    x0, y0 = pts.min(axis=0) - 1
    x1, y1 = pts.max(axis=0) + 1
    return Path.make_compound_path(
        closed_path(rect_vertices(x0, y0, x1 - x0, y1 - y0)),
        closed_path(list(reversed(hole_verts))),
    )


class SleepDurationPainter:
    """Paints one frame of the chart for a given indicator position.

    details are laid-out Segments (see stages.build_segments); their widths
    should add up to the width passed to paint().
    """

    def __init__(self, details, start_time, end_time, style=None,
                 indicator_position=0.0):
        self.details = list(details)
        self.start_time = start_time
        self.end_time = end_time
        self.style = style if style is not None else ChartStyle()
        self.indicator_position = indicator_position

        # Set by paint() from the canvas size
        self.chart_height = 0.0
        self.bar_height = 0.0
        self.start_height = 0.0
        self.curve_edge_height = 0.0
        self.highlighted = None
        self._z = 0

    def should_repaint(self, old):
        return old.indicator_position != self.indicator_position

    @property
    def chart_top(self):
        return self.style.title_height + self.style.title_gap

    def _next_z(self):
        self._z += 1
        return self._z

    def paint(self, ax, size):
        width, height = size
        s = self.style
        self.chart_height = (height - s.title_height - s.title_gap
                             - s.x_axis_title_offset - s.x_axis_title_height)
        self.bar_height = self.chart_height * s.height_unit
        self.start_height = self.chart_height * s.height_unit
        self.curve_edge_height = self.bar_height / 2 + CURVE_EDGE_EXTRA
        self._z = 0

        ax.clear()
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.set_axis_off()

        self._draw_background(ax, width)
        self._draw_lines(ax, width)
        self._draw_title(ax, width)
        self._draw_indicator(ax)
        self._draw_bar_area(ax)
        self._draw_bottom_info(ax, width, height)

    # ── Background and grid ─────────────────────────────────────────────
    def _draw_background(self, ax, width):
        ax.add_patch(Rectangle((0, self.chart_top), width, self.chart_height,
                               facecolor=self.style.bg_color, edgecolor='none',
                               zorder=self._next_z()))

    def _dash_segments(self, start, stop, line_style):
        step = line_style.width + line_style.space
        if step <= 0 or stop <= start:
            return np.empty((0, 2))
        starts = np.arange(start, stop, step)
        return np.column_stack([starts, starts + line_style.width])

    def _add_dashes(self, ax, segments):
        paint = self.style.divider_paint_style
        ax.add_collection(LineCollection(
            segments, colors=paint.color, linewidths=paint.stroke_width,
            capstyle=paint.capstyle, zorder=self._next_z()))

    def _draw_lines(self, ax, width):
        s = self.style
        segments = []

        # Horizontal: horizontal_line_count intervals -> count + 1 lines
        dashes = self._dash_segments(0, width, s.horizontal_line_style)
        if s.horizontal_line_count > 0:
            spacing = self.chart_height / s.horizontal_line_count
            for i in range(s.horizontal_line_count + 1):
                y = self.chart_top + i * spacing
                segments.extend([[(x0, y), (x1, y)] for x0, x1 in dashes])

        # Vertical: left and right chart borders
        top = self.chart_top
        dashes = self._dash_segments(top, top + self.chart_height,
                                     s.vertical_line_style)
        for x in (0, width):
            segments.extend([[(x, y0), (x, y1)] for y0, y1 in dashes])

        if segments:
            self._add_dashes(ax, segments)

    # ── Tooltip ─────────────────────────────────────────────────────────
    def _draw_title(self, ax, width):
        """Info box over the segment under the indicator."""
        s = self.style
        self.highlighted = hit_test(self.details, self.indicator_position)
        if self.highlighted is None:
            return
        _, seg, seg_left = self.highlighted

        bg_w, bg_h = s.tooltip_width, s.tooltip_height
        bg_x = seg_left + seg.width / 2 - bg_w / 2
        if bg_x < 0:
            bg_x = 0
        elif bg_x + bg_w > width:
            bg_x = width - bg_w
        bg_y = (s.title_height - bg_h) / 2
        z = self._next_z()

        ax.add_patch(PathPatch(
            rounded_rect_path(bg_x, bg_y, bg_w, bg_h, s.tooltip_radius),
            facecolor=s.tooltip_bg, edgecolor='none', zorder=z))

        title = HPacker(children=[
            TextArea(stage_name(seg.stage), textprops=s.tooltip_title_text),
            TextArea(str(seg.duration), textprops=s.tooltip_minutes_text),
            TextArea('min', textprops=s.tooltip_title_text),
        ], align='baseline', pad=0, sep=0)
        ax.add_artist(AnnotationBbox(
            title, (bg_x + bg_w / 2, bg_y + 2), xycoords='data',
            box_alignment=(0.5, 1.0), frameon=False, pad=0, zorder=z))

        time_range = f"{format_clock(seg.start_time)} ~ {format_clock(seg.end_time)}"
        ax.text(bg_x + bg_w / 2, bg_y + bg_h - 2, time_range,
                ha='center', va='bottom', zorder=z, **s.tooltip_time_text)

    # ── Indicator ───────────────────────────────────────────────────────
    def _draw_indicator(self, ax):
        s = self.style
        x = self.indicator_position
        start_y = self.chart_top
        end_y = start_y + self.chart_height
        z = self._next_z()

        ax.plot([x, x], [start_y - s.title_gap - 1, end_y],
                color=s.indicator_color, linewidth=1.0, zorder=z)

        hw, hh = s.handle_width, s.handle_height
        ax.add_patch(PathPatch(
            rounded_rect_path(x - hw / 2, end_y - hh / 2, hw, hh, s.handle_radius),
            facecolor=s.handle_fill, edgecolor=s.indicator_color,
            linewidth=1.0, zorder=z))

    # ── Bars ────────────────────────────────────────────────────────────
    def _bar_top(self, stage):
        return self.chart_top + self.start_height * level_from_stage(stage)

    def _draw_bar_area(self, ax):
        for i, seg, left in iter_spans(self.details):
            ax.add_patch(PathPatch(
                rounded_rect_path(left, self._bar_top(seg.stage), seg.width,
                                  self.bar_height, self.style.bar_radius),
                facecolor=self.style.stage_color(seg.stage), edgecolor='none',
                zorder=self._next_z()))
            self._draw_curve_edge(ax, i, left)
            if i > 0:
                self._draw_connected_line(ax, i, left)

    def _draw_connected_line(self, ax, index, left):
        """1px vertical gradient joining bar index-1 to bar index."""
        prev_stage = self.details[index - 1].stage
        stage = self.details[index].stage
        colors = self.style.transition_colors(prev_stage, stage)
        if not colors:
            return

        start_y = self._bar_top(prev_stage)
        end_y = self._bar_top(stage)
        y0 = min(start_y, end_y) + self.bar_height
        y1 = max(start_y, end_y)
        if y1 <= y0:
            return

        ys = np.linspace(y0, y1, GRADIENT_STEPS + 1)
        pieces = [[(left, a), (left, b)] for a, b in zip(ys[:-1], ys[1:])]
        cmap = LinearSegmentedColormap.from_list('connector', colors)
        ax.add_collection(LineCollection(
            pieces, colors=cmap(np.linspace(0, 1, GRADIENT_STEPS)),
            linewidths=1.0, zorder=self._next_z()))

    def _draw_curve_edge(self, ax, index, left):
        """Square off the bar corners that face a neighboring stage."""
        seg = self.details[index]
        level = level_from_stage(seg.stage)
        center_y = self._bar_top(seg.stage) + self.bar_height / 2

        if index > 0:
            prev_level = level_from_stage(self.details[index - 1].stage)
            if prev_level != level:
                self._draw_clipped_corner(ax, index, left, left, center_y,
                                          top=prev_level < level, at_left=True)

        if index < len(self.details) - 1:
            next_level = level_from_stage(self.details[index + 1].stage)
            if next_level != level:
                self._draw_clipped_corner(ax, index, left, left + seg.width,
                                          center_y, top=next_level < level,
                                          at_left=False)

    def _draw_clipped_corner(self, ax, index, left, center_x, center_y, top,
                             at_left):
        """Fill the quarter of the bar next to center_x, reaching
        curve_edge_height above (top) or below the bar center, minus the
        rounded half-bar rect just outside the bar."""
        seg = self.details[index]
        edge = self.curve_edge_height
        half_w = seg.width / 2
        dy = -edge if top else edge
        dx = half_w if at_left else -half_w
        nudge = -0.5 if at_left else 0.5

        corner = [
            (center_x, center_y),
            (center_x + nudge, center_y + dy),
            (center_x + dx, center_y + dy),
            (center_x + dx, center_y),
        ]
        if top:
            hole_y = center_y - self.bar_height
        else:
            hole_y = center_y + self.bar_height / 2
        hole = rounded_rect_vertices(left, hole_y, seg.width,
                                     self.bar_height / 2, self.style.bar_radius)

        patch = PathPatch(closed_path(corner),
                          facecolor=self.style.stage_color(seg.stage),
                          edgecolor='none', zorder=self._next_z(),
                          gid=f"curve-edge:{index}:{'top' if top else 'bottom'}-"
                              f"{'left' if at_left else 'right'}")
        ax.add_patch(patch)
        patch.set_clip_path(difference_clip(corner, hole), ax.transData)

    # ── Bottom info ─────────────────────────────────────────────────────
    def _draw_bottom_info(self, ax, width, height):
        s = self.style
        y = height - s.x_axis_title_offset - s.x_axis_title_height + 5
        z = self._next_z()
        ax.text(0, y, s.date_formatter(self.start_time),
                ha='left', va='top', zorder=z, **s.bottom_info_text)
        ax.text(width, y, s.date_formatter(self.end_time),
                ha='right', va='top', zorder=z, **s.bottom_info_text)
