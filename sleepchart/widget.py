"""
widget.py — Interactive sleep duration chart.

Controls:
  click + drag    → move the time indicator
  Left / Right    → nudge indicator 1 px
  Shift+Left/Right→ nudge indicator 10 px
"""

import matplotlib.pyplot as plt

from .painter import SleepDurationPainter
from .stages import clamp_indicator
from .style import ChartStyle

# ── Constants ───────────────────────────────────────────────────────────
DPI = 72                 # one point per pixel
NUDGE_PX = 1.0
NUDGE_FAST_PX = 10.0


class SleepDurationChart:
    """Owns the indicator position and repaints the chart as it moves."""

    def __init__(self, details, start_time, end_time, size=(360, 260),
                 style=None, indicator_position=None, fig=None):
        self.details = list(details)
        self.start_time = start_time
        self.end_time = end_time
        self.width, self.height = size
        self.style = style if style is not None else ChartStyle()
        self._dragging = False
        self._drag_x = None

        if indicator_position is None:
            indicator_position = self.width / 2
        self.indicator_position = clamp_indicator(indicator_position, self.width)

        if fig is None:
            fig = plt.figure(figsize=(self.width / DPI, self.height / DPI),
                             dpi=DPI)
        self.fig = fig
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title('Sleep Duration')

        self.painter = None
        self.repaint()

        self.fig.canvas.mpl_connect('button_press_event', self.on_click)
        self.fig.canvas.mpl_connect('button_release_event', self.on_release)
        self.fig.canvas.mpl_connect('motion_notify_event', self.on_motion)
        self.fig.canvas.mpl_connect('key_press_event', self.on_key)

    def _make_painter(self):
        return SleepDurationPainter(
            self.details, self.start_time, self.end_time, style=self.style,
            indicator_position=self.indicator_position)

    def repaint(self, force=True):
        """Redraw if forced or if the indicator moved since the last paint.
        Returns True when a paint happened."""
        painter = self._make_painter()
        if not force and self.painter is not None \
                and not painter.should_repaint(self.painter):
            return False
        painter.paint(self.ax, (self.width, self.height))
        self.painter = painter
        self.fig.canvas.draw_idle()
        return True

    @property
    def highlighted(self):
        """(index, segment, left) under the indicator, or None."""
        return self.painter.highlighted if self.painter else None

    def move_indicator(self, dx):
        self.set_indicator(self.indicator_position + dx)

    def set_indicator(self, x):
        self.indicator_position = clamp_indicator(x, self.width)
        self.repaint(force=False)

    # ── Events ──────────────────────────────────────────────────────────
    def on_click(self, event):
        if event.inaxes != self.ax or event.button != 1:
            return
        self._dragging = True
        self._drag_x = event.xdata

    def on_release(self, event):
        self._dragging = False
        self._drag_x = None

    def on_motion(self, event):
        if not self._dragging or event.xdata is None:
            return
        dx = event.xdata - self._drag_x
        self._drag_x = event.xdata
        self.move_indicator(dx)

    def on_key(self, event):
        if event.key == 'right':
            self.move_indicator(NUDGE_PX)
        elif event.key == 'left':
            self.move_indicator(-NUDGE_PX)
        elif event.key == 'shift+right':
            self.move_indicator(NUDGE_FAST_PX)
        elif event.key == 'shift+left':
            self.move_indicator(-NUDGE_FAST_PX)

    def save(self, path):
        self.fig.savefig(path, dpi=DPI)
        print(f"Saved: {path}")

    def show(self):
        plt.show()
