"""
Rendering onto an Agg canvas.
"""

from datetime import datetime, timedelta

import pytest
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure
from matplotlib.offsetbox import AnnotationBbox

from sleepchart.painter import SleepDurationPainter, rounded_rect_vertices
from sleepchart.stages import SleepStage

T0 = datetime(2026, 2, 14, 23, 0)
SIZE = (200, 260)


def render(segments, indicator, size=SIZE, **kwargs):
    fig = Figure(figsize=(size[0] / 72, size[1] / 72), dpi=72)
    FigureCanvasAgg(fig)
    ax = fig.add_axes([0, 0, 1, 1])
    painter = SleepDurationPainter(segments, T0, T0 + timedelta(minutes=100),
                                   indicator_position=indicator, **kwargs)
    painter.paint(ax, size)
    fig.canvas.draw()
    return painter, ax


def texts(ax):
    return [t.get_text() for t in ax.texts]


class TestGeometry:
    def test_chart_height(self, example_segments):
        painter, _ = render(example_segments, 100)
        # 260 - title 60 - gap 10 - offset 4 - x-axis title 20
        assert painter.chart_height == pytest.approx(166)
        assert painter.bar_height == pytest.approx(166 / 8)
        assert painter.curve_edge_height == pytest.approx(166 / 16 + 3)

    def test_axes_are_pixel_canvas(self, example_segments):
        _, ax = render(example_segments, 100)
        assert ax.get_xlim() == (0, 200)
        assert ax.get_ylim() == (260, 0)

    def test_grid_dashes(self, example_segments):
        _, ax = render(example_segments, 100)
        grid = ax.collections[0]
        # 9 horizontal lines of 25 dashes, 2 borders of 21 dashes
        assert len(grid.get_segments()) == 9 * 25 + 2 * 21

    def test_rounded_rect_radius_clamped(self):
        verts = rounded_rect_vertices(0, 0, 6, 40, 10)
        xs = [v[0] for v in verts]
        assert min(xs) == pytest.approx(0)
        assert max(xs) == pytest.approx(6)


class TestTooltip:
    def test_highlights_segment_under_indicator(self, example_segments):
        painter, ax = render(example_segments, 150)
        index, seg, left = painter.highlighted
        assert index == 1
        assert seg.stage is SleepStage.DEEP
        assert '23:30 ~ 00:30' in texts(ax)
        assert any(isinstance(a, AnnotationBbox) for a in ax.artists)

    def test_tooltip_clamped_left(self, example_segments):
        _, ax = render(example_segments, 0)
        label = next(t for t in ax.texts if '~' in t.get_text())
        assert label.get_text() == '23:00 ~ 23:30'
        assert label.get_position()[0] == pytest.approx(129 / 2)

    def test_tooltip_clamped_right(self, example_segments):
        painter, ax = render(example_segments, 200)
        assert painter.highlighted[0] == 2
        label = next(t for t in ax.texts if '~' in t.get_text())
        assert label.get_position()[0] == pytest.approx(200 - 129 / 2)

    def test_no_segments_no_tooltip(self):
        painter, ax = render([], 100)
        assert painter.highlighted is None
        assert not any('~' in t for t in texts(ax))
        assert not any(isinstance(a, AnnotationBbox) for a in ax.artists)


class TestBars:
    def test_connectors_between_stages(self, example_segments):
        _, ax = render(example_segments, 100)
        # grid + light->deep + deep->rem
        assert len(ax.collections) == 3
        light_deep = ax.collections[1].get_colors()
        assert tuple(light_deep[0]) == pytest.approx(to_rgba('#4870F3'))
        assert tuple(light_deep[-1]) == pytest.approx(to_rgba('#21B2A1'))

    def test_connector_spans_gap_between_rows(self, example_segments):
        painter, ax = render(example_segments, 100)
        segs = ax.collections[1].get_segments()
        top = 70 + painter.bar_height * 4 + painter.bar_height
        bottom = 70 + painter.bar_height * 6
        assert segs[0][0][1] == pytest.approx(top)
        assert segs[-1][1][1] == pytest.approx(bottom)
        assert segs[0][0][0] == pytest.approx(example_segments[0].width)

    def test_bar_colors(self, example_segments):
        _, ax = render(example_segments, 100)
        faces = [tuple(p.get_facecolor()) for p in ax.patches]
        for color in ('#4870F3', '#21B2A1', '#FCD166'):
            assert to_rgba(color) in faces

    def test_same_stage_neighbors_have_no_connector(self, make_segments):
        segments = make_segments(
            [SleepStage.AWAKE, SleepStage.NOT_WORN], [10, 10], 200, T0)
        _, ax = render(segments, 100)
        assert len(ax.collections) == 1

    def test_all_stages_render(self, make_segments):
        stages = list(SleepStage)
        segments = make_segments(stages, [10] * len(stages), 200, T0)
        painter, ax = render(segments, 199)
        assert painter.highlighted[1].stage is stages[-1]


class TestBottomInfo:
    def test_dates(self, example_segments):
        _, ax = render(example_segments, 100)
        assert texts(ax)[-2:] == ['02-14 23:00', '02-15 00:40']

    def test_custom_formatter(self, example_segments):
        from sleepchart.style import ChartStyle
        style = ChartStyle(date_formatter=lambda d: d.strftime('%H:%M'))
        _, ax = render(example_segments, 100, style=style)
        assert texts(ax)[-2:] == ['23:00', '00:40']


def test_should_repaint(example_segments):
    a = SleepDurationPainter(example_segments, T0, T0, indicator_position=10)
    b = SleepDurationPainter(example_segments, T0, T0, indicator_position=10)
    c = SleepDurationPainter(example_segments, T0, T0, indicator_position=11)
    assert not b.should_repaint(a)
    assert c.should_repaint(a)


def corner_patches(ax):
    return {p.get_gid(): p for p in ax.patches
            if (p.get_gid() or '').startswith('curve-edge:')}


def clip_in_data(ax, patch):
    clip = patch.get_clip_path().get_fully_transformed_path()
    return ax.transData.inverted().transform_path(clip)


class TestCurveEdges:
    def test_corners_face_neighbor_rows(self, example_segments):
        # light -> deep -> rem: deep sits lowest, so it squares both top
        # corners; light and rem square the corner that faces deep
        _, ax = render(example_segments, 100)
        assert set(corner_patches(ax)) == {
            'curve-edge:0:bottom-right',
            'curve-edge:1:top-left',
            'curve-edge:1:top-right',
            'curve-edge:2:bottom-left',
        }

    def test_light_between_rem_and_deep(self, make_segments):
        segments = make_segments(
            [SleepStage.REM, SleepStage.LIGHT, SleepStage.DEEP], [20, 40, 40], 200, T0)
        _, ax = render(segments, 100)
        assert set(corner_patches(ax)) == {
            'curve-edge:0:bottom-right',
            'curve-edge:1:top-left',
            'curve-edge:1:bottom-right',
            'curve-edge:2:top-left',
        }

    def test_corner_reach(self, example_segments):
        painter, ax = render(example_segments, 100)
        bh = painter.bar_height
        reach = bh / 2 + 3
        lefts = [0, example_segments[0].width,
                 example_segments[0].width + example_segments[1].width]
        levels = [4, 6, 2]
        for gid, patch in corner_patches(ax).items():
            _, index, side = gid.split(':')
            index = int(index)
            center_y = 70 + bh * levels[index] + bh / 2
            verts = patch.get_path().vertices
            ys, xs = verts[:, 1], verts[:, 0]
            if side.startswith('top'):
                assert ys.min() == pytest.approx(center_y - reach)
                assert ys.max() == pytest.approx(center_y)
            else:
                assert ys.min() == pytest.approx(center_y)
                assert ys.max() == pytest.approx(center_y + reach)
            half = example_segments[index].width / 2
            if side.endswith('left'):
                assert xs.min() == pytest.approx(lefts[index] - 0.5)
                assert xs.max() == pytest.approx(lefts[index] + half)
            else:
                right = lefts[index] + example_segments[index].width
                assert xs.min() == pytest.approx(right - half)
                assert xs.max() == pytest.approx(right + 0.5)

    def test_top_corner_clip_cuts_out_half_bar(self, example_segments):
        painter, ax = render(example_segments, 100)
        clip = clip_in_data(ax, corner_patches(ax)['curve-edge:1:top-left'])
        left = example_segments[0].width
        bar_top = 70 + painter.bar_height * 6
        assert clip.contains_point((left + 1, bar_top + 1))
        assert not clip.contains_point((left + 30, bar_top - 2))
        # rounded corner of the cut-out leaves a fillet next to the connector
        assert clip.contains_point((left + 0.3, bar_top - 1))

    def test_bottom_corner_clip_cuts_out_half_bar(self, example_segments):
        painter, ax = render(example_segments, 100)
        clip = clip_in_data(ax, corner_patches(ax)['curve-edge:2:bottom-left'])
        left = example_segments[0].width + example_segments[1].width
        mid = left + example_segments[2].width / 2
        bar_bottom = 70 + painter.bar_height * 2 + painter.bar_height
        assert clip.contains_point((left + 1, bar_bottom - 1))
        assert not clip.contains_point((mid, bar_bottom + 2))

    def test_same_row_has_no_corners(self, make_segments):
        segments = make_segments(
            [SleepStage.AWAKE, SleepStage.NOT_WORN], [10, 10], 200, T0)
        _, ax = render(segments, 100)
        assert corner_patches(ax) == {}


class TestZeroWidthSegment:
    def test_drawn_with_its_connectors(self, make_segments):
        segments = make_segments(
            [SleepStage.LIGHT, SleepStage.DEEP, SleepStage.REM], [30, 0, 70], 200, T0)
        _, ax = render(segments, 100)
        # grid + light->deep + deep->rem, all at the same x
        assert len(ax.collections) == 3
        xs = {seg[0][0] for coll in ax.collections[1:] for seg in coll.get_segments()}
        assert xs and all(x == pytest.approx(60) for x in xs)
        faces = [tuple(p.get_facecolor()) for p in ax.patches]
        assert to_rgba('#21B2A1') in faces
