import matplotlib
matplotlib.use('Agg')

from datetime import datetime, timedelta

import matplotlib.pyplot as plt
import pytest

from sleepchart.stages import Segment, SleepStage, layout_widths


T0 = datetime(2026, 2, 14, 23, 0)


def segments_from_durations(stages, durations, width, start_time=T0):
    """Back-to-back Segments from parallel stage / minutes lists."""
    out = []
    t = start_time
    for stage, minutes, w in zip(stages, durations, layout_widths(durations, width)):
        end = t + timedelta(minutes=minutes)
        out.append(Segment(stage=stage, width=w, start_time=t, end_time=end,
                           duration=minutes))
        t = end
    return out


@pytest.fixture
def make_segments():
    return segments_from_durations


@pytest.fixture
def example_segments():
    """Light 30 min, deep 60 min, REM 10 min on a 200 px chart."""
    return segments_from_durations(
        [SleepStage.LIGHT, SleepStage.DEEP, SleepStage.REM],
        [30, 60, 10], 200, T0)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')
