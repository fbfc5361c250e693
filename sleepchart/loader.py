"""
loader.py — Read a night of sleep-stage transitions from CSV.

Expected columns:
    time            timestamp the stage began (any format pandas parses)
    stage | mode    stage name (light, deep, rem, awake, not_worn, unknown)
                    or device mode code (1 light, 2 deep, 3 awake,
                    4 not worn, 5 REM; anything else is unknown)

Lines starting with '#' are comments.
"""

import os

import pandas as pd

from .stages import SleepDetail, stage_from_mode, stage_from_name


def load_details(path):
    """Load a CSV of stage transitions, sorted by time."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"No such file: {path}")

    print(f"Loading sleep stages from {os.path.basename(path)}...")
    df = pd.read_csv(path, comment='#', skipinitialspace=True)
    df.columns = [str(c).strip().lower() for c in df.columns]
    return details_from_frame(df)


def details_from_frame(df):
    """DataFrame with 'time' and 'stage' or 'mode' columns -> [SleepDetail]."""
    if 'time' not in df.columns:
        raise ValueError("CSV needs a 'time' column")
    if 'stage' in df.columns:
        stages = [stage_from_name(v) for v in df['stage']]
    elif 'mode' in df.columns:
        stages = [stage_from_mode(v) for v in df['mode']]
    else:
        raise ValueError("CSV needs a 'stage' or 'mode' column")

    try:
        times = pd.to_datetime(df['time'])
    except (ValueError, TypeError) as e:
        raise ValueError(f"Unparsable time column: {e}") from e
    bad = times.isna()
    if bad.any():
        rows = [int(i) + 1 for i in times.index[bad]]
        raise ValueError(f"Unparsable time on data row(s) {rows}")

    details = [SleepDetail(stage=stage, time=t.to_pydatetime())
               for stage, t in zip(stages, times)]
    details.sort(key=lambda d: d.time)
    if details:
        print(f"  {len(details)} transitions, "
              f"{details[0].time:%Y-%m-%d %H:%M} – {details[-1].time:%H:%M}")
    return details
