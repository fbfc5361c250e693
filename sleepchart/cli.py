#!/usr/bin/env python3

"""
Sleep duration chart — render a night's sleep stages as a bar timeline.

Reads a CSV of stage transitions (time, stage|mode), lays the stages out
proportionally to their durations and draws the chart with a draggable
time indicator and an info box for the stage under it.

Usage:
  sleepchart night.csv
  sleepchart night.csv --no-plot --out night.png
  sleepchart night.csv --width 720 --height 400 --indicator 100
  sleepchart night.csv --end "2026-02-14 07:12"
"""

import argparse
import os
import sys

import matplotlib

# ── Constants ───────────────────────────────────────────────────────────
DEFAULT_WIDTH = 360
DEFAULT_HEIGHT = 260


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Sleep duration chart')
    parser.add_argument('csv_file', help='CSV with time and stage (or mode) columns')
    parser.add_argument('--width', type=float, default=DEFAULT_WIDTH,
                        help=f'Chart width in px (default: {DEFAULT_WIDTH})')
    parser.add_argument('--height', type=float, default=DEFAULT_HEIGHT,
                        help=f'Chart height in px (default: {DEFAULT_HEIGHT})')
    parser.add_argument('--indicator', type=float, default=None,
                        help='Initial indicator position in px (default: centre)')
    parser.add_argument('--end', dest='end_time', default=None,
                        help='Session end time; the last stage runs until it '
                             '(default: last row only marks the end)')
    parser.add_argument('--out', dest='out_path', default=None,
                        help='Output PNG (default: <csv_file>_chart.png)')
    parser.add_argument('--no-plot', action='store_true', dest='no_plot',
                        help='Save PNG but do not display')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.no_plot:
        matplotlib.use('Agg')

    import pandas as pd
    from .loader import load_details
    from .stages import build_segments
    from .widget import SleepDurationChart

    if args.width <= 0 or args.height <= 0:
        print("ERROR: --width and --height must be positive")
        return 1

    try:
        details = load_details(args.csv_file)
        end_time = (pd.to_datetime(args.end_time).to_pydatetime()
                    if args.end_time else None)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    if not details:
        print("ERROR: no sleep stages in file")
        return 1

    try:
        segments = build_segments(details, args.width, end_time=end_time)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    start = details[0].time
    end = end_time if end_time is not None else details[-1].time
    total = sum(s.duration for s in segments)
    print(f"  {len(segments)} segments, {total} min "
          f"({start:%H:%M} – {end:%H:%M})")
    if not segments:
        print("  Note: zero total duration, bars will be blank")

    chart = SleepDurationChart(segments, start, end,
                               size=(args.width, args.height),
                               indicator_position=args.indicator)

    out_path = args.out_path
    if out_path is None:
        out_path = os.path.splitext(args.csv_file)[0] + '_chart.png'
    chart.save(out_path)

    if not args.no_plot:
        chart.show()
    return 0


if __name__ == '__main__':
    sys.exit(main())
