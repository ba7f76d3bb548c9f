from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from .config import load_config
from .context import AppContext, build_context
from .dates import DAY_NAMES, MONTH_NAMES, format_date, get_monday, month_grid, offset_month, offset_week
from .projection import RowProjection, month_view, week_view
from .render import render_month, render_week
from .state import load_state, save_state

STATE_PATH_DEFAULT = "~/.config/teamhub/state.json"
CONFIG_PATH_DEFAULT = "config.yaml"


def _describe_row(row: RowProjection) -> List[str]:
    lines: List[str] = []
    for cell in row.cells:
        label = f"{DAY_NAMES[cell.cell.date.weekday()]} {format_date(cell.cell.date)}"
        parts = []
        for seg in cell.lanes:
            if seg is None:
                parts.append("·")
            elif seg.show_details:
                when = "all day" if seg.event.all_day else seg.event.time
                parts.append(f"[{seg.lane}] {seg.event.title} ({when})")
            else:
                parts.append(f"[{seg.lane}] …")
        if cell.overflow:
            parts.append(f"+{cell.overflow} more")
        lines.append(f"{label}: " + (" | ".join(parts) if parts else "No events"))
    return lines


def _print_week(ctx: AppContext, monday, out: Optional[str], today) -> None:
    week = week_view(ctx.events.items, monday, days=ctx.config.calendar.week_days)
    print(f"Week of {format_date(monday)} · {week.layout.lane_count} lane(s)")
    for line in _describe_row(week):
        print(f"  {line}")
    if out:
        img = render_week(ctx.config.display.width, ctx.config.display.height, week, today=today)
        img.save(out)
        print(f"Wrote {out}")


def _print_month(ctx: AppContext, year: int, month: int, out: Optional[str], today) -> None:
    rows = month_view(ctx.events.items, year, month, visible_lanes=ctx.config.calendar.month_visible_lanes)
    print(f"{MONTH_NAMES[month - 1]} {year}")
    for row in rows:
        for line in _describe_row(row):
            print(f"  {line}")
        print()
    if out:
        img = render_month(ctx.config.display.width, ctx.config.display.height, rows, year, month, today=today)
        img.save(out)
        print(f"Wrote {out}")


def run_once(
    config_path: str = CONFIG_PATH_DEFAULT,
    state_path: str = STATE_PATH_DEFAULT,
    view: str = "week",
    offset: int = 0,
    out: Optional[str] = None,
    user: Optional[str] = None,
    check: bool = False,
) -> int:
    load_dotenv()
    state_path = os.path.expanduser(state_path)
    cfg = load_config(config_path)
    tz = ZoneInfo(cfg.timezone)
    state = load_state(state_path)

    if user:
        if cfg.team.member(user) is None:
            print(f"Unknown team member: {user}", file=sys.stderr)
            return 2
        state.current_user = user
        save_state(state_path, state)

    ctx = build_context(cfg, state)
    try:
        if check:
            if ctx.client is None:
                print("Airtable not configured; running in demo mode.")
                return 1
            status = ctx.client.test_connection(ctx.airtable.table("team_members"))
            print("Connected." if status.ok else f"Connection failed: {status.error}")
            return 0 if status.ok else 1

        now = datetime.now(tz=tz)
        today = now.date()
        mode = "DEMO" if ctx.demo_mode else "LIVE"
        print(f"TeamHub [{mode}] · {ctx.current_user}")

        if view == "month":
            year, month = offset_month(today.year, today.month, offset)
            grid = month_grid(year, month)
            ctx.load_events(grid[0][0].date, grid[-1][-1].date)
            _print_month(ctx, year, month, out, today)
        else:
            monday = offset_week(get_monday(today), offset)
            ctx.load_week(monday)
            _print_week(ctx, monday, out, today)

        for notice in ctx.notifier.notices:
            print(f"! {notice.message}", file=sys.stderr)
        return 0
    finally:
        ctx.close()


def main():
    import argparse

    ap = argparse.ArgumentParser(description="TeamHub calendar")
    ap.add_argument("--config", default=CONFIG_PATH_DEFAULT)
    ap.add_argument("--state", default=STATE_PATH_DEFAULT)
    ap.add_argument("--view", choices=["week", "month"], default="week")
    ap.add_argument("--offset", type=int, default=0, help="weeks (week view) or months (month view) from now")
    ap.add_argument("--out", help="write a PNG of the view")
    ap.add_argument("--user", help="set and remember the current team member")
    ap.add_argument("--check", action="store_true", help="test the Airtable connection and exit")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    sys.exit(
        run_once(
            config_path=args.config,
            state_path=args.state,
            view=args.view,
            offset=args.offset,
            out=args.out,
            user=args.user,
            check=args.check,
        )
    )


if __name__ == "__main__":
    main()
