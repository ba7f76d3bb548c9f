from __future__ import annotations
from datetime import date
from typing import List, Optional, Sequence
from PIL import Image, ImageDraw, ImageFont

from .dates import DAY_NAMES, MONTH_NAMES
from .projection import CellProjection, RowProjection, Segment

FONT_PATH = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
CONTINUATION = "›"

BG = (15, 17, 23)
CELL_BG = (24, 27, 36)
TODAY_BG = (35, 37, 68)
MUTED = (100, 116, 139)
TEXT = (226, 232, 240)
OUT_OF_MONTH = (51, 65, 85)


def _load_font(size: int) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(FONT_PATH, size)
    except OSError:
        return ImageFont.load_default(size)


def _hex_to_rgb(color: str, fallback=(99, 102, 241)) -> tuple[int, int, int]:
    value = color.lstrip("#")
    if len(value) != 6:
        return fallback
    try:
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return fallback


def _tint(rgb: tuple[int, int, int], ratio: float = 0.25) -> tuple[int, int, int]:
    # Blend toward the cell background.
    return tuple(int(round(b + (c - b) * ratio)) for c, b in zip(rgb, CELL_BG))


def _wrap_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    font: ImageFont.FreeTypeFont,
    max_width: float,
    max_lines: Optional[int] = 2,
) -> List[str]:
    words = text.split()
    lines: List[str] = []
    cur = ""
    for w in words:
        test = (cur + " " + w).strip()
        if draw.textlength(test, font=font) <= max_width:
            cur = test
        else:
            if cur:
                lines.append(cur)
            cur = w
    if cur:
        lines.append(cur)
    return lines if max_lines is None else lines[:max_lines]


def _event_details(seg: Segment) -> str:
    e = seg.event
    if e.all_day:
        return "All day"
    if e.time and e.duration:
        return f"{e.time} · {e.duration}min"
    return e.time


def _draw_segment(
    d: ImageDraw.ImageDraw,
    seg: Segment,
    x0: float,
    y0: float,
    col_w: float,
    lane_h: float,
    gap: float,
    fonts: dict,
    compact: bool,
) -> None:
    # Bars run edge to edge between columns so a multi-day event reads as one shape.
    left = x0 + (gap if seg.is_first else 0)
    right = x0 + col_w - (gap if seg.is_last else 0)
    top = y0 + 2
    bottom = y0 + lane_h - 2
    color = _hex_to_rgb(seg.event.color)
    d.rectangle((left, top, right, bottom), fill=_tint(color))
    if seg.is_first:
        d.rectangle((left, top, left + 3, bottom), fill=color)

    if not seg.show_details:
        d.text((left + 6, top + 2), CONTINUATION, fill=MUTED, font=fonts["small"])
        return

    # Text stays inside the first column; later columns carry the continuation mark.
    max_w = col_w - 2 * gap - 10
    if compact:
        line = _wrap_text(d, seg.event.title, fonts["small"], max_w, max_lines=1)
        if line:
            d.text((left + 8, top + 2), line[0], fill=TEXT, font=fonts["small"])
        return

    y = top + 4
    for line in _wrap_text(d, seg.event.title, fonts["title"], max_w, max_lines=1):
        d.text((left + 8, y), line, fill=TEXT, font=fonts["title"])
        y += fonts["title_h"]
    details = _event_details(seg)
    if details:
        d.text((left + 8, y), details, fill=MUTED, font=fonts["small"])
        y += fonts["small_h"]
    if seg.event.attendees:
        for line in _wrap_text(d, seg.event.attendees, fonts["small"], max_w, max_lines=1):
            d.text((left + 8, y), line, fill=MUTED, font=fonts["small"])


def render_week(
    canvas_w: int,
    canvas_h: int,
    week: RowProjection,
    today: Optional[date] = None,
    title: str = "Team Calendar",
) -> Image.Image:
    img = Image.new("RGB", (canvas_w, canvas_h), BG)
    d = ImageDraw.Draw(img)

    fonts = {
        "header": _load_font(34),
        "day": _load_font(20),
        "title": _load_font(18),
        "small": _load_font(14),
        "title_h": 22,
        "small_h": 18,
    }

    padding = 32
    gap = 6
    y = padding
    first_day = week.layout.days[0]
    d.text((padding, y), title, fill=TEXT, font=fonts["header"])
    y += 44
    d.text((padding, y), f"{MONTH_NAMES[first_day.month - 1]} {first_day.year} · Week view", fill=MUTED, font=fonts["small"])
    y += 32

    cols = len(week.cells)
    col_w = (canvas_w - 2 * padding) / cols
    lane_h = 80
    header_h = 40
    grid_top = y

    for ci, cell in enumerate(week.cells):
        x0 = padding + ci * col_w
        is_today = today is not None and cell.cell.date == today
        d.rectangle((x0 + gap, grid_top, x0 + col_w - gap, canvas_h - padding), fill=TODAY_BG if is_today else CELL_BG)
        label = f"{DAY_NAMES[cell.cell.date.weekday()].upper()} {cell.cell.date.day}"
        d.text((x0 + gap + 10, grid_top + 10), label, fill=TEXT if is_today else MUTED, font=fonts["day"])

        lanes_y = grid_top + header_h
        if not cell.segments:
            d.text((x0 + gap + 10, lanes_y + 20), "No events", fill=OUT_OF_MONTH, font=fonts["small"])
            continue
        avail = canvas_h - padding - lanes_y
        fit = int(avail // lane_h)
        if fit < len(cell.lanes):
            # Keep room for the "+N more" line.
            fit = max(0, int((avail - fonts["small_h"] - gap) // lane_h))
        for lane, seg in enumerate(cell.lanes[:fit]):
            if seg is None:
                continue
            _draw_segment(d, seg, x0, lanes_y + lane * lane_h, col_w, lane_h, gap, fonts, compact=False)
        hidden = sum(1 for seg in cell.lanes[fit:] if seg is not None)
        if hidden:
            d.text((x0 + gap + 10, lanes_y + fit * lane_h + 2), f"+{hidden} more", fill=MUTED, font=fonts["small"])

    return img


def render_month(
    canvas_w: int,
    canvas_h: int,
    rows: Sequence[RowProjection],
    year: int,
    month: int,
    today: Optional[date] = None,
    title: str = "Team Calendar",
) -> Image.Image:
    img = Image.new("RGB", (canvas_w, canvas_h), BG)
    d = ImageDraw.Draw(img)

    fonts = {
        "header": _load_font(34),
        "day": _load_font(16),
        "title": _load_font(14),
        "small": _load_font(13),
        "title_h": 18,
        "small_h": 16,
    }

    padding = 32
    gap = 4
    y = padding
    d.text((padding, y), f"{title} · {MONTH_NAMES[month - 1]} {year}", fill=TEXT, font=fonts["header"])
    y += 56

    col_w = (canvas_w - 2 * padding) / 7
    for ci, name in enumerate(DAY_NAMES):
        d.text((padding + ci * col_w + gap + 6, y), name.upper(), fill=MUTED, font=fonts["day"])
    y += 28

    row_h = (canvas_h - padding - y) / max(1, len(rows))
    lane_h = 22
    date_h = 24

    for ri, row in enumerate(rows):
        row_top = y + ri * row_h
        for ci, cell in enumerate(row.cells):
            _draw_month_cell(d, cell, padding + ci * col_w, row_top, col_w, row_h, lane_h, date_h, gap, fonts, today)

    return img


def _draw_month_cell(
    d: ImageDraw.ImageDraw,
    cell: CellProjection,
    x0: float,
    y0: float,
    col_w: float,
    row_h: float,
    lane_h: float,
    date_h: float,
    gap: float,
    fonts: dict,
    today: Optional[date],
) -> None:
    is_today = today is not None and cell.cell.date == today
    d.rectangle((x0 + gap, y0 + gap, x0 + col_w - gap, y0 + row_h - gap), fill=TODAY_BG if is_today else CELL_BG)
    d.text(
        (x0 + gap + 6, y0 + gap + 4),
        str(cell.cell.date.day),
        fill=TEXT if cell.cell.in_month else OUT_OF_MONTH,
        font=fonts["day"],
    )
    lanes_y = y0 + gap + date_h
    for lane, seg in enumerate(cell.lanes):
        if seg is None:
            continue
        _draw_segment(d, seg, x0, lanes_y + lane * lane_h, col_w, lane_h, gap, fonts, compact=True)
    if cell.overflow:
        more_y = lanes_y + len(cell.lanes) * lane_h + 2
        d.text((x0 + gap + 6, more_y), f"+{cell.overflow} more", fill=MUTED, font=fonts["small"])
