"""Verbosity tiers and plain-terminal rendering of display records."""
import logging
import re
import shutil
import unicodedata
from enum import Enum
from typing import Dict, List, Optional

FULL_WIDTH = 100
COMPACT_WIDTH = 80

ANSI_COLORS = {
    "red": "31",
    "green": "32",
    "yellow": "33",
    "blue": "34",
    "purple": "35",
    "cyan": "36",
    "orange": "38;5;208",
    "dim": "2",
    "bold": "1",
}

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


class Tier(Enum):
    FULL = "full"
    COMPACT = "compact"
    MINIMAL = "minimal"
    ONELINE = "oneline"


COMPACT_DROPS = frozenset({"pressure", "visibility", "clouds", "updated"})
MINIMAL_DROPS = COMPACT_DROPS | {"uv_index", "humidity", "feels_like"}

TIER_DROPS = {
    Tier.FULL: frozenset(),
    Tier.COMPACT: COMPACT_DROPS,
    Tier.MINIMAL: MINIMAL_DROPS,
}


def terminal_width(default: int = COMPACT_WIDTH) -> int:
    return shutil.get_terminal_size((default, 24)).columns


def select_tier(explicit: Optional[Tier] = None, width: Optional[int] = None) -> Tier:
    """
    An explicit tier always wins. Otherwise width picks full, compact or
    minimal; oneline is only ever selected explicitly.
    """
    if explicit is not None:
        logging.debug(f"Tier pinned to {explicit.value}")
        return explicit
    if width is None:
        width = terminal_width()
    if width >= FULL_WIDTH:
        tier = Tier.FULL
    elif width >= COMPACT_WIDTH:
        tier = Tier.COMPACT
    else:
        tier = Tier.MINIMAL
    logging.debug(f"Terminal width {width} -> tier {tier.value}")
    return tier


def project(record: Dict, tier: Tier) -> Dict:
    """Drop the current-conditions columns a tier does not show."""
    drops = TIER_DROPS.get(tier, frozenset())
    return {key: value for key, value in record.items() if key not in drops}


def colorize(text: str, color: Optional[str], enabled: bool = True) -> str:
    if not enabled or not color or color not in ANSI_COLORS:
        return text
    return f"\x1b[{ANSI_COLORS[color]}m{text}\x1b[0m"


def visible_width(text: str) -> int:
    """Printed width, ignoring ANSI codes and counting wide glyphs twice."""
    width = 0
    for char in _ANSI_RE.sub("", str(text)):
        if unicodedata.combining(char) or char == "\ufe0f":
            continue
        width += 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1
    return width


def _pad(text: str, width: int) -> str:
    return str(text) + " " * max(0, width - visible_width(text))


def render_record(record: Dict, labels: Dict[str, str], title: Optional[str] = None) -> str:
    """Two-column label/value table for a single record."""
    if not record:
        return ""
    heading = {key: labels.get(key, key) for key in record}
    label_width = max(visible_width(h) for h in heading.values())
    lines = []
    if title:
        lines.append(title)
    for key, value in record.items():
        lines.append(f"{_pad(heading[key], label_width)}  {value}")
    return "\n".join(lines)


def render_table(rows: List[Dict], labels: Dict[str, str], title: Optional[str] = None) -> str:
    """Column table for a list of records sharing one column set."""
    if not rows:
        return ""
    columns = list(rows[0].keys())
    headers = [labels.get(col, col) for col in columns]
    widths = [
        max([visible_width(header)] + [visible_width(row.get(col, "")) for row in rows])
        for col, header in zip(columns, headers)
    ]
    lines = []
    if title:
        lines.append(title)
    lines.append("  ".join(_pad(h, w) for h, w in zip(headers, widths)).rstrip())
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(_pad(row.get(col, ""), w) for col, w in zip(columns, widths)).rstrip())
    return "\n".join(lines)


def render_oneline(line: str) -> str:
    return line.strip()
