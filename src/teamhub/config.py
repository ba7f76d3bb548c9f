from __future__ import annotations
from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from .models import TeamMember

DEFAULT_TABLES = {
    "team_members": "TeamMembers",
    "checkins": "DailyCheckIns",
    "priorities": "WeeklyPriorities",
    "messages": "Messages",
    "decisions": "Decisions",
    "tasks": "Tasks",
    "events": "Events",
}

DEFAULT_MEMBERS = [
    {"name": "Esra", "role": "Founder", "avatar": "E", "color": "#D4634B"},
    {"name": "Gökhan", "role": "Director", "avatar": "G", "color": "#4B8BD4"},
    {"name": "Leyla", "role": "Marketing & Communications", "avatar": "L", "color": "#8B5CF6"},
    {"name": "Pınar", "role": "Digital Development Manager", "avatar": "P", "color": "#10B981"},
    {"name": "Seda", "role": "Local Management", "avatar": "S", "color": "#F59E0B"},
]

DEFAULT_CHANNELS = ["general", "marketing"]


@dataclass
class AirtableConfig:
    base_id: str
    api_key: str = ""
    tables: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TABLES))

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.base_id)

    def table(self, key: str) -> str:
        return self.tables.get(key, DEFAULT_TABLES[key])


@dataclass
class TeamConfig:
    members: List[TeamMember]
    channels: List[str]
    default_user: str

    def member(self, name: str) -> Optional[TeamMember]:
        for m in self.members:
            if m.name == name:
                return m
        return None


@dataclass
class CalendarConfig:
    week_days: int
    month_visible_lanes: int


@dataclass
class DisplayConfig:
    width: int
    height: int


@dataclass
class AppConfig:
    timezone: str
    airtable: AirtableConfig
    team: TeamConfig
    calendar: CalendarConfig
    display: DisplayConfig


def _members(raw: List[Dict[str, Any]]) -> List[TeamMember]:
    members = []
    for idx, item in enumerate(raw, start=1):
        name = str(item.get("name", "")).strip()
        if not name:
            continue
        members.append(
            TeamMember(
                id=str(item.get("id", idx)),
                name=name,
                role=str(item.get("role", "")),
                avatar=str(item.get("avatar") or name[:1]),
                color=str(item.get("color", "#6366F1")),
            )
        )
    return members


def load_config(path: str) -> AppConfig:
    p = Path(path)
    data: Dict[str, Any] = {}
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    airtable = data.get("airtable", {}) or {}
    team = data.get("team", {}) or {}
    calendar = data.get("calendar", {}) or {}
    display = data.get("display", {}) or {}

    tables = dict(DEFAULT_TABLES)
    tables.update({str(k): str(v) for k, v in (airtable.get("tables") or {}).items()})

    members = _members(team.get("members") or DEFAULT_MEMBERS)

    return AppConfig(
        timezone=str(data.get("timezone", "Europe/Istanbul")),
        airtable=AirtableConfig(
            base_id=os.environ.get("AIRTABLE_BASE_ID") or str(airtable.get("base_id", "") or ""),
            # The token never lives in config.yaml.
            api_key=os.environ.get("AIRTABLE_TOKEN", ""),
            tables=tables,
        ),
        team=TeamConfig(
            members=members,
            channels=list(team.get("channels", DEFAULT_CHANNELS)),
            default_user=str(team.get("default_user") or (members[0].name if members else "")),
        ),
        calendar=CalendarConfig(
            week_days=int(calendar.get("week_days", 5)),
            month_visible_lanes=int(calendar.get("month_visible_lanes", 3)),
        ),
        display=DisplayConfig(
            width=int(display.get("width", 1600)),
            height=int(display.get("height", 1000)),
        ),
    )
