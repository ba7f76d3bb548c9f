from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Optional

EVENT_COLORS = ["#D4634B", "#4B8BD4", "#8B5CF6", "#10B981", "#F59E0B", "#EC4899"]

CHECKIN_STATUSES = ("office", "remote", "out")
PRIORITY_STATUSES = ("todo", "in-progress", "done")
TASK_STATUSES = ("todo", "in-progress", "done", "blocked")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")
DECISION_STATUSES = ("active", "reversed", "superseded")


@dataclass(frozen=True)
class Event:
    id: str
    title: str
    date: Optional[date]            # start, local
    end_date: Optional[date] = None  # inclusive
    all_day: bool = False
    time: str = ""                  # HH:MM, timed events only
    duration: int = 0               # minutes, timed events only
    attendees: str = ""
    color: str = EVENT_COLORS[0]


@dataclass(frozen=True)
class TeamMember:
    id: str
    name: str
    role: str = ""
    avatar: str = ""
    color: str = EVENT_COLORS[0]


@dataclass(frozen=True)
class CheckIn:
    id: str
    person: str
    status: str
    date: Optional[date]
    note: str = ""
    time: str = ""


@dataclass(frozen=True)
class Priority:
    id: str
    person: str
    week: Optional[date]            # Monday of the week
    priority: str
    status: str = "todo"
    sort_order: int = 0


@dataclass(frozen=True)
class Message:
    id: str
    person: str
    text: str
    channel: str = "general"
    pinned: bool = False
    time: str = ""                  # ISO timestamp


@dataclass(frozen=True)
class Decision:
    id: str
    title: str
    decided_by: str
    date: Optional[date]
    description: str = ""
    category: str = ""
    status: str = "active"


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    assigned_to: str
    created_by: str = ""
    description: str = ""
    due_date: Optional[date] = None
    priority: str = "medium"
    status: str = "todo"
    created_at: str = ""
