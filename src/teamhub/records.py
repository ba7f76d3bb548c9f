from __future__ import annotations
from dataclasses import dataclass
from datetime import date
import logging
from typing import Any, Callable, Dict, Iterable, List

from .dates import format_date, parse_date
from .models import CheckIn, Decision, Event, Message, Priority, Task, TeamMember, EVENT_COLORS

logger = logging.getLogger(__name__)

Fields = Dict[str, Any]


@dataclass(frozen=True)
class RecordCodec:
    """Maps one entity type to its Airtable table fields."""

    table_key: str       # key into AirtableConfig.tables
    id_prefix: str       # temporary id prefix
    decode: Callable[[str, Fields], Any]
    encode: Callable[[Any], Fields]
    validate: Callable[[Any], None]

    def from_record(self, record: Dict[str, Any]) -> Any:
        return self.decode(str(record["id"]), record.get("fields") or {})

    def from_records(self, records: Iterable[Dict[str, Any]]) -> List[Any]:
        out = []
        for r in records:
            try:
                out.append(self.from_record(r))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping undecodable %s record %s: %s", self.table_key, r.get("id"), exc)
        return out

    def changed_fields(self, before: Any, after: Any) -> Fields:
        old = self.encode(before)
        return {k: v for k, v in self.encode(after).items() if old.get(k) != v}


def _date_field(value) -> str | None:
    d = parse_date(value)
    return format_date(d) if d else None


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{name} is required.")


def _require_date(value: Any, name: str) -> None:
    _require(value, name)
    _check_date(value, name)


def _check_date(value: Any, name: str) -> None:
    # Unparseable dates would be encoded as None and silently dropped.
    if value is None or (isinstance(value, str) and not value.strip()):
        return
    if not isinstance(value, (str, date)) or parse_date(value) is None:
        raise ValueError(f"Invalid {name}: {value!r}")


# Events

def _decode_event(rid: str, f: Fields) -> Event:
    return Event(
        id=rid,
        title=str(f.get("Title", "")),
        date=parse_date(f.get("Date")),
        end_date=parse_date(f.get("EndDate")),
        all_day=bool(f.get("AllDay", False)),
        time=str(f.get("Time", "") or ""),
        duration=int(f.get("Duration") or 0),
        attendees=str(f.get("Attendees", "") or ""),
        color=str(f.get("Color") or EVENT_COLORS[0]),
    )


def _encode_event(e: Event) -> Fields:
    return {
        "Title": e.title,
        "Date": _date_field(e.date),
        "EndDate": _date_field(e.end_date),
        "AllDay": e.all_day,
        "Time": "" if e.all_day else e.time,
        "Duration": 0 if e.all_day else e.duration,
        "Attendees": e.attendees,
        "Color": e.color,
    }


def validate_event(e: Event) -> None:
    _require(e.title, "Title")
    _require_date(e.date, "Date")
    _check_date(e.end_date, "EndDate")
    if not e.all_day and e.time:
        hh, _, mm = e.time.partition(":")
        if not (hh.isdigit() and mm.isdigit() and int(hh) < 24 and int(mm) < 60):
            raise ValueError(f"Invalid time: {e.time!r}")
    if e.duration < 0:
        raise ValueError("Duration must not be negative.")


# Team members

def _decode_member(rid: str, f: Fields) -> TeamMember:
    name = str(f["Name"])
    return TeamMember(
        id=rid,
        name=name,
        role=str(f.get("Role", "") or ""),
        avatar=str(f.get("Avatar") or name[:1]),
        color=str(f.get("Color") or EVENT_COLORS[0]),
    )


def _encode_member(m: TeamMember) -> Fields:
    return {"Name": m.name, "Role": m.role, "Color": m.color, "Avatar": m.avatar}


def _validate_member(m: TeamMember) -> None:
    _require(m.name, "Name")


# Check-ins

def _decode_checkin(rid: str, f: Fields) -> CheckIn:
    return CheckIn(
        id=rid,
        person=str(f["Person"]),
        status=str(f.get("Status", "office")),
        date=parse_date(f.get("Date")),
        note=str(f.get("Note", "") or ""),
        time=str(f.get("Time", "") or ""),
    )


def _encode_checkin(c: CheckIn) -> Fields:
    return {"Person": c.person, "Status": c.status, "Note": c.note, "Date": _date_field(c.date), "Time": c.time}


def _validate_checkin(c: CheckIn) -> None:
    _require(c.person, "Person")
    _require(c.status, "Status")
    _require_date(c.date, "Date")


# Weekly priorities

def _decode_priority(rid: str, f: Fields) -> Priority:
    return Priority(
        id=rid,
        person=str(f["Person"]),
        week=parse_date(f.get("Week")),
        priority=str(f.get("Priority", "")),
        status=str(f.get("Status", "todo")),
        sort_order=int(f.get("SortOrder") or 0),
    )


def _encode_priority(p: Priority) -> Fields:
    return {
        "Person": p.person,
        "Week": _date_field(p.week),
        "Priority": p.priority,
        "Status": p.status,
        "SortOrder": p.sort_order,
    }


def _validate_priority(p: Priority) -> None:
    _require(p.person, "Person")
    _require_date(p.week, "Week")
    _require(p.priority, "Priority")


# Messages

def _decode_message(rid: str, f: Fields) -> Message:
    return Message(
        id=rid,
        person=str(f["Person"]),
        text=str(f.get("Text", "")),
        channel=str(f.get("Channel") or "general"),
        pinned=bool(f.get("Pinned", False)),
        time=str(f.get("CreatedAt", "") or ""),
    )


def _encode_message(m: Message) -> Fields:
    # CreatedAt is computed by Airtable.
    return {"Person": m.person, "Text": m.text, "Channel": m.channel, "Pinned": m.pinned}


def _validate_message(m: Message) -> None:
    _require(m.person, "Person")
    _require(m.text, "Text")


# Decisions

def _decode_decision(rid: str, f: Fields) -> Decision:
    return Decision(
        id=rid,
        title=str(f["Title"]),
        decided_by=str(f.get("DecidedBy", "")),
        date=parse_date(f.get("Date")),
        description=str(f.get("Description", "") or ""),
        category=str(f.get("Category", "") or ""),
        status=str(f.get("Status") or "active"),
    )


def _encode_decision(d: Decision) -> Fields:
    return {
        "Title": d.title,
        "Description": d.description,
        "DecidedBy": d.decided_by,
        "Date": _date_field(d.date),
        "Category": d.category,
        "Status": d.status,
    }


def _validate_decision(d: Decision) -> None:
    _require(d.title, "Title")
    _require(d.decided_by, "DecidedBy")
    _require_date(d.date, "Date")


# Tasks

def _decode_task(rid: str, f: Fields) -> Task:
    return Task(
        id=rid,
        title=str(f["Title"]),
        assigned_to=str(f.get("AssignedTo", "")),
        created_by=str(f.get("CreatedBy", "") or ""),
        description=str(f.get("Description", "") or ""),
        due_date=parse_date(f.get("DueDate")),
        priority=str(f.get("Priority") or "medium"),
        status=str(f.get("Status") or "todo"),
        created_at=str(f.get("CreatedAt", "") or ""),
    )


def _encode_task(t: Task) -> Fields:
    return {
        "Title": t.title,
        "Description": t.description,
        "AssignedTo": t.assigned_to,
        "CreatedBy": t.created_by,
        "DueDate": _date_field(t.due_date),
        "Priority": t.priority,
        "Status": t.status,
    }


def _validate_task(t: Task) -> None:
    _require(t.title, "Title")
    _require(t.assigned_to, "AssignedTo")
    _check_date(t.due_date, "DueDate")


EVENTS = RecordCodec("events", "e", _decode_event, _encode_event, validate_event)
TEAM_MEMBERS = RecordCodec("team_members", "u", _decode_member, _encode_member, _validate_member)
CHECKINS = RecordCodec("checkins", "c", _decode_checkin, _encode_checkin, _validate_checkin)
PRIORITIES = RecordCodec("priorities", "p", _decode_priority, _encode_priority, _validate_priority)
MESSAGES = RecordCodec("messages", "m", _decode_message, _encode_message, _validate_message)
DECISIONS = RecordCodec("decisions", "d", _decode_decision, _encode_decision, _validate_decision)
TASKS = RecordCodec("tasks", "t", _decode_task, _encode_task, _validate_task)

CODECS: Dict[str, RecordCodec] = {
    c.table_key: c for c in (EVENTS, TEAM_MEMBERS, CHECKINS, PRIORITIES, MESSAGES, DECISIONS, TASKS)
}
