"""Seed data used when Airtable is not configured (demo mode).

Dates are relative to the week containing ``today`` so the demo calendar is
never empty.
"""
from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Tuple

from .dates import get_monday
from .models import CheckIn, Decision, Event, Message, Priority, Task


def demo_events(today: date) -> List[Event]:
    monday = get_monday(today)

    def day(offset: int) -> date:
        return monday + timedelta(days=offset)

    timed: List[Tuple[str, str, str, int, int, str, str]] = [
        ("e1", "All Hands", "10:00", 60, 0, "#D4634B", "Everyone"),
        ("e2", "Marketing Sync", "14:00", 45, 0, "#8B5CF6", "Leyla, Seda, Esra"),
        ("e3", "Digital Platform Review", "11:00", 60, 1, "#10B981", "Pınar, Gökhan"),
        ("e4", "1:1 Esra ↔ Leyla", "15:00", 30, 2, "#D4634B", "Esra, Leyla"),
        ("e5", "Campaign Review", "10:00", 45, 2, "#8B5CF6", "Leyla, Pınar, Seda"),
        ("e6", "Local Ops Planning", "09:00", 60, 3, "#F59E0B", "Seda, Esra"),
        ("e7", "Team Lunch", "12:30", 60, 4, "#EC4899", "Everyone"),
        ("e8", "Content Calendar Review", "16:00", 30, 4, "#8B5CF6", "Leyla, Gökhan"),
    ]
    events = [
        Event(id=eid, title=title, date=day(offset), time=t, duration=dur, color=color, attendees=who)
        for eid, title, t, dur, offset, color, who in timed
    ]
    events += [
        Event(id="e9", title="Partner Offsite", date=day(2), end_date=day(4), all_day=True,
              color="#4B8BD4", attendees="Esra, Gökhan, Seda"),
        Event(id="e10", title="Trade Fair", date=day(4), end_date=day(8), all_day=True,
              color="#F59E0B", attendees="Leyla, Pınar"),
    ]
    return events


def demo_priorities(today: date) -> List[Priority]:
    week = get_monday(today)
    rows = {
        "Leyla": [("Finalize Q1 campaign brief", "done"), ("Social media content calendar", "in-progress"),
                  ("Press release for partnership", "todo")],
        "Pınar": [("Website migration testing", "in-progress"), ("CRM integration review", "todo")],
        "Seda": [("Local partner meetings", "in-progress"), ("Monthly field report", "todo")],
        "Esra": [("Investor update", "done"), ("Hiring plan review", "in-progress")],
        "Gökhan": [("TeamHub deployment", "in-progress"), ("Q1 budget review", "done")],
    }
    out: List[Priority] = []
    for person, items in rows.items():
        for order, (text, status) in enumerate(items, start=1):
            out.append(Priority(id=f"p{len(out) + 1}", person=person, week=week, priority=text,
                                status=status, sort_order=order))
    return out


def demo_messages(now: datetime) -> List[Message]:
    def ago(hours: int) -> str:
        return (now - timedelta(hours=hours)).astimezone(timezone.utc).isoformat()

    return [
        Message(id="m1", person="Esra", text="Great work on the partnership announcement everyone!",
                channel="general", pinned=True, time=ago(2)),
        Message(id="m2", person="Leyla", text="Campaign assets are ready for review in the shared drive.",
                channel="marketing", time=ago(5)),
        Message(id="m3", person="Pınar", text="New CRM integration is live on staging.",
                channel="general", time=ago(8)),
        Message(id="m4", person="Gökhan", text="Reminder: Timesheets due by Friday 5pm.",
                channel="general", pinned=True, time=ago(24)),
    ]


def demo_decisions(today: date) -> List[Decision]:
    return [
        Decision(id="d1", title="Move to weekly all-hands format", decided_by="Esra",
                 date=today - timedelta(days=2), category="operations",
                 description="Weekly 30-minute standups instead of bi-weekly all-hands."),
        Decision(id="d2", title="Adopt TeamHub for internal communications", decided_by="Gökhan",
                 date=today - timedelta(days=9), category="product"),
        Decision(id="d3", title="Pause LinkedIn advertising", decided_by="Leyla",
                 date=today - timedelta(days=22), category="marketing", status="reversed"),
    ]


def demo_tasks(today: date, now: datetime) -> List[Task]:
    created = (now - timedelta(days=1)).astimezone(timezone.utc).isoformat()
    return [
        Task(id="t1", title="Finalize Q1 marketing budget", assigned_to="Leyla", created_by="Esra",
             due_date=today + timedelta(days=4), priority="high", status="in-progress", created_at=created),
        Task(id="t2", title="Deploy TeamHub to production", assigned_to="Gökhan", created_by="Gökhan",
             due_date=today + timedelta(days=1), priority="urgent", status="in-progress", created_at=created),
        Task(id="t3", title="Fix CRM data import error", assigned_to="Pınar", created_by="Pınar",
             due_date=today - timedelta(days=2), priority="urgent", status="blocked", created_at=created),
    ]


def demo_dataset(today: date, now: datetime) -> Dict[str, list]:
    """Seed collections keyed like AirtableConfig.tables."""
    checkins: List[CheckIn] = []
    return {
        "events": demo_events(today),
        "checkins": checkins,
        "priorities": demo_priorities(today),
        "messages": demo_messages(now),
        "decisions": demo_decisions(today),
        "tasks": demo_tasks(today, now),
    }
