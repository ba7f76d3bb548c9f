from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from teamhub.config import load_config
from teamhub.context import build_context
from teamhub.models import CheckIn
from teamhub.projection import week_view
from teamhub.state import State

NOW = datetime(2026, 2, 25, 9, 0, tzinfo=ZoneInfo("Europe/Istanbul"))


def test_demo_context_uses_seed_data_and_no_client(tmp_path: Path):
    cfg = load_config(str(tmp_path / "config.yaml"))

    ctx = build_context(cfg, State(current_user="Nobody"), now=NOW)
    results = ctx.load_all(NOW.date())

    assert ctx.demo_mode
    assert ctx.executor is None
    assert all(results.values())
    assert ctx.current_user == "Esra"  # unknown user falls back to the default
    assert {m.name for m in ctx.collection("team_members").items} >= {"Esra", "Seda"}
    assert len(ctx.events.items) > 0


def test_demo_events_lay_out_like_remote_events(tmp_path: Path):
    cfg = load_config(str(tmp_path / "config.yaml"))
    ctx = build_context(cfg, State(), now=NOW)
    ctx.load_week(NOW.date())

    week = week_view(ctx.events.items, NOW.date())
    lanes = week.layout.lanes

    assert week.layout.days[0] == date(2026, 2, 23)
    # Offsite (Wed-Fri) and trade fair (Fri onward) overlap on Friday.
    assert lanes["e9"] != lanes["e10"]
    assert week.layout.spans()["e10"] == (4, 4)


def test_configured_context_loads_events_for_range(tmp_path: Path, client, executor):
    cfg = load_config(str(tmp_path / "config.yaml"))
    client.records["Events"] = [{"id": "rec1", "fields": {"Title": "Sprint", "Date": "2026-02-24"}}]

    ctx = build_context(cfg, State(current_user="Seda", api_key="pat", base_id="appX"),
                        executor=executor, client=client, now=NOW)
    ok = ctx.load_week(date(2026, 2, 25))

    assert ok
    assert not ctx.demo_mode
    assert ctx.current_user == "Seda"
    assert [e.id for e in ctx.events.items] == ["rec1"]
    op, table, params = client.calls[0]
    assert (op, table) == ("list", "Events")
    assert "2026-03-02" in params["filterByFormula"]  # day after Sunday
    assert "2026-02-23" in params["filterByFormula"]


def test_load_all_filters_checkins_to_today(tmp_path: Path, client, executor):
    cfg = load_config(str(tmp_path / "config.yaml"))
    ctx = build_context(cfg, State(api_key="pat", base_id="appX"), executor=executor, client=client, now=NOW)

    ctx.load_all(NOW.date())

    params = {table: p for op, table, p in client.calls}
    assert params["DailyCheckIns"] == {"filterByFormula": "{Date} = '2026-02-25'"}
    assert params["Messages"]["maxRecords"] == 50


def test_mutations_flow_through_context_collections(tmp_path: Path, client, executor):
    cfg = load_config(str(tmp_path / "config.yaml"))
    ctx = build_context(cfg, State(api_key="pat", base_id="appX"), executor=executor, client=client, now=NOW)
    ctx.load_all(NOW.date())
    client.failing.add("create")

    ctx.collection("checkins").create(CheckIn(id="", person="Seda", status="remote", date=NOW.date(), time="09:00"))
    executor.run_all()

    assert len(ctx.collection("checkins").items) == 1
    assert ctx.notifier.notices[-1].level == "error"
