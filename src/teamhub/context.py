from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
import logging
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from .airtable import AirtableClient
from .config import AirtableConfig, AppConfig
from .dates import format_date, get_monday, get_sunday
from .demo import demo_dataset
from .notify import Notifier
from .records import CODECS
from .state import State, resolve_airtable
from .store import OptimisticCollection

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a screen or command needs, passed explicitly."""

    config: AppConfig
    current_user: str
    airtable: AirtableConfig
    notifier: Notifier
    client: Optional[AirtableClient] = None
    executor: Optional[Executor] = None
    collections: Dict[str, OptimisticCollection] = field(default_factory=dict)

    @property
    def demo_mode(self) -> bool:
        return self.client is None

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.config.timezone)

    @property
    def events(self) -> OptimisticCollection:
        return self.collections["events"]

    def collection(self, key: str) -> OptimisticCollection:
        return self.collections[key]

    def load_events(self, start: date, end: date) -> bool:
        """Load events whose span touches [start, end]."""
        if self.demo_mode:
            return self.events.load()
        formula = (
            f"AND(IS_BEFORE({{Date}}, '{format_date(end + timedelta(days=1))}'), "
            f"NOT(IS_BEFORE(IF({{EndDate}}, {{EndDate}}, {{Date}}), '{format_date(start)}')))"
        )
        return self.events.load(filterByFormula=formula)

    def load_week(self, monday: date) -> bool:
        return self.load_events(get_monday(monday), get_sunday(monday))

    def load_all(self, today: date) -> Dict[str, bool]:
        results = {"events": self.load_week(today)}
        for key, coll in self.collections.items():
            if key == "events":
                continue
            params = {}
            if not self.demo_mode and key == "checkins":
                params["filterByFormula"] = f"{{Date}} = '{format_date(today)}'"
            elif not self.demo_mode and key == "messages":
                params["sort"] = [{"field": "CreatedAt", "direction": "desc"}]
                params["maxRecords"] = 50
            results[key] = coll.load(**params)
        return results

    def close(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=True)


def build_context(
    cfg: AppConfig,
    state: State,
    executor: Optional[Executor] = None,
    client: Optional[AirtableClient] = None,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> AppContext:
    airtable = resolve_airtable(cfg.airtable, state)
    notifier = notifier or Notifier()

    if client is None and airtable.is_configured:
        client = AirtableClient(airtable.api_key, airtable.base_id)
    if client is None:
        logger.info("Airtable not configured; running on demo data")
    elif executor is None:
        executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="teamhub-sync")

    now = now or datetime.now(ZoneInfo(cfg.timezone))
    seeds = demo_dataset(now.date(), now)
    seeds["team_members"] = list(cfg.team.members)

    current_user = state.current_user if cfg.team.member(state.current_user) else cfg.team.default_user

    collections = {
        key: OptimisticCollection(
            codec=codec,
            table=airtable.table(key),
            client=client,
            executor=executor,
            notifier=notifier,
            seed=seeds.get(key, []),
        )
        for key, codec in CODECS.items()
    }
    return AppContext(
        config=cfg,
        current_user=current_user,
        airtable=airtable,
        notifier=notifier,
        client=client,
        executor=executor,
        collections=collections,
    )
