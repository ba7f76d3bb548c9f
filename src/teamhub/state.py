from __future__ import annotations
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any
import json

from .config import AirtableConfig


@dataclass
class State:
    current_user: str = ""
    api_key: str = ""   # overrides AIRTABLE_TOKEN when set from the settings flow
    base_id: str = ""


def load_state(path: str) -> State:
    p = Path(path)
    if not p.exists():
        return State()
    try:
        data: Dict[str, Any] = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        # Corrupt local state falls back to defaults.
        return State()
    return State(
        current_user=str(data.get("current_user", "")),
        api_key=str(data.get("api_key", "")),
        base_id=str(data.get("base_id", "")),
    )


def save_state(path: str, state: State) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(asdict(state), indent=2, ensure_ascii=False), encoding="utf-8")


def resolve_airtable(cfg: AirtableConfig, state: State) -> AirtableConfig:
    return AirtableConfig(
        base_id=state.base_id or cfg.base_id,
        api_key=state.api_key or cfg.api_key,
        tables=dict(cfg.tables),
    )
