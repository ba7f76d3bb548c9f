from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

AIRTABLE_API = "https://api.airtable.com/v0"


class AirtableError(Exception):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class ConnectionStatus:
    ok: bool
    error: Optional[str] = None


class AirtableClient:
    """Thin Airtable REST client. Raises AirtableError on network errors and non-2xx responses."""

    def __init__(
        self,
        api_key: str,
        base_id: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
        user_agent: str = "teamhub/1.0",
    ) -> None:
        self.api_key = api_key
        self.base_id = base_id
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "User-Agent": user_agent,
            }
        )

    def _url(self, table: str, record_id: str | None = None) -> str:
        url = f"{AIRTABLE_API}/{self.base_id}/{quote(table, safe='')}"
        if record_id:
            url += f"/{record_id}"
        return url

    def _request(self, method: str, table: str, record_id: str | None = None, **kwargs: Any) -> Dict[str, Any]:
        try:
            resp = self._session.request(method, self._url(table, record_id), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise AirtableError(f"{method} {table} failed: {exc}") from exc

        if not resp.ok:
            message = f"Airtable error: {resp.status_code}"
            try:
                payload = resp.json()
            except ValueError:
                payload = {}
            err = payload.get("error") if isinstance(payload, dict) else None
            if isinstance(err, dict) and err.get("message"):
                message = str(err["message"])
            elif isinstance(err, str):
                message = err
            raise AirtableError(message, status=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise AirtableError(f"Invalid JSON from {table}", status=resp.status_code) from exc

    def list_records(self, table: str, **params: Any) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        for key, value in params.items():
            if value is None or value == "":
                continue
            if isinstance(value, (list, dict)):
                value = json.dumps(value)
            query[key] = value

        records: List[Dict[str, Any]] = []
        while True:
            payload = self._request("GET", table, params=query)
            records.extend(payload.get("records", []))
            offset = payload.get("offset")
            if not offset or "maxRecords" in query:
                return records
            query = {**query, "offset": offset}

    def create_record(self, table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", table, json={"fields": fields})

    def update_record(self, table: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", table, record_id, json={"fields": fields})

    def delete_record(self, table: str, record_id: str) -> Dict[str, Any]:
        return self._request("DELETE", table, record_id)

    def test_connection(self, table: str = "TeamMembers") -> ConnectionStatus:
        if not self.api_key or not self.base_id:
            return ConnectionStatus(ok=False, error="API key and Base ID are required")
        try:
            self._request("GET", table, params={"maxRecords": 1})
        except AirtableError as exc:
            if exc.status is None:
                return ConnectionStatus(ok=False, error="Network error - check your connection")
            if exc.status == 401:
                return ConnectionStatus(ok=False, error="Invalid API key")
            if exc.status == 404:
                return ConnectionStatus(ok=False, error="Base not found - check your Base ID")
            if exc.status == 422:
                return ConnectionStatus(ok=False, error=f"{table} table not found - please create it in Airtable")
            return ConnectionStatus(ok=False, error=f"Unexpected error: {exc.status}")
        return ConnectionStatus(ok=True)
