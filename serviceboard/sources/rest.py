"""
REST Snapshot Source.

Reads the three board collections from a PostgREST-style HTTP API and
polls for changes.
"""

import os
import time
from typing import Any

import requests

from serviceboard.logger import get_logger

from .base import SnapshotSource
from .mapping import orders_from_rows, service_from_record, workflow_from_record
from .protocol import SourceError

log = get_logger("REST_SOURCE")

DEFAULT_TABLES = {
    "orders": "don_hang",
    "service_items": "hang_muc_dich_vu",
    "workflows": "quy_trinh",
    "services": "dich_vu",
}

WORKFLOW_SELECT = "*,cac_buoc_quy_trinh(id,id_quy_trinh,ten_buoc,thu_tu,nhan_vien_duoc_giao)"


class RestSnapshotSource(SnapshotSource):
    """
    Snapshot source over a PostgREST endpoint (e.g. Supabase /rest/v1).

    There is no push channel here: call poll() on a timer. Each poll reads
    all collections and notifies subscribers of the ones whose content
    changed, so repeated polls with unchanged data are silent.
    """

    name = "rest"

    def __init__(self, config: dict, session: requests.Session | None = None):
        """
        Initialize source with configuration.

        Args:
            config: Source config dict.
                    Expected keys: base_url, api_key_env, timeout_s, tables, page_limit
            session: Optional requests session (shared connection pool)

        Raises:
            ValueError: If base_url is missing
        """
        super().__init__()
        base_url = str(config.get("base_url", "")).strip()
        if not base_url:
            raise ValueError("REST source config missing required field: base_url")

        self._base_url = base_url.rstrip("/")
        self._api_key_env = config.get("api_key_env", "BOARD_REST_KEY")
        self._timeout_s = config.get("timeout_s", 30)
        self._page_limit = int(config.get("page_limit", 1000))
        self._tables = {**DEFAULT_TABLES, **(config.get("tables") or {})}
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        api_key = os.getenv(self._api_key_env) if self._api_key_env else None
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    def _fetch(self, table_key: str, select: str = "*") -> list[dict[str, Any]]:
        """
        GET one table.

        Raises:
            SourceError: On HTTP, timeout or decoding failures
        """
        table = self._tables[table_key]
        url = f"{self._base_url}/{table}"
        params = {"select": select, "limit": str(self._page_limit)}

        start_time = time.time()
        try:
            response = self._session.get(
                url,
                headers=self._headers(),
                params=params,
                timeout=self._timeout_s,
            )
            if response.status_code in (401, 403):
                raise SourceError(
                    f"Authentication failed for {table} (HTTP {response.status_code}). "
                    f"Check your {self._api_key_env} environment variable."
                )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise SourceError(f"Request for {table} timed out (timeout: {self._timeout_s}s)") from e
        except requests.RequestException as e:
            raise SourceError(f"Request for {table} failed: {e}") from e
        except ValueError as e:
            raise SourceError(f"Invalid JSON from {table}: {e}") from e

        if not isinstance(data, list):
            raise SourceError(f"Expected a JSON array from {table}")

        log.debug(
            "Fetched table",
            table=table,
            row_count=len(data),
            elapsed_ms=int((time.time() - start_time) * 1000),
        )
        return [row for row in data if isinstance(row, dict)]

    def poll(self) -> list[str]:
        """
        Re-read all collections and publish changes.

        Returns:
            Topics whose content changed

        Raises:
            SourceError: If any table cannot be read; held data is untouched
        """
        order_rows = self._fetch("orders")
        item_rows = self._fetch("service_items")
        workflow_rows = self._fetch("workflows", select=WORKFLOW_SELECT)
        service_rows = self._fetch("services")

        return self._store(
            orders=orders_from_rows(order_rows, item_rows),
            workflows=[workflow_from_record(row) for row in workflow_rows],
            services=[service_from_record(row) for row in service_rows],
        )
