"""
Static item source.

Reads a local json file shaped like the service_type view response.
This is useful for dev, tests, and hosts without database access.

Both a full view response ({"rows": [...]}) and a bare list of rows are
accepted.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import structlog

from web_inspector.core.errors import ItemFetchFailed
from web_inspector.core.types import ServiceItem
from web_inspector.inventory.fetcher import ItemSource, items_from_rows

logger = structlog.get_logger()


@dataclass(frozen=True)
class StaticItemSource(ItemSource):
    """Load service items from a local json file."""

    path: Path

    def fetch(self) -> list[ServiceItem]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ItemFetchFailed(f"cannot read items file {self.path}: {exc}") from exc

        rows = data.get("rows", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            return []

        items = items_from_rows(rows)
        logger.info("items_fetched", source=str(self.path), rows=len(rows), items=len(items))
        return items
