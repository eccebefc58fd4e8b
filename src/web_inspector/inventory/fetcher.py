"""
Service item fetching.

Service records live in the desk_drawer database. The service_type view is
keyed by [category] and each row value is the service document:

{
  "rows": [
    {
      "id": "example.org",
      "key": ["web"],
      "value": {
        "_id": "example.org",
        "included_service_items": [
          {"itemid": "example.org", "itemType": "web",
           "itemSubType": "nginx", "itemSubLoc": "/var/www/example.org"}
        ]
      }
    }
  ]
}

Every included item carrying both a subtype and a sub location becomes one
ServiceItem. All included items are used, not only the first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Protocol

import structlog

from web_inspector.core.errors import DocumentDBError, ItemFetchFailed
from web_inspector.core.types import ServiceItem
from web_inspector.db.base import DocumentDB

logger = structlog.get_logger()

DEFAULT_CATEGORY = "web"


class ItemSource(Protocol):
    """
    Service item source interface.

    fetch returns the items to probe, in source order.
    """

    def fetch(self) -> list[ServiceItem]:
        """Fetch service items."""


def _item_from_dict(obj: dict[str, Any]) -> ServiceItem | None:
    """Convert one included service item, None when it cannot be probed."""
    sub_kind = str(obj.get("itemSubType") or "").strip()
    sub_loc = str(obj.get("itemSubLoc") or "").strip()
    if not sub_kind or not sub_loc:
        return None

    return ServiceItem(
        id=str(obj.get("itemid") or ""),
        kind=str(obj.get("itemType") or ""),
        sub_kind=sub_kind,
        path=sub_loc,
    )


def items_from_rows(rows: Iterable[Any]) -> list[ServiceItem]:
    """Flatten view rows into ServiceItems. Malformed rows are skipped."""
    items: list[ServiceItem] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        value = row.get("value")
        if not isinstance(value, dict):
            continue
        included = value.get("included_service_items", []) or []
        if not isinstance(included, list):
            continue

        for raw in included:
            if not isinstance(raw, dict):
                continue
            item = _item_from_dict(raw)
            if item is None:
                logger.debug("item_ignored", itemid=raw.get("itemid"), reason="no subtype or location")
                continue
            items.append(item)

    return items


@dataclass(frozen=True)
class CouchViewItemSource(ItemSource):
    """
    Fetch service items from a CouchDB view.

    category is used as both startkey and endkey, wrapped in a list to match
    the view's composite key.
    """

    db: DocumentDB
    category: str = DEFAULT_CATEGORY
    design: str = "desk_drawer"
    view: str = "service_type"

    def fetch(self) -> list[ServiceItem]:
        key = [self.category]
        try:
            rows = self.db.query_view(self.design, self.view, startkey=key, endkey=key)
        except DocumentDBError as exc:
            raise ItemFetchFailed(f"cannot query {self.design}/{self.view}: {exc}") from exc

        items = items_from_rows(rows)
        logger.info("items_fetched", source=f"{self.design}/{self.view}", rows=len(rows), items=len(items))
        return items
