from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = "http://pos1.cps:4000/api/v1"

# Weighed goods carry price/weight after a 7 digit item number.
WEIGHED_PREFIX = "24"
WEIGHED_KEY_LENGTH = 7

# The lookup service answers 500 for unknown codes as well.
NOT_FOUND_STATUSES = (404, 500)


@dataclass(frozen=True)
class Item:
    upc: str
    name: str
    name_short: str
    price: int
    unit: str
    use_tax: bool

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Item":
        """
        Build an Item from the service's camelCase payload.
        Missing or null fields take their zero value ("", 0, False);
        a field of the wrong type raises ValueError.
        """
        if not isinstance(data, dict):
            raise ValueError(f"item payload must be an object, not {type(data).__name__}")

        price = data.get("price")
        if price is None:
            price = 0
        elif isinstance(price, bool) or not isinstance(price, int):
            raise ValueError(f"price must be an integer, got {price!r}")

        use_tax = data.get("useTax")
        if use_tax is None:
            use_tax = False
        elif not isinstance(use_tax, bool):
            raise ValueError(f"useTax must be a boolean, got {use_tax!r}")

        return cls(
            upc=_text_field(data, "upc"),
            name=_text_field(data, "name"),
            name_short=_text_field(data, "nameShort"),
            price=price,
            unit=_text_field(data, "unit"),
            use_tax=use_tax,
        )


def _text_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


# ---------- lookup outcomes ----------

@dataclass(frozen=True)
class Found:
    item: Item


@dataclass(frozen=True)
class NotFound:
    status: int


@dataclass(frozen=True)
class ServerError:
    status: int
    body: str


@dataclass(frozen=True)
class TransportError:
    error: str


LookupOutcome = Union[Found, NotFound, ServerError, TransportError]


def barcode_to_key(barcode: str) -> str:
    """Derive the lookup key: weighed-goods barcodes keep only the item number."""
    if barcode.startswith(WEIGHED_PREFIX) and len(barcode) >= WEIGHED_KEY_LENGTH:
        return barcode[:WEIGHED_KEY_LENGTH]
    return barcode


@dataclass
class LookupConfig:
    base_url: str = DEFAULT_BASE_URL
    # None keeps the request unbounded.
    timeout_seconds: Optional[float] = None


class ItemLookupClient:
    """
    Item lookup against the store's item service.
    - GET {base_url}/items/{key} with Accept: application/json
    - One request at a time, no retry
    - Every failure is returned as a LookupOutcome, never raised
    """

    def __init__(self, cfg: LookupConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.base_url = (cfg.base_url or DEFAULT_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = cfg.timeout_seconds

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def _item_url(self, key: str) -> str:
        return f"{self.base_url}/items/{quote(key, safe='')}"

    def lookup(self, barcode: str) -> Optional[LookupOutcome]:
        """
        Resolve a barcode. Returns None when a 200 response carries a body
        that can't be decoded into an item (logged and dropped).
        """
        key = barcode_to_key(barcode)
        try:
            resp = self.session.get(self._item_url(key), headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logging.warning("Item lookup failed for %s: %s", key, e)
            return TransportError(error=str(e))

        try:
            if resp.status_code == 200:
                return self._decode_found(key, resp)

            if resp.status_code in NOT_FOUND_STATUSES:
                logging.info("Not found for Item: %s", key)
                return NotFound(status=resp.status_code)

            body = resp.text
            logging.warning("Server error for Item: %s (HTTP %s)\n%s", key, resp.status_code, body)
            return ServerError(status=resp.status_code, body=body)
        finally:
            resp.close()

    def _decode_found(self, key: str, resp) -> Optional[LookupOutcome]:
        try:
            payload = resp.json()
        except ValueError as e:
            logging.error("Undecodable item body for %s: %s", key, e)
            return None

        # The service wraps the item as {"data": {...}}; a null data means unknown.
        if isinstance(payload, dict) and "data" in payload:
            payload = payload["data"]
            if payload is None:
                logging.info("Empty item data for Item: %s", key)
                return NotFound(status=resp.status_code)

        try:
            return Found(item=Item.from_json(payload))
        except ValueError as e:
            logging.error("Malformed item body for %s: %s", key, e)
            return None
