"""Row parsers for catalog and return-log CSV imports.

Rows are plain comma-separated values with surrounding whitespace trimmed.
A row that does not parse is skipped; only the caller decides whether an
empty result is an error.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime
from typing import Iterable

from ..state import ReturnRecord, Sku, new_id, now_utc

logger = logging.getLogger(__name__)

CATALOG_FORMAT = "SKU_ID, SKU_Name, Quantity"
RETURNS_FORMAT = "SalesUsername, SalesName, SKU_ID, SKU_Name, Quantity"


def split_lines(text: str) -> list[str]:
    return text.lstrip("\ufeff").splitlines()


def _fields(line: str) -> list[str]:
    row = next(csv.reader(io.StringIO(line), skipinitialspace=True), [])
    return [value.strip() for value in row]


def parse_quantity(value: str) -> int | None:
    try:
        qty = int(value)
    except (TypeError, ValueError):
        return None
    if qty < 0:
        return None
    return qty


def parse_catalog_row(line: str) -> Sku | None:
    parts = _fields(line)
    if len(parts) < 3:
        return None
    sku_id, name, qty = parts[:3]
    quantity = parse_quantity(qty)
    if not sku_id or not name or quantity is None:
        return None
    return Sku(id=sku_id.upper(), name=name, warehouse_stock=quantity)


def parse_return_row(line: str, *, at: datetime | None = None) -> ReturnRecord | None:
    parts = _fields(line)
    if len(parts) < 5:
        return None
    sales_username, sales_name, sku_id, sku_name, qty = parts[:5]
    quantity = parse_quantity(qty)
    if not sales_username or not sales_name or not sku_id or not sku_name or quantity is None:
        return None
    return ReturnRecord(
        id=new_id("RET"),
        sales_id=sales_username.lower(),
        sales_name=sales_name,
        sku_id=sku_id.upper(),
        sku_name=sku_name,
        quantity=quantity,
        created_at=at or now_utc(),
    )


def parse_catalog_rows(lines: Iterable[str]) -> list[Sku]:
    skus = []
    for number, line in enumerate(lines, start=1):
        sku = parse_catalog_row(line)
        if sku is None:
            if line.strip():
                logger.debug("Skipping catalog line %d: %r", number, line)
            continue
        skus.append(sku)
    return skus


def parse_return_rows(lines: Iterable[str], *, at: datetime | None = None) -> list[ReturnRecord]:
    ts = at or now_utc()
    records = []
    for number, line in enumerate(lines, start=1):
        record = parse_return_row(line, at=ts)
        if record is None:
            if line.strip():
                logger.debug("Skipping return line %d: %r", number, line)
            continue
        records.append(record)
    return records
