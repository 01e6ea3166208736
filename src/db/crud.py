# src/db/crud.py
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from db import models
from db.database import connect
from utils.errors import NotFound, RepositoryError
from utils.logger import get_logger

_logger = get_logger(__name__)

_PRODUCT_COLUMNS = "id, name, unit_price, quantity, created_at, updated_at"

# values sqlite cannot bind (integers beyond 64 bits) raise OverflowError
_WRITE_ERRORS = (sqlite3.Error, OverflowError)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_product(row) -> models.ProductRecord:
    return models.ProductRecord(
        id=row[0],
        name=row[1],
        unit_price=float(row[2]),
        quantity=int(row[3]),
        created_at=datetime.fromisoformat(row[4]),
        updated_at=datetime.fromisoformat(row[5]),
    )


# ---------------------------
# Users
# ---------------------------


async def find_user_by_username(username: str) -> Optional[models.User]:
    """Return the credential record for username, or None."""
    try:
        async with connect() as conn:
            cur = await conn.execute(
                "SELECT id, username, password, role FROM users WHERE username = ?;",
                (username,),
            )
            row = await cur.fetchone()
            await cur.close()
    except sqlite3.Error as e:
        raise RepositoryError(f"Failed to look up user {username!r}: {e}") from e
    if not row:
        return None
    return models.User(id=row[0], username=row[1], password=row[2], role=row[3])


# ---------------------------
# Products
# ---------------------------


async def list_products() -> List[models.ProductRecord]:
    """All products, most recently created first."""
    try:
        async with connect() as conn:
            cur = await conn.execute(
                f"""
                SELECT {_PRODUCT_COLUMNS}
                FROM products
                ORDER BY created_at DESC, rowid DESC;
                """
            )
            rows = await cur.fetchall()
            await cur.close()
    except sqlite3.Error as e:
        raise RepositoryError(f"Failed to fetch products: {e}") from e
    return [_row_to_product(row) for row in rows]


async def create_product(data: models.ProductInput) -> models.ProductRecord:
    """Insert a product; id and timestamps are assigned here."""
    product_id = str(uuid.uuid4())
    now = _now()
    try:
        async with connect() as conn:
            await conn.execute(
                f"INSERT INTO products({_PRODUCT_COLUMNS}) VALUES(?, ?, ?, ?, ?, ?);",
                (product_id, data.name, data.unit_price, data.quantity, now, now),
            )
            await conn.commit()
    except _WRITE_ERRORS as e:
        raise RepositoryError(f"Failed to create product: {e}") from e
    _logger.debug(f"Created product {product_id}")
    return models.ProductRecord(
        id=product_id,
        name=data.name,
        unit_price=data.unit_price,
        quantity=data.quantity,
        created_at=datetime.fromisoformat(now),
        updated_at=datetime.fromisoformat(now),
    )


async def update_product(product_id: str, data: models.ProductInput) -> None:
    """Overwrite name/price/quantity and bump updated_at."""
    try:
        async with connect() as conn:
            cur = await conn.execute(
                """
                UPDATE products
                SET name = ?, unit_price = ?, quantity = ?, updated_at = ?
                WHERE id = ?;
                """,
                (data.name, data.unit_price, data.quantity, _now(), product_id),
            )
            changed = cur.rowcount
            await conn.commit()
    except _WRITE_ERRORS as e:
        raise RepositoryError(f"Failed to update product {product_id!r}: {e}") from e
    if changed == 0:
        raise NotFound("products", product_id)


async def delete_product(product_id: str) -> None:
    try:
        async with connect() as conn:
            cur = await conn.execute("DELETE FROM products WHERE id = ?;", (product_id,))
            changed = cur.rowcount
            await conn.commit()
    except sqlite3.Error as e:
        raise RepositoryError(f"Failed to delete product {product_id!r}: {e}") from e
    if changed == 0:
        raise NotFound("products", product_id)
