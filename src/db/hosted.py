"""
Client for the hosted data service (a Supabase / PostgREST REST endpoint).

requests is blocking, so every call runs on a worker thread through
asyncio.to_thread and the Textual event loop stays responsive.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from db import models
from utils.errors import NotFound, RepositoryError
from utils.logger import get_logger

_logger = get_logger(__name__)

# postgrest error code for .single() matching zero rows
NO_ROWS_CODE = "PGRST116"


def _row_to_product(row: Dict[str, Any]) -> models.ProductRecord:
    return models.ProductRecord(
        id=str(row["id"]),
        name=row["nama_produk"],
        unit_price=float(row["harga_satuan"]),
        quantity=int(row["quantity"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _product_body(data: models.ProductInput) -> Dict[str, Any]:
    return {
        "nama_produk": data.name,
        "harga_satuan": data.unit_price,
        "quantity": data.quantity,
    }


class HostedRepository:
    """Product and credential repository backed by the hosted REST API."""

    def __init__(self, url: str, api_key: str, timeout: float = 10.0):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self._http = requests.Session()
        self._http.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        try:
            resp = self._http.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            _logger.error(f"{method} {table} failed: {e}")
            raise RepositoryError(f"Could not reach the data service: {e}") from e
        return resp

    @staticmethod
    def _raise_for_status(resp: requests.Response, what: str) -> None:
        if resp.ok:
            return
        _logger.error(f"{what} failed with HTTP {resp.status_code}: {resp.text[:200]}")
        raise RepositoryError(f"{what} failed with HTTP {resp.status_code}")

    @classmethod
    def _payload(cls, resp: requests.Response, what: str) -> Any:
        cls._raise_for_status(resp, what)
        try:
            return resp.json()
        except ValueError as e:
            raise RepositoryError(f"{what} returned a malformed body") from e

    @staticmethod
    def _products(rows: Any, what: str) -> List[models.ProductRecord]:
        try:
            return [_row_to_product(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise RepositoryError(f"{what} returned an unexpected row: {e}") from e

    # ---------------------------
    # Users
    # ---------------------------

    def _find_user_by_username(self, username: str) -> Optional[models.User]:
        resp = self._request(
            "GET",
            "users",
            params={"select": "*", "username": f"eq.{username}"},
            headers={"Accept": "application/vnd.pgrst.object+json"},
        )
        if resp.status_code == 406 and _error_code(resp) == NO_ROWS_CODE:
            return None
        row = self._payload(resp, "User lookup")
        try:
            return models.User(
                id=str(row["id"]),
                username=row["username"],
                password=row.get("password", ""),
                role=row.get("role", "user"),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise RepositoryError(f"User lookup returned an unexpected row: {e}") from e

    async def find_user_by_username(self, username: str) -> Optional[models.User]:
        return await asyncio.to_thread(self._find_user_by_username, username)

    # ---------------------------
    # Products
    # ---------------------------

    def _list_products(self) -> List[models.ProductRecord]:
        resp = self._request(
            "GET", "products", params={"select": "*", "order": "created_at.desc"}
        )
        rows = self._payload(resp, "Fetching products")
        return self._products(rows, "Fetching products")

    async def list_products(self) -> List[models.ProductRecord]:
        return await asyncio.to_thread(self._list_products)

    def _create_product(self, data: models.ProductInput) -> models.ProductRecord:
        resp = self._request(
            "POST",
            "products",
            json=[_product_body(data)],
            headers={"Prefer": "return=representation"},
        )
        rows = self._payload(resp, "Creating product")
        created = self._products(rows, "Creating product")
        if not created:
            raise RepositoryError("Creating product returned no row")
        return created[0]

    async def create_product(self, data: models.ProductInput) -> models.ProductRecord:
        return await asyncio.to_thread(self._create_product, data)

    def _update_product(self, product_id: str, data: models.ProductInput) -> None:
        resp = self._request(
            "PATCH",
            "products",
            params={"id": f"eq.{product_id}"},
            json=_product_body(data),
            headers={"Prefer": "return=representation"},
        )
        # an empty representation means no row matched the id filter
        if not self._payload(resp, "Updating product"):
            raise NotFound("products", product_id)

    async def update_product(self, product_id: str, data: models.ProductInput) -> None:
        await asyncio.to_thread(self._update_product, product_id, data)

    def _delete_product(self, product_id: str) -> None:
        resp = self._request(
            "DELETE",
            "products",
            params={"id": f"eq.{product_id}"},
            headers={"Prefer": "return=representation"},
        )
        if not self._payload(resp, "Deleting product"):
            raise NotFound("products", product_id)

    async def delete_product(self, product_id: str) -> None:
        await asyncio.to_thread(self._delete_product, product_id)

    def close(self) -> None:
        self._http.close()


def _error_code(resp: requests.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    return body.get("code") if isinstance(body, dict) else None
