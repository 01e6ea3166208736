"""
Repository collaborators consumed by the session store and the dashboard.

Two backends implement them: LocalRepository over the sqlite file in
db.database, and db.hosted.HostedRepository over the hosted REST service.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from db import crud, database
from db.hosted import HostedRepository
from db.models import ProductInput, ProductRecord, User
from utils.config import AppConfig
from utils.logger import get_logger

_logger = get_logger(__name__)


class ProductRepository(Protocol):
    async def list_products(self) -> List[ProductRecord]: ...

    async def create_product(self, data: ProductInput) -> ProductRecord: ...

    async def update_product(self, product_id: str, data: ProductInput) -> None: ...

    async def delete_product(self, product_id: str) -> None: ...


class CredentialRepository(Protocol):
    async def find_user_by_username(self, username: str) -> Optional[User]: ...


class LocalRepository:
    """Both repositories on top of the local sqlite database."""

    def __init__(self, db_path: Optional[str] = None):
        if db_path is not None:
            database.configure(db_path)

    async def find_user_by_username(self, username: str) -> Optional[User]:
        return await crud.find_user_by_username(username)

    async def list_products(self) -> List[ProductRecord]:
        return await crud.list_products()

    async def create_product(self, data: ProductInput) -> ProductRecord:
        return await crud.create_product(data)

    async def update_product(self, product_id: str, data: ProductInput) -> None:
        await crud.update_product(product_id, data)

    async def delete_product(self, product_id: str) -> None:
        await crud.delete_product(product_id)

    def close(self) -> None:
        # connections are opened per call
        pass


def open_repository(config: AppConfig) -> LocalRepository | HostedRepository:
    if config.backend == "hosted":
        _logger.info(f"Using hosted data service at {config.supabase_url}")
        return HostedRepository(
            config.supabase_url, config.supabase_key, timeout=config.http_timeout
        )
    _logger.info(f"Using local database at {config.db_path}")
    return LocalRepository(config.db_path)
