# provide dataclass models

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class User:
    """credential record as stored in the users table"""

    id: str
    username: str
    password: str
    role: str  # "user" or "admin"


@dataclass(frozen=True)
class Session:
    id: str
    username: str
    role: Role

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role.value}


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    unit_price: float
    quantity: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ProductInput:
    """body of a create/update request, produced by validation"""

    name: str
    unit_price: float
    quantity: int
