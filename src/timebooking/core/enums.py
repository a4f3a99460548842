from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Group names used for authorization."""

    ADMIN = "admin"
    USER = "user"
