"""Domain entity representing a user."""

from dataclasses import dataclass


@dataclass
class User:
    """Core attributes of an application user needed for notifications."""

    id: int | None
    name: str
    email: str
    is_active: bool = True
