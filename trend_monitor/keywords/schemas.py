"""Data models for the keywords module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class KeywordStatus(str, Enum):
    """Lifecycle of a keyword. Archiving replaces deletion."""

    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass
class Keyword:
    """
    A tracked keyword with optional aliases.

    A keyword matches a text when its name or any alias occurs in it
    (case-insensitive substring). Tags are free-form labels for grouping
    in the dashboard and play no part in matching.
    """

    id: str
    name: str
    aliases: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    status: KeywordStatus = KeywordStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary (used by the keyword cache)."""
        return {
            "id": self.id,
            "name": self.name,
            "aliases": list(self.aliases),
            "tags": list(self.tags),
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Keyword":
        """Create a keyword from the output of to_dict()."""
        created_at = data.get("created_at")
        updated_at = data.get("updated_at")
        return cls(
            id=data["id"],
            name=data["name"],
            aliases=data.get("aliases", []),
            tags=data.get("tags", []),
            status=KeywordStatus(data.get("status", "active")),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )
