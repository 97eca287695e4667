from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Category(Enum):
    TOP = "top"
    NEW = "new"
    SHOW = "show"
    ASK = "ask"
    JOBS = "jobs"

    @property
    def endpoint(self) -> str:
        return _ENDPOINTS[self]


_ENDPOINTS = {
    Category.TOP: "/topstories.json",
    Category.NEW: "/newstories.json",
    Category.SHOW: "/showstories.json",
    Category.ASK: "/askstories.json",
    Category.JOBS: "/jobstories.json",
}


class ItemKind(Enum):
    STORY = "story"
    COMMENT = "comment"
    JOB = "job"
    POLL = "poll"
    POLLOPT = "pollopt"
    ASK = "ask"


@dataclass(frozen=True)
class Item:
    """One record from /item/{id}.json.

    Only build these through ``Item.from_record`` on a payload that already
    passed ``schemas.item_schema``.
    """

    id: int
    kind: ItemKind
    time: int
    by: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    text: Optional[str] = None
    score: Optional[int] = None
    descendants: Optional[int] = None
    kids: Tuple[int, ...] = ()
    parent: Optional[int] = None
    parts: Tuple[int, ...] = ()
    deleted: bool = False
    dead: bool = False

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Item":
        return cls(
            id=record["id"],
            kind=ItemKind(record["type"]),
            time=record["time"],
            by=record.get("by"),
            title=record.get("title"),
            url=record.get("url"),
            text=record.get("text"),
            score=record.get("score"),
            descendants=record.get("descendants"),
            kids=tuple(record.get("kids") or ()),
            parent=record.get("parent"),
            parts=tuple(record.get("parts") or ()),
            deleted=bool(record.get("deleted", False)),
            dead=bool(record.get("dead", False)),
        )

    @property
    def visible(self) -> bool:
        return not (self.deleted or self.dead)


@dataclass(frozen=True)
class ThreadEntry:
    depth: int
    item: Item
