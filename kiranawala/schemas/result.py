# kiranawala/schemas/result.py
"""
Result types returned by the engines.

A read tells the caller where its data came from, so "legitimately empty"
(REMOTE with no items) can be told apart from "could not reach the source"
(CACHE, with the remote failure kept as `cause`).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class DataSource(str, Enum):
    REMOTE = "remote"
    CACHE = "cache"


@dataclass
class Fetched(Generic[T]):
    items: List[T] = field(default_factory=list)
    source: DataSource = DataSource.REMOTE
    cause: Optional[Exception] = None

    @property
    def degraded(self) -> bool:
        return self.source == DataSource.CACHE


@dataclass
class Ok(Generic[T]):
    value: T
    source: DataSource = DataSource.REMOTE


@dataclass
class NotFound:
    key: str


@dataclass
class Unavailable:
    cause: Exception


Outcome = Union[Ok, NotFound, Unavailable]
