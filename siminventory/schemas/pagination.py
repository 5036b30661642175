import math
from typing import TypeVar, Generic, Sequence
from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    pages: int
    size: int

    @classmethod
    def of(cls, items: Sequence, total: int, page: int, size: int) -> "Page":
        """An empty result still reports one page."""
        return cls(items=list(items), total=total, page=page, pages=math.ceil(total / size) if total else 1, size=size)
