from __future__ import annotations

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PageParams(BaseModel):
    page: int = 0
    size: int = 20

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(ApiModel, Generic[T]):
    content: List[T]
    total_elements: int
    total_pages: int
    page: int
    size: int
    first: bool
    last: bool

    @classmethod
    def build(cls, content: list, total: int, params: PageParams) -> "Page":
        total_pages = math.ceil(total / params.size) if params.size else 0
        return cls(
            content=content,
            total_elements=total,
            total_pages=total_pages,
            page=params.page,
            size=params.size,
            first=params.page == 0,
            last=params.page >= total_pages - 1,
        )

    @classmethod
    def empty(cls, params: PageParams) -> "Page":
        return cls.build([], 0, params)
