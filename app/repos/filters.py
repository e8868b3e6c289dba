"""Composable listing filters.

Each filter turns its optional fields into SQL predicates; unset fields add
nothing, so any combination of search, category, author and folder produces a
single query instead of one query per combination.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.sql import Select

from app.models import Prompt, PromptBookmark


def _search_clause(search: str):
    # % and _ in user text match literally
    term = search.strip().lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{term}%"
    return or_(
        func.lower(Prompt.title).like(pattern, escape="\\"),
        func.lower(Prompt.description).like(pattern, escape="\\"),
        func.lower(Prompt.content).like(pattern, escape="\\"),
    )


@dataclass
class PromptFilter:
    search: Optional[str] = None
    category: Optional[str] = None
    author_ids: Optional[Sequence[int]] = None
    public_only: bool = True

    def clauses(self) -> List:
        clauses = []
        if self.public_only:
            clauses.append(Prompt.is_public.is_(True))
        if self.category:
            clauses.append(Prompt.category == self.category)
        if self.author_ids is not None:
            clauses.append(Prompt.author_id.in_(list(self.author_ids)))
        if self.search and self.search.strip():
            clauses.append(_search_clause(self.search))
        return clauses

    def apply(self, stmt: Select) -> Select:
        clauses = self.clauses()
        return stmt.where(*clauses) if clauses else stmt


@dataclass
class BookmarkFilter:
    user_id: int
    folder_id: Optional[int] = None
    search: Optional[str] = None

    def clauses(self) -> List:
        clauses = [PromptBookmark.user_id == self.user_id]
        if self.folder_id is not None:
            clauses.append(PromptBookmark.folder_id == self.folder_id)
        if self.search and self.search.strip():
            clauses.append(PromptBookmark.prompt_id.in_(
                select(Prompt.id).where(_search_clause(self.search))
            ))
        return clauses

    def apply(self, stmt: Select) -> Select:
        return stmt.where(*self.clauses())
