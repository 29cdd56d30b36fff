from __future__ import annotations
from typing import Iterable

from sqlalchemy import String, case, cast, func, or_, select

from liftlog.models import Exercise
from liftlog.repositories.base import BaseRepository, Page

class ExerciseRepository(BaseRepository[Exercise]):
    model = Exercise

    def get_many(self, ids: Iterable[int]) -> dict[int, Exercise]:
        ids = set(ids)
        if not ids:
            return {}
        rows = self.db.execute(select(Exercise).where(Exercise.id.in_(ids))).scalars().all()
        return {e.id: e for e in rows}

    def search(
        self,
        *,
        q: str | None = None,
        category: str | None = None,
        muscle: str | None = None,
        limit: int = 18,
        offset: int = 0,
    ) -> Page[Exercise]:
        """Catalog listing, alphabetical; with ``q`` the best name matches come first."""
        conds = []
        if category:
            conds.append(func.lower(Exercise.category) == category.lower())
        if muscle:
            # muscle lists are JSON arrays; match the quoted element in their text form
            conds.append(func.lower(cast(Exercise.primary_muscles, String)).contains(f'"{muscle.lower()}"'))
        order = [Exercise.name.asc(), Exercise.id.asc()]
        term = (q or "").strip().lower()
        if term:
            name = func.lower(Exercise.name)
            conds.append(or_(name.contains(term), func.lower(Exercise.equipment).contains(term)))
            rank = case(
                (name == term, 1),
                (name.startswith(term), 2),
                (name.contains(term), 3),
                else_=4,
            )
            order.insert(0, rank)
        stmt = select(Exercise).where(*conds).order_by(*order)
        items = self.db.execute(stmt.limit(limit).offset(offset)).scalars().all()
        total = self.db.execute(select(func.count()).select_from(Exercise).where(*conds)).scalar_one()
        return Page(items=list(items), total=total, limit=limit, offset=offset)

    def create(
        self,
        *,
        name: str,
        category: str | None = None,
        equipment: str | None = None,
        primary_muscles: list[str] | None = None,
        secondary_muscles: list[str] | None = None,
    ) -> Exercise:
        return self.add_and_refresh(Exercise(
            name=name,
            category=category,
            equipment=equipment,
            primary_muscles=list(primary_muscles or []),
            secondary_muscles=list(secondary_muscles or []),
        ))
