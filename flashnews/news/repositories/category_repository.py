from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Connection

from ...core.database import session_scope
from ...core.pool import ConnectionPool
from ..models.category import Category
from ..schemas.news import CategoryInfo


class CategoryRepository:
    def __init__(self, pool: ConnectionPool[Connection]):
        self.pool = pool

    def find_all(self) -> List[CategoryInfo]:
        with session_scope(self.pool) as session:
            rows = (
                session.query(Category)
                .filter(Category.is_active.is_(True))
                .order_by(Category.display_name)
                .all()
            )
            return [CategoryInfo.model_validate(row) for row in rows]

    def find_by_id(self, category_id: int) -> Optional[CategoryInfo]:
        with session_scope(self.pool) as session:
            row = session.query(Category).filter(Category.id == category_id).first()
            return CategoryInfo.model_validate(row) if row else None

    def find_by_name(self, name: str, include_inactive: bool = False) -> Optional[CategoryInfo]:
        """Category by natural key; names are compared lowercased. Active only unless asked."""
        with session_scope(self.pool) as session:
            query = session.query(Category).filter(Category.name == name.strip().lower())
            if not include_inactive:
                query = query.filter(Category.is_active.is_(True))
            row = query.first()
            return CategoryInfo.model_validate(row) if row else None

    def save(self, category: CategoryInfo) -> Optional[CategoryInfo]:
        with session_scope(self.pool) as session:
            if category.id:
                row = session.query(Category).filter(Category.id == category.id).first()
                if not row:
                    return None
            else:
                row = Category()
                session.add(row)

            row.name = category.name.strip().lower()
            row.display_name = category.display_name
            row.description = category.description
            row.is_active = category.is_active
            session.flush()
            return CategoryInfo.model_validate(row)

    def soft_delete(self, category_id: int) -> bool:
        with session_scope(self.pool) as session:
            updated = session.query(Category).filter(Category.id == category_id).update(
                {Category.is_active: False}
            )
            return updated > 0

    def count(self) -> int:
        with session_scope(self.pool) as session:
            return session.query(func.count(Category.id)).filter(
                Category.is_active.is_(True)
            ).scalar() or 0
