from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Connection

from ...core.database import session_scope
from ...core.pool import ConnectionPool
from ..models.location import Location
from ..schemas.news import LocationInfo


class LocationRepository:
    def __init__(self, pool: ConnectionPool[Connection]):
        self.pool = pool

    def find_all(self) -> List[LocationInfo]:
        with session_scope(self.pool) as session:
            rows = (
                session.query(Location)
                .filter(Location.is_active.is_(True))
                .order_by(Location.name)
                .all()
            )
            return [LocationInfo.model_validate(row) for row in rows]

    def find_by_id(self, location_id: int) -> Optional[LocationInfo]:
        with session_scope(self.pool) as session:
            row = session.query(Location).filter(Location.id == location_id).first()
            return LocationInfo.model_validate(row) if row else None

    def find_by_country_code(self, country_code: str, include_inactive: bool = False) -> Optional[LocationInfo]:
        """Location by natural key; codes are compared uppercased. Active only unless asked."""
        with session_scope(self.pool) as session:
            query = session.query(Location).filter(Location.country_code == country_code.strip().upper())
            if not include_inactive:
                query = query.filter(Location.is_active.is_(True))
            row = query.first()
            return LocationInfo.model_validate(row) if row else None

    def save(self, location: LocationInfo) -> Optional[LocationInfo]:
        with session_scope(self.pool) as session:
            if location.id:
                row = session.query(Location).filter(Location.id == location.id).first()
                if not row:
                    return None
            else:
                row = Location()
                session.add(row)

            row.name = location.name
            row.country_code = location.country_code.strip().upper()
            row.timezone = location.timezone
            row.is_active = location.is_active
            session.flush()
            return LocationInfo.model_validate(row)

    def soft_delete(self, location_id: int) -> bool:
        with session_scope(self.pool) as session:
            updated = session.query(Location).filter(Location.id == location_id).update(
                {Location.is_active: False}
            )
            return updated > 0

    def count(self) -> int:
        with session_scope(self.pool) as session:
            return session.query(func.count(Location.id)).filter(
                Location.is_active.is_(True)
            ).scalar() or 0
