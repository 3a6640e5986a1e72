from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from ...core.database import Base


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    country_code = Column(String(3), nullable=False, unique=True)  # stored uppercase, alpha-2 or alpha-3
    timezone = Column(String(50))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())

    def __repr__(self):
        return f"<Location(id={self.id}, country_code='{self.country_code}')>"
