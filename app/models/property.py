from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, UniqueConstraint
from app.models.base import Base, utcnow


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(16), nullable=False, index=True)
    description = Column(Text, nullable=False)
    validation_rules = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('name', 'type', name='uq_properties_name_type'),
    )
