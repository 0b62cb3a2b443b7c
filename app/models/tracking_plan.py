from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from app.models.base import Base, utcnow


class TrackingPlan(Base):
    __tablename__ = "tracking_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    # Embedded event/property document, stored exactly as submitted
    events = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
