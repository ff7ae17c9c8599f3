# biztrack/models/notifications.py

from sqlalchemy import Boolean, Column, Index, Integer, String, DateTime
from sqlalchemy.sql import func

from biztrack.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)

    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    related_id = Column(Integer, nullable=True)
    related_model = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_notifications_read_created", "read", "created_at"),
    )
