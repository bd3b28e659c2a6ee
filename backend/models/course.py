"""Course model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from backend.database import Base


class Course(Base):
    """Represents a course taught by a teacher."""
    __tablename__ = "courses"

    id = Column(String, primary_key=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
