"""Database models for persisted drill state."""
from sqlalchemy import CheckConstraint, Column, Integer, String

from lexdrill.models.base import Base, TimestampMixin


class AttemptRecordRow(Base, TimestampMixin):
    """Persisted attempt counts for one learnable item."""

    __tablename__ = "attempt_records"

    id = Column(Integer, primary_key=True)
    stat_key = Column(String, unique=True, nullable=False, index=True)  # "<text_id>|<direction>"
    text_id = Column(String, nullable=False)
    direction = Column(String, nullable=False)  # e.g., "es-en"
    correct = Column(Integer, nullable=False, default=0)
    incorrect = Column(Integer, nullable=False, default=0)
    total = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("correct >= 0", name="check_correct"),
        CheckConstraint("incorrect >= 0", name="check_incorrect"),
        CheckConstraint("total = correct + incorrect", name="check_total"),
    )
