"""Completion model: one row per habit per calendar day."""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .habit import Habit


class Completion(Base, TimestampMixin):
    """What was logged for a habit on one day.

    ``completed`` means the day's target was reached by what was logged
    (for a bad habit, a logged slip). ``repetitions``, ``duration`` and
    ``quantity`` carry the logged amounts for the three tracking types.
    """

    __tablename__ = "completions"
    __table_args__ = (
        UniqueConstraint("habit_id", "day_key", name="uq_completions_habit_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    habit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)
    day_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)

    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    skipped: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    repetitions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    logged_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    habit: Mapped["Habit"] = relationship("Habit", back_populates="completions")

    @property
    def is_empty(self) -> bool:
        """True when nothing is logged and the day is not skipped."""
        return (
            not self.completed
            and not self.skipped
            and not self.repetitions
            and not self.duration
            and not self.quantity
        )

    def __repr__(self) -> str:
        return (
            f"<Completion(id={self.id}, habit_id={self.habit_id}, "
            f"day={self.day_key}, completed={self.completed}, skipped={self.skipped})>"
        )
