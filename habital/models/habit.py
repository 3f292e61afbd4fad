"""
Habit model and its reminder notifications.

Habit: a trackable recurring activity (good or bad), owning its versioned
repeat patterns and its per-day completion rows.
Notification: a reminder timestamp attached to a habit.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import uuid4

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import HabitIntensity

if TYPE_CHECKING:
    from .completion import Completion
    from .habit_list import HabitCategory, HabitList
    from .repeat_pattern import RepeatPattern


class Habit(Base, TimestampMixin):
    """A habit with its schedule history and completion log."""

    __tablename__ = "habits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, default=lambda: str(uuid4())
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    habit_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Opaque colour payload (hex string); interpreted by the presentation layer
    color: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_bad_habit: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    intensity_level: Mapped[int] = mapped_column(
        Integer, default=HabitIntensity.LIGHT.value, nullable=False
    )

    # Position among all non-archived habits ("order" is reserved in SQL)
    order: Mapped[int] = mapped_column("display_order", Integer, default=0, nullable=False)
    # Position among the non-archived habits of its list
    list_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Denormalised counters kept up to date by the toggle service
    best_streak_ever: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_completions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_completion_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    habit_list_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("habit_lists.id", ondelete="SET NULL"), nullable=True, index=True
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("habit_categories.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    habit_list: Mapped[Optional["HabitList"]] = relationship(
        "HabitList", back_populates="habits"
    )
    category: Mapped[Optional["HabitCategory"]] = relationship(
        "HabitCategory", back_populates="habits"
    )
    repeat_patterns: Mapped[List["RepeatPattern"]] = relationship(
        "RepeatPattern",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="RepeatPattern.effective_from",
    )
    completions: Mapped[List["Completion"]] = relationship(
        "Completion",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="Completion.day",
    )
    notifications: Mapped[List["Notification"]] = relationship(
        "Notification", back_populates="habit", cascade="all, delete-orphan"
    )

    @property
    def intensity(self) -> HabitIntensity:
        return HabitIntensity.from_level(self.intensity_level or 1)

    def __repr__(self) -> str:
        return (
            f"<Habit(id={self.id}, name={self.name!r}, order={self.order}, "
            f"archived={self.is_archived})>"
        )


class Notification(Base):
    """Reminder attached to a habit."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    habit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    habit: Mapped["Habit"] = relationship("Habit", back_populates="notifications")

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, habit_id={self.habit_id}, at={self.timestamp})>"
