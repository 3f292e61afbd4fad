"""
Repeat pattern models: versioned recurrence rules attached to a habit.

RepeatPattern: one version of a habit's schedule, effective from a day.
DailyGoal / WeeklyGoal / MonthlyGoal: the rule body; a pattern owns
exactly one of them.
"""

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, Date, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .enums import HabitTrackingType

if TYPE_CHECKING:
    from .habit import Habit


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RepeatPattern(Base):
    """A time-scoped recurrence rule version."""

    __tablename__ = "repeat_patterns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    habit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    creation_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    follow_up: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tracking_type: Mapped[HabitTrackingType] = mapped_column(
        Enum(HabitTrackingType), default=HabitTrackingType.REPETITIONS, nullable=False
    )
    repeats_per_day: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # Target minutes for duration tracking
    duration: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    quantity_unit: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # Relationships
    habit: Mapped["Habit"] = relationship("Habit", back_populates="repeat_patterns")
    daily_goal: Mapped[Optional["DailyGoal"]] = relationship(
        "DailyGoal", uselist=False, cascade="all, delete-orphan", back_populates="pattern"
    )
    weekly_goal: Mapped[Optional["WeeklyGoal"]] = relationship(
        "WeeklyGoal", uselist=False, cascade="all, delete-orphan", back_populates="pattern"
    )
    monthly_goal: Mapped[Optional["MonthlyGoal"]] = relationship(
        "MonthlyGoal", uselist=False, cascade="all, delete-orphan", back_populates="pattern"
    )

    def __repr__(self) -> str:
        kind = (
            "daily" if self.daily_goal is not None
            else "weekly" if self.weekly_goal is not None
            else "monthly" if self.monthly_goal is not None
            else "none"
        )
        return (
            f"<RepeatPattern(id={self.id}, habit_id={self.habit_id}, "
            f"effective_from={self.effective_from}, kind={kind}, "
            f"follow_up={self.follow_up})>"
        )


class DailyGoal(Base):
    """Every day, every N days, or a (multi-week) weekday rotation."""

    __tablename__ = "daily_goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repeat_pattern_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("repeat_patterns.id", ondelete="CASCADE"), unique=True
    )
    every_day: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    days_interval: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # 7 flags per rotation week, Monday first
    specific_days: Mapped[Optional[List[bool]]] = mapped_column(JSON, nullable=True)

    pattern: Mapped["RepeatPattern"] = relationship(
        "RepeatPattern", back_populates="daily_goal"
    )


class WeeklyGoal(Base):
    """Selected weekdays, every week or every N ISO weeks."""

    __tablename__ = "weekly_goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repeat_pattern_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("repeat_patterns.id", ondelete="CASCADE"), unique=True
    )
    every_week: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    week_interval: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    specific_days: Mapped[Optional[List[bool]]] = mapped_column(JSON, nullable=True)

    pattern: Mapped["RepeatPattern"] = relationship(
        "RepeatPattern", back_populates="weekly_goal"
    )


class MonthlyGoal(Base):
    """Selected days of month, every month or every N months."""

    __tablename__ = "monthly_goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repeat_pattern_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("repeat_patterns.id", ondelete="CASCADE"), unique=True
    )
    every_month: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    month_interval: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # 31 flags, index 0 is day 1
    specific_days: Mapped[Optional[List[bool]]] = mapped_column(JSON, nullable=True)

    pattern: Mapped["RepeatPattern"] = relationship(
        "RepeatPattern", back_populates="monthly_goal"
    )
