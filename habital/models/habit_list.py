"""Grouping models: user-defined habit lists and categories."""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .habit import Habit


class HabitList(Base, TimestampMixin):
    """An ordered, named group of habits (one tab in the list bar)."""

    __tablename__ = "habit_lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    order: Mapped[int] = mapped_column("display_order", Integer, default=0, nullable=False)

    habits: Mapped[List["Habit"]] = relationship("Habit", back_populates="habit_list")

    def __repr__(self) -> str:
        return f"<HabitList(id={self.id}, name={self.name!r}, order={self.order})>"


class HabitCategory(Base, TimestampMixin):
    """A category label (e.g. Health, Learning) a habit can belong to."""

    __tablename__ = "habit_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    order: Mapped[int] = mapped_column("display_order", Integer, default=0, nullable=False)

    habits: Mapped[List["Habit"]] = relationship("Habit", back_populates="category")

    def __repr__(self) -> str:
        return f"<HabitCategory(id={self.id}, name={self.name!r})>"
