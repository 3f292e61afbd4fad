"""Completion mutations for one habit and day.

Every call is one transaction: load the habit, mutate its log through
:class:`HabitAggregate`, refresh the denormalised counters, commit, and
then publish the completion events.
"""

from datetime import date
from typing import Callable, List, Optional

import structlog

from ..core.database import Database
from ..domain.errors import HabitNotFound
from ..domain.events import EventBus, HabitCompleted, HabitIntervalCompleted, HabitToggled
from ..infrastructure.repositories import SqlAlchemyHabitRepository
from ..models.habit_aggregate import HabitAggregate, ToggleOutcome
from ..utils.dates import today as local_today
from .completion import is_completed
from .streaks import EVERY_DAY_LOOKBACK_DAYS, PATTERN_LOOKBACK_DAYS, current_streak

logger = structlog.get_logger(__name__)


class HabitToggleService:
    """Toggle, skip and clear completions."""

    def __init__(
        self,
        database: Database,
        bus: EventBus,
        timezone: Optional[str] = None,
        every_day_lookback: int = EVERY_DAY_LOOKBACK_DAYS,
        pattern_lookback: int = PATTERN_LOOKBACK_DAYS,
    ):
        self.database = database
        self.bus = bus
        self.timezone = timezone
        self.every_day_lookback = every_day_lookback
        self.pattern_lookback = pattern_lookback

    def toggle(
        self,
        habit_id: int,
        day: Optional[date] = None,
        minutes: Optional[int] = None,
        quantity: Optional[int] = None,
    ) -> ToggleOutcome:
        """Advance the day's completion by the habit's tracking rules.

        Toggling a single-repetition habit twice restores the previous
        state.
        """
        return self._mutate(
            habit_id, day, lambda agg, d: agg.toggle(d, minutes=minutes, quantity=quantity)
        )

    def force_complete(self, habit_id: int, day: Optional[date] = None) -> ToggleOutcome:
        return self._mutate(habit_id, day, lambda agg, d: agg.force_complete(d))

    def clear_day(self, habit_id: int, day: Optional[date] = None) -> ToggleOutcome:
        return self._mutate(habit_id, day, lambda agg, d: agg.clear_day(d))

    def skip(self, habit_id: int, day: Optional[date] = None) -> ToggleOutcome:
        """Mark a day as skipped; it no longer counts as due or missed."""
        return self._mutate(habit_id, day, self._skip)

    def unskip(self, habit_id: int, day: Optional[date] = None) -> ToggleOutcome:
        return self._mutate(habit_id, day, self._unskip)

    # ------------------------------------------------------------------

    @staticmethod
    def _skip(aggregate: HabitAggregate, day: date) -> ToggleOutcome:
        was = is_completed(aggregate.schedule(), day)
        aggregate.skip(day)
        return ToggleOutcome(day=day, was_completed=was, is_completed=False)

    @staticmethod
    def _unskip(aggregate: HabitAggregate, day: date) -> ToggleOutcome:
        was = is_completed(aggregate.schedule(), day)
        aggregate.unskip(day)
        return ToggleOutcome(
            day=day, was_completed=was, is_completed=is_completed(aggregate.schedule(), day)
        )

    def _mutate(
        self,
        habit_id: int,
        day: Optional[date],
        action: Callable[[HabitAggregate, date], ToggleOutcome],
    ) -> ToggleOutcome:
        today = local_today(self.timezone)
        day = day or today
        with self.database.session_scope() as session:
            habit = SqlAlchemyHabitRepository(session).get_by_id(habit_id)
            if habit is None:
                raise HabitNotFound(habit_id)
            aggregate = HabitAggregate(habit)
            outcome = action(aggregate, day)

            schedule = aggregate.schedule()
            # The run ending at the toggled day and the run ending today
            streak = max(
                current_streak(
                    schedule,
                    reference,
                    today,
                    every_day_lookback=self.every_day_lookback,
                    pattern_lookback=self.pattern_lookback,
                )
                for reference in {day, today}
            )
            aggregate.update_best_streak(streak)
            pattern = schedule.timeline.at(day)

        events: List[object] = [
            HabitToggled(
                habit_id=habit_id,
                date=day,
                was_completed=outcome.was_completed,
                is_completed=outcome.is_completed,
            )
        ]
        if outcome.became_completed:
            events.append(HabitCompleted(habit_id=habit_id, date=day))
            if outcome.interval_follow_up and pattern is not None:
                events.append(
                    HabitIntervalCompleted(
                        habit_id=habit_id, date=day, days_interval=pattern.rule.days_interval
                    )
                )

        logger.info(
            "habit_toggled",
            habit_id=habit_id,
            day=day.isoformat(),
            was_completed=outcome.was_completed,
            is_completed=outcome.is_completed,
            streak=streak,
        )
        for event in events:
            self.bus.publish(event)
        return outcome
