"""Habital: habit tracking with versioned recurrence rules."""
