"""Utility modules for Habital."""
