"""Cadence - recurring task due-date scheduler."""
