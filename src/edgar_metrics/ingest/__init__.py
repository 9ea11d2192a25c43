"""Bounded loading of the raw CSV extracts."""
