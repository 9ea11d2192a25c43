"""Validation and sanitization of raw CSV rows.

`validate` holds the pure field validators; `sanitize` applies them to whole
rows of each extract and builds the typed records used by the join.
"""
