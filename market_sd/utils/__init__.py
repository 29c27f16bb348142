"""
Utility functions module.

Time Semantics:
- Schedule windows are UTC wall-clock times with no date component
- Naive datetimes are interpreted as UTC
- Per-minute grids always start at 00:00 UTC of the requested day
"""
