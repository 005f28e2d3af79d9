"""
schedulecheck - date applicability and time overlap engine for schedules.
"""

__version__ = "0.1.0"
