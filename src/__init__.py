"""Jobboard: status boards, study schedules and activity feeds for a job search."""

__version__ = "0.1.0"
