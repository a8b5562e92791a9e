"""
Backend package for the project backup API.

This package provides a FastAPI application that saves project snapshots
per user and restores the most recent one, with a pluggable store so the
in-memory development backend can be swapped for a SQL database.
"""
