"""Storage and persistence layer.

This module persists canonical catalog snapshots with debounced writes.
It owns migration, backups, quota checks, and import/export files.
"""
