"""Normalization and sanitization layer.

This module coerces untrusted JSON values into canonical catalog fields.
It enforces uniqueness and referential integrity for the migrator.
"""
