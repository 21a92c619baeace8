"""Vessels app package: the registry of vessels owned by users."""
