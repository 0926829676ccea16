"""Utility helpers: configuration, constants, time."""
