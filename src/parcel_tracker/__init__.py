"""Parcel Tracker - package forwarding workflow between clients, logists and managers."""

__version__ = "0.1.0"
