"""Booking lifecycle engine for the ShaadiSarthi marketplace."""

__version__ = "1.0.0"
