"""Bid Tracker: construction bid tracking API."""

__version__ = '1.0.0'
