"""Auction messaging - Placeholder templating and ordered chat dispatch."""

__version__ = "0.1.0"
