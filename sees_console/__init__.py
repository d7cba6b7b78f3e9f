"""SEES Console: admin service for domain decommission notices."""

__version__ = "0.1.0"
