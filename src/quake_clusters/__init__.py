"""Durable spatial clustering of seismic events."""

__version__ = "0.1.0"
