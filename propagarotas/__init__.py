"""Least-cost routing by information propagation, simulated as discrete events."""

__version__ = "0.1.0"

__all__ = ["descriptor", "message", "router"]