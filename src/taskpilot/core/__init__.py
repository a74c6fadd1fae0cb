"""Ports, error values, clock and application state."""
