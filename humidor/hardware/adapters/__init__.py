"""Sensor backend adapters."""
