"""Sensor hardware access: capability interface, backends and the hub bridge."""
