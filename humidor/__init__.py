"""Humidor environmental monitoring core.

Sensor backends (home-automation hub and cloud sensor API), reading cache,
stability scoring, threshold alerting and hub automation rules.
"""

__version__ = "1.0.0"
