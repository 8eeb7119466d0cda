"""Infrastructure adapters: logging setup, audit trail and secret persistence."""
