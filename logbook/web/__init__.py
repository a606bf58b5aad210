"""HTTP layer for the logbook service."""
