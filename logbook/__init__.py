"""Internship logbook service package."""
