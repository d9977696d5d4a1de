"""Shared test data for bookmark interchange tests."""
