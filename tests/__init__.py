"""Tests for the Bookmark Interchange Engine."""
