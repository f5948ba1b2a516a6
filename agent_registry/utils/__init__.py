"""Utility helpers for the registry HTTP layer."""
