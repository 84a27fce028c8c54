"""Utility helpers for georeview."""
