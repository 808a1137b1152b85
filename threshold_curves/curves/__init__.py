"""Curve builders over a shared threshold sweep."""
