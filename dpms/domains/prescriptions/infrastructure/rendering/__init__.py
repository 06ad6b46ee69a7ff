"""Scannable image rendering."""
