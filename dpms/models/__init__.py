"""Shared ORM base."""
