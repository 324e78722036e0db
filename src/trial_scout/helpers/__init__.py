"""Helpers for reading externally owned JSON records."""
