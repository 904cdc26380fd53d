"""Core assignment logic."""
