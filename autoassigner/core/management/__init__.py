"""Configuration and per-group state management."""
