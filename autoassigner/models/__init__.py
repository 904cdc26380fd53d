"""Data models for AutoAssigner."""
