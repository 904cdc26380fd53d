"""Command line interface for AutoAssigner."""
