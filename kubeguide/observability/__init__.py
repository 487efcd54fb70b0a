"""Logging and metrics for kubeguide."""
