"""Core configuration, logging and clock utilities."""
