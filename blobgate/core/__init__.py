"""Core configuration, logging and request auth helpers."""
