"""Core intent resolution engine."""
