"""Core components of storjpy."""
