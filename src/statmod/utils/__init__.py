"""Utility functions and tools used across the statmod package.

- `logger`: Logging configuration shared by every module
- `validation`: Shape and value checks applied to user-provided arrays
"""
