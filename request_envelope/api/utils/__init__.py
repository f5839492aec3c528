"""Utility modules for API-specific functionality.

- **responses**: JSON response class rendering with orjson
"""
