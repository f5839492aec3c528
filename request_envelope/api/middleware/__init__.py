"""Request processing hooks shared by all API endpoints.

- **error_handler**: Centralized exception handling that answers every
  failure with the JSON error envelope
"""
