"""Pydantic models for request bodies and error responses.

- **errors**: The error envelope returned by every error response
- **users**: Request and response models of the users resource
"""
