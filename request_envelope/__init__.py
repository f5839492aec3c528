"""Request Envelope - uniform error responses for JSON web APIs.

Every failure raised while routing, negotiating, binding or validating an
inbound HTTP request is converted into one stable, machine-readable shape:

    {"errors": [{"field": ..., "code": ..., "message": ...}]}

Architecture Overview:
- **API Layer**: FastAPI application, exception handlers and the
  classification chain that builds error envelopes
- **Core Layer**: Failure taxonomy, validation engine boundary,
  configuration and logging
"""
