"""API-related constants."""

# HTTP Headers
ALLOW_HEADER = "Allow"

# Content types
JSON_MEDIA_TYPE = "application/json"
JSON_CONTENT_TYPES = {"application/json"}
JSON_SUFFIX = "+json"

# Routes
USERS_PREFIX = "/api/users"
