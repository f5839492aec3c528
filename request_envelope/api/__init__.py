"""HTTP API layer built on FastAPI.

Key components:
- **main**: Application factory
- **binding**: Translation of FastAPI/Starlette exceptions into typed failures
- **dependencies**: Accept and Content-Type enforcement for JSON resources
- **classification**: Ordered rules mapping a failure to status and envelope
- **middleware**: Exception handler registration
- **schemas**: Pydantic models, including the error envelope
- **routes**: Resource routers
- **utils**: orjson response class
"""
