"""Core package for framework-independent functionality.

- **config**: Centralized configuration management with environment support
- **exceptions**: Failure categories, body causes and typed request failures
- **logging**: Structured logging with Loguru
- **validation**: Boundary with the declarative validation engine
"""
