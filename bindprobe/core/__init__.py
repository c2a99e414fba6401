"""Core utilities and shared application primitives.

Modules in this package cover configuration, request validation and the
middleware that sits between FastAPI and the form binder.
"""

