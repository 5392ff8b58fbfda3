"""Routes package for FastAPI endpoints.

This package contains all API route modules for the form evaluation service.
"""

from formflow.routes import evaluate, forms, health

__all__ = ["evaluate", "forms", "health"]
