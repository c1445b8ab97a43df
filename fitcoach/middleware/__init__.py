"""
Middleware package for the application.
"""

from fitcoach.middleware.request_id import RequestIDMiddleware

__all__ = [
    "RequestIDMiddleware",
]
