# Todo API Middleware
from todo_api.middleware.preflight import PreflightMiddleware
from todo_api.middleware.security_headers import SecurityHeadersMiddleware

__all__ = ["PreflightMiddleware", "SecurityHeadersMiddleware"]
