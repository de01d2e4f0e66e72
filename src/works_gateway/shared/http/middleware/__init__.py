from works_gateway.shared.http.middleware.basic_auth_middleware import BasicAuthMiddleware
from works_gateway.shared.http.middleware.logging_middleware import LoggingMiddleware
from works_gateway.shared.http.middleware.request_id_middleware import RequestIdMiddleware

__all__ = ["BasicAuthMiddleware", "LoggingMiddleware", "RequestIdMiddleware"]
