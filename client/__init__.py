from client.api import ApiClient, ApiError, SessionExpired
from client.auth import AuthService
from client.tasks import TaskService
from client.token_holder import TokenHolder

__all__ = [
    "ApiClient",
    "ApiError",
    "SessionExpired",
    "AuthService",
    "TaskService",
    "TokenHolder",
]
