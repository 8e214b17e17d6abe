from sucat.models.refresh_token import RefreshToken
from sucat.models.user import User, UserRole

__all__ = [
    "RefreshToken",
    "User",
    "UserRole",
]
