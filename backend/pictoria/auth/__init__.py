"""Session authentication against the hosted identity provider."""

from pictoria.auth.dependencies import get_optional_user, get_session_token, require_user

__all__ = ["get_session_token", "get_optional_user", "require_user"]
