from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from expense_tracker.core.errors import AuthenticationError
from expense_tracker.core.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    """Resolve the caller's userId from the Authorization header.

    No token at all is a 401; a token that fails verification is a 403.
    The user row is not looked up, the token alone is the session.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return decode_access_token(credentials.credentials)
