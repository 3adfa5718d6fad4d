import logging
from typing import Optional

from fastapi import HTTPException, Request
from supabase import AuthApiError, AuthError

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(status_code=401, detail=message)


def extract_token(request: Request) -> Optional[str]:
    """Read the access token from the cookie, falling back to a Bearer header."""
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_current_user_id(request: Request) -> str:
    """
    FastAPI dependency: resolve the caller to a Supabase user id or reject with 401.
    """
    token = extract_token(request)
    if not token:
        raise _unauthorized("Not authenticated")

    client = request.app.state.supabase
    try:
        response = client.auth.get_user(token)
    except AuthApiError as e:
        if e.code == "user_not_found":
            logger.error("User not found for token")
            raise _unauthorized("User not found")
        logger.error(f"Token verification failed: {e}")
        raise _unauthorized("Invalid token")
    except AuthError as e:
        logger.error(f"Token verification failed: {e}")
        raise _unauthorized("Invalid token")
    except Exception as e:
        logger.error(f"Authentication error: {e}")
        raise _unauthorized("Authentication failed")

    if response is None or response.user is None:
        logger.error("User not found for token")
        raise _unauthorized("User not found")

    return str(response.user.id)
