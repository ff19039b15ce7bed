# spotfeed/auth/firebase_auth.py
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth
from google.auth.exceptions import TransportError

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(token: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> str:
    """Caller uid from a Firebase ID token; feed services only ever see this uid."""
    if not token:
        raise _unauthorized("No authentication token provided")

    try:
        decoded_token = auth.verify_id_token(token.credentials)
        return decoded_token["uid"]
    except auth.ExpiredIdTokenError:
        raise _unauthorized("Token expired")
    except auth.RevokedIdTokenError:
        raise _unauthorized("Token revoked")
    except (auth.InvalidIdTokenError, ValueError):
        raise _unauthorized("Invalid token")
    except TransportError as e:
        logger.warning("Token verification unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not verify token (network error)"
        )
