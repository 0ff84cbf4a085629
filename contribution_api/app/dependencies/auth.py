from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from bson import ObjectId
import logging
from ..util.auth import decode_token
from ..services.event import EventService
from ..config import settings

logger = logging.getLogger(__name__)

# OAuth2 scheme for swagger UI; tokens are issued by the external auth service
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.TOKEN_URL, auto_error=False)

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

async def get_current_owner(token: str = Depends(oauth2_scheme)) -> ObjectId:
    """
    Resolve the caller's owner key from a JWT access token.

    Args:
        token: Bearer token from the Authorization header

    Returns:
        The owner key parsed from the token's uid claim

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired,
            or its uid claim is not a valid identifier
    """
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except InvalidTokenError:
        raise _unauthorized("Could not validate credentials")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    user_id = payload.get("uid")
    if not isinstance(user_id, str) or not ObjectId.is_valid(user_id):
        logger.warning(f"Rejected token with invalid uid claim: {user_id!r}")
        raise _unauthorized("invalid user id")

    return ObjectId(user_id)

def get_event_service(request: Request) -> EventService:
    return request.app.state.event_service
