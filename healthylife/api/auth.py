"""Bearer-token identity for the API.

Optional routes treat a missing or invalid token as an anonymous caller;
required routes answer 401. Tokens are HS256 JWTs whose ``id`` (or ``sub``)
claim is the user id.
"""
import logging
from typing import Any, Dict, Optional

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError
from fastapi import HTTPException, Request

from healthylife.utilities.config import JWT_SECRET, JWT_ALGORITHM

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[7:].strip()
    return token or None


def _decode_jwt(token: str) -> Dict[str, Any]:
    """Decode a JWT and return its payload."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])


def optional_user(request: Request) -> Optional[Dict[str, Any]]:
    token = _bearer_token(request)
    if not token:
        return None
    try:
        return _decode_jwt(token)
    except InvalidTokenError as e:
        logger.debug("Ignoring invalid token on optional route: %s", e)
        return None


def required_user(request: Request) -> Dict[str, Any]:
    token = _bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        payload = _decode_jwt(token)
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not user_id(payload):
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload


def user_id(user: Optional[Dict[str, Any]]) -> Optional[str]:
    if not user:
        return None
    uid = user.get("id") or user.get("sub")
    return str(uid) if uid else None


def conversation_key(request: Request, user: Optional[Dict[str, Any]]) -> str:
    """User id when signed in, else the caller IP, else 'anon'."""
    uid = user_id(user)
    if uid:
        return uid
    if request.client and request.client.host:
        return request.client.host
    return "anon"


__all__ = ['optional_user', 'required_user', 'user_id', 'conversation_key']
