"""
Bearer-token authentication against Auth0.

Auth0 issues the tokens; this module only checks the RS256 signature, audience
and issuer, then maps the `sub` claim onto a local User row. The resulting
user's id is the only caller identity the bookmark endpoints ever see.
"""
import logging

import httpx
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session
from models.user import User

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches get_current_user (DEV_MODE needs none)
security = HTTPBearer(auto_error=False)

DEV_USER_AUTH0_ID = "dev|local-development-user"
DEV_USER_EMAIL = "dev@localhost"

# Signing keys are fetched lazily and kept for an hour, one client per JWKS URL
JWKS_CACHE_SECONDS = 3600
_jwks_clients: dict[str, PyJWKClient] = {}

# Most specific first: ExpiredSignatureError etc. are PyJWTError subclasses
_JWT_ERROR_DETAILS: tuple[tuple[type[jwt.PyJWTError], str], ...] = (
    (jwt.ExpiredSignatureError, "Token has expired"),
    (jwt.InvalidAudienceError, "Invalid audience"),
    (jwt.InvalidIssuerError, "Invalid issuer"),
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Return the cached JWKS client for the configured Auth0 tenant."""
    url = settings.auth0_jwks_url
    client = _jwks_clients.get(url)
    if client is None:
        client = PyJWKClient(url, cache_jwk_set=True, lifespan=JWKS_CACHE_SECONDS)
        _jwks_clients[url] = client
    return client


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Verify an Auth0 access token and return its claims.

    Raises:
        HTTPException: 401 for any token problem, 503 if the signing keys
            cannot be fetched.
    """
    try:
        signing_key = get_jwks_client(settings).get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.auth0_audience,
            issuer=settings.auth0_issuer,
        )
    except jwt.PyJWTError as e:
        for error_type, detail in _JWT_ERROR_DETAILS:
            if isinstance(e, error_type):
                raise _unauthorized(detail) from e
        logger.warning("JWT validation failed: %s", e, exc_info=True)
        raise _unauthorized("Invalid token") from e
    except httpx.HTTPError as e:
        logger.error("Failed to fetch JWKS from Auth0: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        ) from e


async def _find_user(db: AsyncSession, auth0_id: str) -> User | None:
    result = await db.execute(select(User).where(User.auth0_id == auth0_id))
    return result.scalar_one_or_none()


async def get_or_create_user(
    db: AsyncSession,
    auth0_id: str,
    email: str | None = None,
) -> User:
    """
    Return the user for an Auth0 subject, creating it on first sight.

    Two first requests from the same new user can race on the unique auth0_id;
    the loser's INSERT fails, is rolled back, and the winner's row is returned.
    A newer email claim overwrites the stored one; a missing claim never clears it.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    user = await _find_user(db, auth0_id)

    if user is None:
        user = User(auth0_id=auth0_id, email=email)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            user = await _find_user(db, auth0_id)
            if user is None:
                raise
            logger.info("Concurrent first login for %s resolved to existing user", auth0_id)
        else:
            logger.info("Created user %s for %s", user.id, auth0_id)

    if email and user.email != email:
        user.email = email
        await db.flush()

    return user


async def get_or_create_dev_user(db: AsyncSession) -> User:
    """Return the single local user that every DEV_MODE request runs as."""
    return await get_or_create_user(db, auth0_id=DEV_USER_AUTH0_ID, email=DEV_USER_EMAIL)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """FastAPI dependency resolving the authenticated caller."""
    if settings.dev_mode:
        return await get_or_create_dev_user(db)

    if credentials is None:
        raise _unauthorized("Not authenticated")

    claims = decode_jwt(credentials.credentials, settings)
    auth0_id = claims.get("sub")
    if not auth0_id:
        raise _unauthorized("Invalid token: missing sub claim")

    return await get_or_create_user(db, auth0_id=auth0_id, email=claims.get("email"))
