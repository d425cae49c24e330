from functools import lru_cache
from typing import Annotated, Optional
from uuid import UUID
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from jwt import PyJWTError, PyJWKClient
from . import models
from ..config import get_settings, Settings, AuthSettings
from ..database.core import DbSession
from ..exceptions import AuthenticationError
from ..users import service as users_service
import logging

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache(maxsize=4)
def _get_jwks_client(jwks_url: str) -> PyJWKClient:
    return PyJWKClient(jwks_url)


def verify_token(token: str, auth: AuthSettings) -> models.TokenData:
    """Verify an identity-provider access token (stateless)."""
    options = {
        "verify_aud": auth.audience is not None,
        "verify_iss": auth.issuer is not None,
        "require": ["sub", "exp"],
    }
    try:
        if auth.jwks_url:
            key = _get_jwks_client(auth.jwks_url).get_signing_key_from_jwt(token).key
        else:
            key = auth.jwt_secret_key
        payload = jwt.decode(
            token,
            key,
            algorithms=[auth.algorithm],
            audience=auth.audience,
            issuer=auth.issuer,
            options=options,
            leeway=60,
        )
    except PyJWTError as e:
        logging.warning(f"Token verification failed: {str(e)}")
        raise AuthenticationError("Invalid token")

    subject = payload.get('sub')
    if not subject:
        raise AuthenticationError("Invalid token")

    return models.TokenData(
        subject=subject,
        email=payload.get('email'),
        name=payload.get('name'),
        picture=payload.get('picture'),
    )


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> str | None:
    """Bearer header first, then the access_token cookie."""
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return request.cookies.get("access_token")


def get_current_token(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)] = None,
) -> models.TokenData:
    token = extract_token(request, credentials)
    if not token:
        raise AuthenticationError("No access token provided")

    return verify_token(token, settings.auth)

# Every catalog endpoint requires a verified token
CurrentToken = Annotated[models.TokenData, Depends(get_current_token)]


def get_optional_user_id(token_data: CurrentToken, db: DbSession) -> UUID | None:
    """Resolve the token subject to an internal user id; None if the user is unknown."""
    return users_service.resolve_user_id(db, token_data.get_subject())


def get_current_user_id(user_id: Annotated[UUID | None, Depends(get_optional_user_id)]) -> UUID:
    if user_id is None:
        raise AuthenticationError("User not found")
    return user_id

OptionalUserId = Annotated[UUID | None, Depends(get_optional_user_id)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
