"""Request dependencies shared by the API routers."""

from fastapi import Depends, Header, HTTPException, Request, status

from babyshoot.config import parse_bearer_tokens
from babyshoot.containers import AppContainer
from babyshoot.domain.models import AuthenticatedUser


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_user(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> AuthenticatedUser:
    """Resolve the Supabase Auth user behind the bearer token."""
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    user = container.auth_verifier.verify(token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user


async def require_cron(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> None:
    """Ensure scheduled jobs present the cron secret."""
    if authorization not in parse_bearer_tokens(container.settings.cron_secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def require_status_token(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> None:
    """Accept either the cron secret or the internal API key."""
    accepted = parse_bearer_tokens(
        container.settings.cron_secret, container.settings.internal_api_key
    )
    if authorization not in accepted:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
