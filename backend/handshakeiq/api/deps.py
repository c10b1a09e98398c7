from fastapi import Depends, Header, HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..core.db import get_db
from ..models.user import User
from ..schemas.dossier import UserContext
from ..services.storage import DossierStorage

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(api_key: str | None = Security(api_key_header)) -> None:
    """
    Simple header-based API key authentication.

    - In dev, if API_AUTH_KEY is not set, auth is skipped.
    - Otherwise, require X-API-Key == API_AUTH_KEY.
    """
    settings = get_settings()
    expected = settings.API_AUTH_KEY

    # In dev with no configured key, skip auth for convenience
    if settings.ENV == "dev" and not expected:
        return

    if not expected:
        # In non-dev environments, missing config is treated as misconfiguration
        raise HTTPException(status_code=401, detail="API key not configured")

    if api_key != expected:
        raise HTTPException(status_code=401, detail="Invalid API key")


def get_storage(db: Session = Depends(get_db)) -> DossierStorage:
    return DossierStorage(db)


def get_current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    storage: DossierStorage = Depends(get_storage),
    _: None = Depends(verify_api_key),
) -> User:
    """
    Resolve the session user forwarded by the authentication layer.

    The header is only trusted behind the API key; an unknown id is
    treated the same as no session.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def get_user_context(user: User = Depends(get_current_user)) -> UserContext:
    return UserContext(user_id=user.id)
