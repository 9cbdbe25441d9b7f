"""Profile service layer.

Provides race-safe profile bootstrap on the first authenticated request,
plus reads and the display-name edit.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from speechkarma.db.models import Profile
from speechkarma.db.session import transaction
from speechkarma.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from speechkarma.logging import get_logger
from speechkarma.schemas.profiles import (
    MAX_DISPLAY_NAME_CHARS,
    ProfileOut,
    PublicProfileOut,
    UpdateProfileRequest,
)
from speechkarma.services import statement_repository as repo
from speechkarma.services.policy import utcnow

logger = get_logger(__name__)

FALLBACK_DISPLAY_NAME = "user"


def display_name_from_claims(claims: dict[str, Any]) -> str:
    """Pick an initial display name from JWT claims.

    Order: user_metadata.display_name, then the local part of the email,
    then "user". The result is trimmed and cut to the column limit.
    """
    metadata = claims.get("user_metadata") or {}
    candidate = metadata.get("display_name") if isinstance(metadata, dict) else None
    if not isinstance(candidate, str) or not candidate.strip():
        email = claims.get("email")
        candidate = email.split("@", 1)[0] if isinstance(email, str) else ""
    candidate = candidate.strip()[:MAX_DISPLAY_NAME_CHARS].strip()
    return candidate or FALLBACK_DISPLAY_NAME


def profile_exists(db: Session, user_id: UUID) -> bool:
    return db.scalar(select(Profile.id).where(Profile.id == user_id)) is not None


def ensure_profile(db: Session, user_id: UUID, claims: dict[str, Any] | None = None) -> None:
    """Create the viewer's profile if it does not exist yet.

    Idempotent; concurrent first requests converge on one row.
    """
    if profile_exists(db, user_id):
        return

    now = utcnow()
    try:
        with transaction(db):
            db.add(
                Profile(
                    id=user_id,
                    display_name=display_name_from_claims(claims or {}),
                    created_at=now,
                    updated_at=now,
                )
            )
            db.flush()
    except IntegrityError:
        # Lost the race; the other request created it.
        if not profile_exists(db, user_id):
            raise
        return

    logger.info("profile.created", user_id=str(user_id))


def _get_profile_or_404(db: Session, user_id: UUID) -> Profile:
    profile = db.get(Profile, user_id)
    if profile is None:
        raise NotFoundError(ApiErrorCode.E_PROFILE_NOT_FOUND, "Profile not found")
    return profile


def _to_profile_out(db: Session, profile: Profile) -> ProfileOut:
    return ProfileOut(
        id=profile.id,
        display_name=profile.display_name,
        is_admin=profile.is_admin,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        statements_count=repo.count_active_for_author(db, profile.id),
    )


def get_my_profile(db: Session, viewer_id: UUID) -> ProfileOut:
    """The viewer's own profile with their active statement count."""
    return _to_profile_out(db, _get_profile_or_404(db, viewer_id))


def update_my_profile(db: Session, viewer_id: UUID, req: UpdateProfileRequest) -> ProfileOut:
    """Change the viewer's display name.

    Raises:
        InvalidRequestError(E_DISPLAY_NAME_INVALID): Empty after trimming or too long.
    """
    display_name = req.display_name.strip()
    if not display_name:
        raise InvalidRequestError(
            ApiErrorCode.E_DISPLAY_NAME_INVALID, "Display name cannot be empty", field="display_name"
        )
    if len(display_name) > MAX_DISPLAY_NAME_CHARS:
        raise InvalidRequestError(
            ApiErrorCode.E_DISPLAY_NAME_INVALID,
            f"Display name cannot exceed {MAX_DISPLAY_NAME_CHARS} characters",
            field="display_name",
        )

    profile = _get_profile_or_404(db, viewer_id)
    with transaction(db):
        profile.display_name = display_name
        profile.updated_at = utcnow()

    logger.info("profile.updated", user_id=str(viewer_id), display_name_chars=len(display_name))
    return _to_profile_out(db, profile)


def get_public_profile(db: Session, user_id: UUID) -> PublicProfileOut:
    """Raises NotFoundError(E_PROFILE_NOT_FOUND) if absent."""
    return PublicProfileOut.model_validate(_get_profile_or_404(db, user_id))
