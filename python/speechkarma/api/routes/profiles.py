"""Profiles API routes.

/profiles/me requires authentication; public profiles and per-user
statement history are readable by anyone.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from speechkarma.api.deps import get_db
from speechkarma.auth.middleware import Viewer, get_optional_viewer, get_viewer
from speechkarma.responses import paginated_response, success_response
from speechkarma.schemas.profiles import UpdateProfileRequest
from speechkarma.schemas.statements import UserStatementsQuery
from speechkarma.services import profiles as profiles_service
from speechkarma.services import timeline as timeline_service

router = APIRouter(tags=["profiles"])


@router.get("/profiles/me")
def get_my_profile(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """The viewer's own profile."""
    result = profiles_service.get_my_profile(db=db, viewer_id=viewer.user_id)
    return success_response(result)


@router.patch("/profiles/me")
def update_my_profile(
    request: UpdateProfileRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Change the viewer's display name.

    Errors:
        E_DISPLAY_NAME_INVALID (400): Empty or longer than 100 characters.
    """
    result = profiles_service.update_my_profile(db=db, viewer_id=viewer.user_id, req=request)
    return success_response(result)


@router.get("/profiles/{user_id}")
def get_public_profile(
    user_id: UUID,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Public profile.

    Errors:
        E_PROFILE_NOT_FOUND (404)
    """
    result = profiles_service.get_public_profile(db=db, user_id=user_id)
    return success_response(result)


@router.get("/profiles/{user_id}/statements")
def list_user_statements(
    user_id: UUID,
    query: Annotated[UserStatementsQuery, Query()],
    viewer: Annotated[Viewer | None, Depends(get_optional_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Active statements contributed by one user, newest first.

    Errors:
        E_PROFILE_NOT_FOUND (404)
    """
    page = timeline_service.list_user_statements(
        db=db,
        viewer_id=viewer.user_id if viewer else None,
        user_id=user_id,
        query=query,
    )
    return paginated_response(page.data, page.pagination)
