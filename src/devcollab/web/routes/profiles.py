"""Profile endpoints for the signed-in user.

The frontend calls POST /profiles/me right after every sign-in; the
profile is created on the first call and returned unchanged afterwards.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from devcollab.auth import Identity
from devcollab.services.profiles import ProfileService
from devcollab.web.dependencies import get_current_identity, get_profile_service
from devcollab.web.schemas import ProfileResponse, ProfileUpdate, RoleUpdate


def create_profiles_router() -> APIRouter:
    """Create the profile router.

    Routes:
        POST /profiles/me - Get or create the caller's profile
        GET /profiles/me - Get the caller's profile
        PATCH /profiles/me - Edit display name and role
        PUT /profiles/me/role - Set the caller's role
    """
    router = APIRouter(prefix="/profiles", tags=["profiles"])

    @router.post("/me", response_model=ProfileResponse)
    async def sign_in(
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProfileService = Depends(get_profile_service),  # noqa: B008
    ) -> ProfileResponse:
        profile = await service.get_or_create_profile(identity)
        return ProfileResponse.model_validate(profile)

    @router.get("/me", response_model=ProfileResponse)
    async def get_my_profile(
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProfileService = Depends(get_profile_service),  # noqa: B008
    ) -> ProfileResponse:
        profile = await service.get_profile(identity.uid)
        return ProfileResponse.model_validate(profile)

    @router.patch("/me", response_model=ProfileResponse)
    async def update_my_profile(
        body: ProfileUpdate,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProfileService = Depends(get_profile_service),  # noqa: B008
    ) -> ProfileResponse:
        profile = await service.update_profile(
            identity.uid,
            display_name=body.display_name,
            role=body.role,
        )
        return ProfileResponse.model_validate(profile)

    @router.put("/me/role", response_model=ProfileResponse)
    async def set_my_role(
        body: RoleUpdate,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProfileService = Depends(get_profile_service),  # noqa: B008
    ) -> ProfileResponse:
        profile = await service.set_role(identity.uid, body.role)
        return ProfileResponse.model_validate(profile)

    return router
