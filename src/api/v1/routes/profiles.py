"""Profile API routes for the signed-in user."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import (
    get_favorite_service,
    get_profile_service,
    get_review_service,
)
from api.v1.schemas.profile import (
    ProfileDetailResponse,
    ProfileResponse,
    UsernameUpdate,
)
from api.v1.schemas.review import (
    FavoriteListResponse,
    FavoriteResponse,
    UserReviewListResponse,
    UserReviewResponse,
)
from api.v1.schemas.service import ServiceResponse
from core.rate_limit import limiter
from domain.services.profile_service import ProfileService
from domain.services.review_service import FavoriteService, ReviewService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Get the caller's profile",
    responses={503: {"description": "Profile could not be provisioned"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_me(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Get the caller's profile, creating it on first sign-in."""
    profile = await service.get_me(user)
    return ProfileDetailResponse(data=ProfileResponse.from_entity(profile, user.email))


@router.patch(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Change the caller's username",
    responses={
        400: {"description": "Username is empty or too long"},
        409: {"description": "Username is taken"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_me(
    request: Request,
    body: UsernameUpdate,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    profile = await service.update_username(user, body.username)
    return ProfileDetailResponse(data=ProfileResponse.from_entity(profile, user.email))


@router.get(
    "/me/favorites",
    response_model=FavoriteListResponse,
    summary="List the caller's favorites",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_my_favorites(
    request: Request,
    user: CurrentUser,
    favorites: FavoriteService = Depends(get_favorite_service),
) -> FavoriteListResponse:
    items = await favorites.list_for_user(user.id)
    return FavoriteListResponse(
        data=[
            FavoriteResponse(
                id=item.favorite.id,
                created_at=item.favorite.created_at,
                service=ServiceResponse.from_entity(item.service),
            )
            for item in items
        ]
    )


@router.get(
    "/me/reviews",
    response_model=UserReviewListResponse,
    summary="List the caller's reviews",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_my_reviews(
    request: Request,
    user: CurrentUser,
    reviews: ReviewService = Depends(get_review_service),
) -> UserReviewListResponse:
    items = await reviews.list_for_user(user.id)
    return UserReviewListResponse(
        data=[
            UserReviewResponse(
                id=item.review.id,
                user_id=item.review.user_id,
                service_id=item.review.service_id,
                rating=item.review.rating,
                comment=item.review.comment,
                created_at=item.review.created_at,
                service_name=item.service_name,
                service_category=item.service_category,
            )
            for item in items
        ]
    )
