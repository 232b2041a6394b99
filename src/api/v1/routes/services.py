"""AI service catalog API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser, OptionalUser
from api.v1.dependencies import (
    get_catalog_service,
    get_favorite_service,
    get_review_service,
)
from api.v1.schemas.review import (
    FavoriteStateDetailResponse,
    FavoriteStateResponse,
    ReviewDetailResponse,
    ReviewResponse,
    ReviewSubmit,
    ServiceReviewListResponse,
)
from api.v1.schemas.service import (
    ServiceCreate,
    ServiceDetail,
    ServiceDetailResponse,
    ServiceListResponse,
    ServiceResponse,
    ServiceReviewResponse,
    ServiceUpdate,
    ServiceWithReviewsResponse,
)
from core.rate_limit import limiter
from domain.entities.ai_service import ReviewWithAuthor
from domain.services.catalog_service import CatalogService
from domain.services.review_service import FavoriteService, ReviewService

router = APIRouter(prefix="/services", tags=["services"])


def _review_response(item: ReviewWithAuthor) -> ServiceReviewResponse:
    return ServiceReviewResponse(
        id=item.review.id,
        user_id=item.review.user_id,
        username=item.author,
        rating=item.review.rating,
        comment=item.review.comment,
        created_at=item.review.created_at,
    )


@router.get(
    "",
    response_model=ServiceListResponse,
    summary="List AI services",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_services(
    request: Request,
    service: CatalogService = Depends(get_catalog_service),
) -> ServiceListResponse:
    """Get all listings, newest first. No authentication required."""
    services = await service.list_services()
    return ServiceListResponse(data=[ServiceResponse.from_entity(s) for s in services])


@router.get(
    "/{service_id}",
    response_model=ServiceWithReviewsResponse,
    summary="Get an AI service with its reviews",
    responses={404: {"description": "Service not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_service(
    request: Request,
    service_id: UUID,
    user: OptionalUser,
    service: CatalogService = Depends(get_catalog_service),
    favorites: FavoriteService = Depends(get_favorite_service),
) -> ServiceWithReviewsResponse:
    """Service page: listing, reviews and average rating.

    ``is_favorite`` is only set when the request carries a valid token.
    """
    detail = await service.get_service_detail(service_id)
    is_favorite = None
    if user is not None:
        is_favorite = await favorites.is_favorite(user.id, service_id)

    base = ServiceResponse.from_entity(detail.service)
    return ServiceWithReviewsResponse(
        data=ServiceDetail(
            **base.model_dump(),
            average_rating=detail.average_rating,
            review_count=len(detail.reviews),
            reviews=[_review_response(item) for item in detail.reviews],
            is_favorite=is_favorite,
        )
    )


@router.post(
    "",
    response_model=ServiceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an AI service listing",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_service(
    request: Request,
    body: ServiceCreate,
    user: CurrentUser,
    service: CatalogService = Depends(get_catalog_service),
) -> ServiceDetailResponse:
    """Create a listing owned by the caller."""
    created = await service.create_service(
        identity=user,
        name=body.name,
        url=str(body.url),
        category=body.category,
        features=body.features,
        pricing=body.pricing.model_dump(),
    )
    return ServiceDetailResponse(data=ServiceResponse.from_entity(created))


@router.patch(
    "/{service_id}",
    response_model=ServiceDetailResponse,
    summary="Update an AI service listing",
    responses={
        403: {"description": "Caller is not the creator"},
        404: {"description": "Service not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_service(
    request: Request,
    service_id: UUID,
    body: ServiceUpdate,
    user: CurrentUser,
    service: CatalogService = Depends(get_catalog_service),
) -> ServiceDetailResponse:
    """Update the given fields of a listing."""
    updated = await service.update_service(
        service_id=service_id,
        identity=user,
        name=body.name,
        url=str(body.url) if body.url is not None else None,
        category=body.category,
        features=body.features,
        pricing=body.pricing.model_dump() if body.pricing is not None else None,
    )
    return ServiceDetailResponse(data=ServiceResponse.from_entity(updated))


@router.delete(
    "/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an AI service listing",
    responses={
        403: {"description": "Caller is not the creator"},
        404: {"description": "Service not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_service(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    service: CatalogService = Depends(get_catalog_service),
) -> None:
    """Delete a listing with its reviews and favorites."""
    await service.delete_service(service_id, user)
    return None


@router.get(
    "/{service_id}/reviews",
    response_model=ServiceReviewListResponse,
    summary="List reviews of a service",
    responses={404: {"description": "Service not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_service_reviews(
    request: Request,
    service_id: UUID,
    reviews: ReviewService = Depends(get_review_service),
) -> ServiceReviewListResponse:
    """Reviews with author usernames, newest first."""
    items = await reviews.list_for_service(service_id)
    return ServiceReviewListResponse(data=[_review_response(item) for item in items])


@router.put(
    "/{service_id}/reviews",
    response_model=ReviewDetailResponse,
    summary="Submit a review",
    responses={
        404: {"description": "Service not found"},
        502: {"description": "Write failed; details carry the submitted review"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def submit_review(
    request: Request,
    service_id: UUID,
    body: ReviewSubmit,
    user: CurrentUser,
    reviews: ReviewService = Depends(get_review_service),
) -> ReviewDetailResponse:
    """Create or replace the caller's review of a service."""
    review = await reviews.submit_review(
        identity=user,
        service_id=service_id,
        rating=body.rating,
        comment=body.comment,
    )
    return ReviewDetailResponse(
        data=ReviewResponse(
            id=review.id,
            user_id=review.user_id,
            service_id=review.service_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
        )
    )


@router.get(
    "/{service_id}/favorite",
    response_model=FavoriteStateDetailResponse,
    summary="Get the caller's favorite flag",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_favorite(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    favorites: FavoriteService = Depends(get_favorite_service),
) -> FavoriteStateDetailResponse:
    is_favorite = await favorites.is_favorite(user.id, service_id)
    return FavoriteStateDetailResponse(
        data=FavoriteStateResponse(service_id=service_id, is_favorite=is_favorite)
    )


@router.post(
    "/{service_id}/favorite/toggle",
    response_model=FavoriteStateDetailResponse,
    summary="Toggle the caller's favorite flag",
    responses={404: {"description": "Service not found"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def toggle_favorite(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    favorites: FavoriteService = Depends(get_favorite_service),
) -> FavoriteStateDetailResponse:
    """Flip the favorite flag and return the new state."""
    is_favorite = await favorites.toggle(user, service_id)
    return FavoriteStateDetailResponse(
        data=FavoriteStateResponse(service_id=service_id, is_favorite=is_favorite)
    )


@router.delete(
    "/{service_id}/favorite",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a service from favorites",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def remove_favorite(
    request: Request,
    service_id: UUID,
    user: CurrentUser,
    favorites: FavoriteService = Depends(get_favorite_service),
) -> None:
    """Remove a favorite. Idempotent."""
    await favorites.remove(user.id, service_id)
    return None
