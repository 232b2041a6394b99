"""Pydantic schemas for review and favorite APIs."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from api.v1.schemas.service import ServiceResponse, ServiceReviewResponse


class ReviewSubmit(BaseModel):
    """Schema for submitting a review. Resubmitting replaces the previous one."""

    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=2000)


class ReviewResponse(BaseModel):
    """Schema for a stored review."""

    id: UUID
    user_id: UUID
    service_id: UUID
    rating: int
    comment: str
    created_at: datetime


class ReviewDetailResponse(BaseModel):
    data: ReviewResponse


class ServiceReviewListResponse(BaseModel):
    data: list[ServiceReviewResponse]


class UserReviewResponse(ReviewResponse):
    """A review listed on the author's profile page."""

    service_name: str
    service_category: str


class UserReviewListResponse(BaseModel):
    data: list[UserReviewResponse]


class FavoriteStateResponse(BaseModel):
    """Favorite flag of one service for the caller."""

    service_id: UUID
    is_favorite: bool


class FavoriteStateDetailResponse(BaseModel):
    data: FavoriteStateResponse


class FavoriteResponse(BaseModel):
    """A bookmarked service."""

    id: UUID
    created_at: datetime
    service: ServiceResponse


class FavoriteListResponse(BaseModel):
    data: list[FavoriteResponse]
