"""Pydantic schemas for the AI service catalog API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from domain.entities.ai_service import AIService, ServiceCategory


class Pricing(BaseModel):
    """Price per tier. Omitted tiers are not offered."""

    free: str | None = Field(None, max_length=100)
    basic: str | None = Field(None, max_length=100)
    pro: str | None = Field(None, max_length=100)


class ServiceCreate(BaseModel):
    """Schema for creating a service listing."""

    name: str = Field(..., min_length=1, max_length=200)
    url: HttpUrl
    category: ServiceCategory = ServiceCategory.OTHER
    features: list[str] = Field(default_factory=list, max_length=50)
    pricing: Pricing = Field(default_factory=Pricing)


class ServiceUpdate(BaseModel):
    """Schema for updating a service listing. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=200)
    url: HttpUrl | None = None
    category: ServiceCategory | None = None
    features: list[str] | None = Field(None, max_length=50)
    pricing: Pricing | None = None


class ServiceResponse(BaseModel):
    """Schema for a service listing."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "ChatGPT",
                "category": "Text generation",
                "url": "https://chat.openai.com",
                "features": ["Chat", "Code completion"],
                "pricing": {"free": "Free", "pro": "$20/month"},
                "created_by": None,
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    name: str
    category: str
    url: str
    features: list[str]
    pricing: dict[str, str]
    created_by: UUID | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, service: AIService) -> "ServiceResponse":
        return cls(
            id=service.id,
            name=service.name,
            category=service.category.value,
            url=service.url,
            features=service.features,
            pricing=service.pricing,
            created_by=service.created_by,
            created_at=service.created_at,
            updated_at=service.updated_at,
        )


class ServiceReviewResponse(BaseModel):
    """A review as shown on a service page."""

    id: UUID
    user_id: UUID
    username: str
    rating: int
    comment: str
    created_at: datetime


class ServiceDetail(ServiceResponse):
    """A service with its reviews and rating summary."""

    average_rating: float
    review_count: int
    reviews: list[ServiceReviewResponse]
    is_favorite: bool | None = None


class ServiceListResponse(BaseModel):
    """Schema for list of services."""

    data: list[ServiceResponse]


class ServiceDetailResponse(BaseModel):
    """Schema for a single service."""

    data: ServiceResponse


class ServiceWithReviewsResponse(BaseModel):
    """Schema for a service page."""

    data: ServiceDetail
