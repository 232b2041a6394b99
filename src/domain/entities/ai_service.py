"""AI service listing domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

PRICING_TIERS = ("free", "basic", "pro")


class ServiceCategory(StrEnum):
    """Listing categories shown in the catalog."""

    TEXT_GENERATION = "Text generation"
    IMAGE_GENERATION = "Image generation"
    AUDIO_PROCESSING = "Audio processing"
    MUSIC_GENERATION = "Music generation"
    CODE_GENERATION = "Code generation"
    WEB_APP_DEVELOPMENT = "Web app development"
    OTHER = "Other"


def clean_features(features: list[str]) -> list[str]:
    """Drop blank feature entries and surrounding whitespace."""
    return [f.strip() for f in features if f.strip()]


def clean_pricing(pricing: dict[str, str | None]) -> dict[str, str]:
    """Keep only known, non-empty pricing tiers."""
    return {
        tier: value.strip()
        for tier, value in pricing.items()
        if tier in PRICING_TIERS and value and value.strip()
    }


@dataclass
class AIService:
    """Domain entity for an AI service listing."""

    name: str
    url: str
    category: ServiceCategory = ServiceCategory.OTHER
    id: UUID = field(default_factory=uuid4)
    features: list[str] = field(default_factory=list)
    pricing: dict[str, str] = field(default_factory=dict)
    created_by: UUID | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        self.features = clean_features(self.features)
        self.pricing = clean_pricing(self.pricing)
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass
class Review:
    """Domain entity for a user's rating of a service. One per user and service."""

    user_id: UUID
    service_id: UUID
    rating: int
    comment: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if not 1 <= self.rating <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {self.rating}")


@dataclass(frozen=True, slots=True)
class ReviewWithAuthor:
    """Read-only value object: a Review bundled with its author's username."""

    review: Review
    author: str


@dataclass(frozen=True, slots=True)
class ReviewWithService:
    """Read-only value object: a Review bundled with the reviewed service."""

    review: Review
    service_name: str
    service_category: str


@dataclass
class Favorite:
    """Domain entity for a bookmarked service."""

    user_id: UUID
    service_id: UUID
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True, slots=True)
class FavoriteWithService:
    """Read-only value object: a Favorite bundled with the bookmarked service."""

    favorite: Favorite
    service: AIService


@dataclass(frozen=True, slots=True)
class ServiceDetail:
    """A service with its reviews and the average rating."""

    service: AIService
    reviews: list[ReviewWithAuthor]

    @property
    def average_rating(self) -> float:
        if not self.reviews:
            return 0.0
        total = sum(item.review.rating for item in self.reviews)
        return round(total / len(self.reviews), 1)
