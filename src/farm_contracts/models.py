from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, get_args

from pydantic import AfterValidator

OpportunityStatus = Literal["active", "inactive", "completed", "cancelled"]

OPPORTUNITY_STATUSES: tuple[str, ...] = get_args(OpportunityStatus)

ANONYMOUS_REVIEWER = "Anonymous"


def _as_utc(value: datetime) -> datetime:
    # timestamp columns without a zone are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Timestamp = Annotated[datetime, AfterValidator(_as_utc)]


@dataclass(slots=True)
class ReviewerProfile:
    id: str
    full_name: str | None
    avatar_url: str | None


@dataclass(slots=True)
class ContractDocument:
    id: str
    opportunity_id: str
    name: str
    url: str
    file_type: str | None
    created_at: Timestamp


@dataclass(slots=True)
class ContractReview:
    id: str
    opportunity_id: str
    user_id: str
    rating: int
    comment: str | None
    created_at: Timestamp
    # Joined at read time; None when the reviewer has no profile row.
    user: ReviewerProfile | None = None

    @property
    def reviewer_name(self) -> str:
        if self.user and self.user.full_name:
            return self.user.full_name
        return ANONYMOUS_REVIEWER


@dataclass(slots=True)
class ContractFarmingOpportunity:
    id: str
    title: str
    description: str
    company_name: str
    location: str
    crop_type: str
    contract_duration: str
    price_per_unit: float | None
    minimum_quantity: float | None
    maximum_quantity: float | None
    unit: str | None
    requirements: str
    benefits: str
    contact_person: str
    contact_email: str
    contact_phone: str
    status: OpportunityStatus
    created_by: str
    created_at: Timestamp
    updated_at: Timestamp
    expires_at: Timestamp | None
    # The store sends null for an empty embed.
    documents: list[ContractDocument] | None = field(default_factory=list)
    reviews: list[ContractReview] | None = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.documents is None:
            self.documents = []
        if self.reviews is None:
            self.reviews = []

    @property
    def review_count(self) -> int:
        return len(self.reviews)

    @property
    def average_rating(self) -> float | None:
        """Mean of the attached review ratings, or None without reviews."""
        if not self.reviews:
            return None
        return sum(review.rating for review in self.reviews) / len(self.reviews)


@dataclass(slots=True)
class OpportunitySummary:
    id: str
    title: str
    company_name: str
    crop_type: str
    location: str
    status: str
    created_at: datetime
    average_rating: float | None
    review_count: int
    document_count: int


def summarize(opportunity: ContractFarmingOpportunity) -> OpportunitySummary:
    return OpportunitySummary(
        id=opportunity.id,
        title=opportunity.title,
        company_name=opportunity.company_name,
        crop_type=opportunity.crop_type,
        location=opportunity.location,
        status=opportunity.status,
        created_at=opportunity.created_at,
        average_rating=opportunity.average_rating,
        review_count=opportunity.review_count,
        document_count=len(opportunity.documents),
    )


def format_rating(opportunity: ContractFarmingOpportunity) -> str:
    rating = opportunity.average_rating
    if rating is None:
        return "no reviews"
    return f"{rating:.1f} ({opportunity.review_count} reviews)"


def to_payload(opportunity: ContractFarmingOpportunity) -> dict[str, Any]:
    """JSON-ready view of an opportunity, including the computed aggregates."""
    return {
        "id": opportunity.id,
        "title": opportunity.title,
        "description": opportunity.description,
        "company_name": opportunity.company_name,
        "location": opportunity.location,
        "crop_type": opportunity.crop_type,
        "contract_duration": opportunity.contract_duration,
        "price_per_unit": opportunity.price_per_unit,
        "minimum_quantity": opportunity.minimum_quantity,
        "maximum_quantity": opportunity.maximum_quantity,
        "unit": opportunity.unit,
        "requirements": opportunity.requirements,
        "benefits": opportunity.benefits,
        "contact_person": opportunity.contact_person,
        "contact_email": opportunity.contact_email,
        "contact_phone": opportunity.contact_phone,
        "status": opportunity.status,
        "created_by": opportunity.created_by,
        "created_at": opportunity.created_at.isoformat(),
        "updated_at": opportunity.updated_at.isoformat(),
        "expires_at": opportunity.expires_at.isoformat() if opportunity.expires_at else None,
        "documents": [_document_payload(doc) for doc in opportunity.documents],
        "reviews": [_review_payload(review) for review in opportunity.reviews],
        "average_rating": opportunity.average_rating,
        "review_count": opportunity.review_count,
    }


def _document_payload(document: ContractDocument) -> dict[str, Any]:
    return {
        "id": document.id,
        "opportunity_id": document.opportunity_id,
        "name": document.name,
        "url": document.url,
        "file_type": document.file_type,
        "created_at": document.created_at.isoformat(),
    }


def _review_payload(review: ContractReview) -> dict[str, Any]:
    user = None
    if review.user:
        user = {
            "id": review.user.id,
            "full_name": review.user.full_name,
            "avatar_url": review.user.avatar_url,
        }
    return {
        "id": review.id,
        "opportunity_id": review.opportunity_id,
        "user_id": review.user_id,
        "rating": review.rating,
        "comment": review.comment,
        "created_at": review.created_at.isoformat(),
        "user": user,
    }
