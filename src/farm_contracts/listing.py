from __future__ import annotations

from dataclasses import dataclass

from .models import ContractFarmingOpportunity

ALL = "all"

STATUS_CHOICES = (ALL, "active", "completed")

SEARCH_FIELDS = (
    "title",
    "description",
    "crop_type",
    "company_name",
    "location",
    "requirements",
    "benefits",
)


@dataclass(slots=True)
class FilterOptions:
    crops: list[str]
    locations: list[str]
    statuses: tuple[str, ...]


def filter_options(opportunities: list[ContractFarmingOpportunity]) -> FilterOptions:
    crops = {opp.crop_type for opp in opportunities if opp.crop_type}
    locations = {opp.location for opp in opportunities if opp.location}
    return FilterOptions(crops=sorted(crops), locations=sorted(locations), statuses=STATUS_CHOICES)


def filter_opportunities(
    opportunities: list[ContractFarmingOpportunity],
    search_term: str = "",
    crop_type: str = ALL,
    status: str = ALL,
) -> list[ContractFarmingOpportunity]:
    term = search_term.strip().lower()
    filtered: list[ContractFarmingOpportunity] = []

    for opportunity in opportunities:
        if term and term not in build_text(opportunity):
            continue
        if crop_type != ALL and opportunity.crop_type != crop_type:
            continue
        if status != ALL and opportunity.status != status:
            continue
        filtered.append(opportunity)

    return filtered


def build_text(opportunity: ContractFarmingOpportunity) -> str:
    fields: list[str] = []
    for field_name in SEARCH_FIELDS:
        value = getattr(opportunity, field_name, None)
        if value:
            fields.append(value)
    return " ".join(fields).lower()
