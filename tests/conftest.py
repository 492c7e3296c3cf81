from __future__ import annotations

import json
from typing import Any

import pytest

from farm_contracts.config import AppConfig, QueryConfig, StoreConfig
from farm_contracts.models import ContractFarmingOpportunity
from farm_contracts.records import parse_opportunities


def make_document(opportunity_id: str, doc_id: str = "doc-1", **overrides: Any) -> dict[str, Any]:
    row = {
        "id": doc_id,
        "opportunity_id": opportunity_id,
        "name": "Contract terms.pdf",
        "url": "https://files.example.com/terms.pdf",
        "file_type": "application/pdf",
        "created_at": "2024-03-02T09:00:00+00:00",
    }
    row.update(overrides)
    return row


def make_review(
    opportunity_id: str, review_id: str = "rev-1", rating: int = 5, **overrides: Any
) -> dict[str, Any]:
    row = {
        "id": review_id,
        "opportunity_id": opportunity_id,
        "user_id": "user-7",
        "rating": rating,
        "comment": "Paid on time.",
        "created_at": "2024-03-05T12:30:00+00:00",
        "user": {"id": "user-7", "full_name": "Amina Otieno", "avatar_url": None},
    }
    row.update(overrides)
    return row


def make_row(opp_id: str = "opp-1", **overrides: Any) -> dict[str, Any]:
    row = {
        "id": opp_id,
        "title": "Sorghum outgrower scheme",
        "description": "Three season supply contract for white sorghum.",
        "company_name": "Savanna Breweries",
        "location": "Kisumu",
        "crop_type": "sorghum",
        "contract_duration": "18 months",
        "price_per_unit": 32.5,
        "minimum_quantity": 500,
        "maximum_quantity": None,
        "unit": "kg",
        "requirements": "Certified seed, minimum two acres.",
        "benefits": "Inputs on credit and extension visits.",
        "contact_person": "J. Mwangi",
        "contact_email": "sourcing@savanna.example",
        "contact_phone": "+254700000000",
        "status": "active",
        "created_by": "user-1",
        "created_at": "2024-03-01T08:00:00+00:00",
        "updated_at": "2024-03-01T08:00:00+00:00",
        "expires_at": None,
        "documents": [],
        "reviews": [],
    }
    row.update(overrides)
    return row


def parse_row(row: dict[str, Any]) -> ContractFarmingOpportunity:
    return parse_opportunities(json.dumps([row]))[0]


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        store=StoreConfig(url="https://project.supabase.test", api_key="anon-key"),
        query=QueryConfig(page_size=50, max_pages=20),
    )


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_ACCESS_TOKEN",
        "FARM_CONTRACTS_CONFIG",
        "FARM_CONTRACTS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
