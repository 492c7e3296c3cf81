from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import OPPORTUNITY_STATUSES

DOCUMENTS_TABLE = "contract_documents"
REVIEWS_TABLE = "contract_reviews"
PROFILES_TABLE = "profiles"

PROFILE_COLUMNS = ("id", "full_name", "avatar_url")

SELECT = (
    "*,"
    f"documents:{DOCUMENTS_TABLE}(*),"
    f"reviews:{REVIEWS_TABLE}(*,user:{PROFILES_TABLE}({','.join(PROFILE_COLUMNS)}))"
)
ORDER = "created_at.desc"

MAX_PAGE_SIZE = 1000


@dataclass(slots=True)
class ReadOptions:
    opportunity_id: str | None = None
    status: str | None = None
    crop_type: str | None = None
    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        if self.status is not None and self.status not in OPPORTUNITY_STATUSES:
            raise ValueError(f"Unknown status {self.status!r}")
        if self.limit is not None and self.limit < 1:
            raise ValueError("limit must be at least 1")
        if self.offset < 0:
            raise ValueError("offset must not be negative")


def build_params(options: ReadOptions, page_size: int, offset: int) -> dict[str, Any]:
    params: dict[str, Any] = {"select": SELECT, "order": ORDER}
    if options.opportunity_id is not None:
        params["id"] = f"eq.{options.opportunity_id}"
    if options.status is not None:
        params["status"] = f"eq.{options.status}"
    if options.crop_type is not None:
        params["crop_type"] = f"eq.{options.crop_type}"
    params["limit"] = page_size
    params["offset"] = offset
    return params


def clamp_page_size(page_size: int) -> int:
    return max(1, min(page_size, MAX_PAGE_SIZE))


@dataclass(slots=True)
class Pager:
    """Tracks limit/offset paging for one read.

    ``next_size`` returns the row count to request next, or None once the
    read is complete: after a short page, when ``remaining`` rows are
    exhausted, or after ``max_pages`` requests.
    """

    page_size: int
    max_pages: int
    offset: int = 0
    remaining: int | None = None
    pages: int = 0
    size: int = 0
    done: bool = False

    @classmethod
    def for_read(cls, options: ReadOptions, page_size: int, max_pages: int) -> Pager:
        return cls(
            page_size=clamp_page_size(page_size),
            max_pages=max(1, max_pages),
            offset=options.offset,
            remaining=options.limit,
        )

    def next_size(self) -> int | None:
        if self.done or self.pages >= self.max_pages:
            return None
        self.size = self.page_size if self.remaining is None else min(self.page_size, self.remaining)
        return self.size

    def advance(self, received: int) -> None:
        self.pages += 1
        if received < self.size:
            self.done = True
            return

        self.offset += self.size
        if self.remaining is not None:
            self.remaining -= self.size
            if self.remaining <= 0:
                self.done = True
