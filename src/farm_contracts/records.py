from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import DataShapeError
from .models import ContractFarmingOpportunity

_ROWS = TypeAdapter(list[ContractFarmingOpportunity])


def parse_opportunities(content: bytes | str, start: int = 0) -> list[ContractFarmingOpportunity]:
    """Validate a response body against the read model.

    Validation is strict: booleans or numeric strings are not accepted as
    ratings, prices or quantities. ``start`` is the position of the first row
    within the whole read, so error paths point at the same row on every page.
    """
    try:
        opportunities = _ROWS.validate_json(content, strict=True)
    except ValidationError as exc:
        error = exc.errors()[0]
        raise DataShapeError(_error_path(error["loc"], start), error["msg"]) from exc

    for index, opportunity in enumerate(opportunities, start):
        _check_children(opportunity, f"[{index}]")
    return opportunities


def _check_children(opportunity: ContractFarmingOpportunity, path: str) -> None:
    relations = (("documents", opportunity.documents), ("reviews", opportunity.reviews))
    for key, children in relations:
        for index, child in enumerate(children):
            if child.opportunity_id != opportunity.id:
                raise DataShapeError(
                    f"{path}.{key}[{index}].opportunity_id",
                    f"references {child.opportunity_id!r}, expected {opportunity.id!r}",
                )


def _error_path(loc: tuple[Any, ...], start: int) -> str:
    path = ""
    for position, part in enumerate(loc):
        if isinstance(part, int):
            path += f"[{part + start if position == 0 else part}]"
        else:
            path += f".{part}" if path else str(part)
    return path
