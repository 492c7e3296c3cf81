from __future__ import annotations

from conftest import make_row, parse_row

from farm_contracts.listing import filter_opportunities, filter_options


def _opportunities():
    return [
        parse_row(make_row("a", crop_type="sorghum", location="Kisumu", status="active")),
        parse_row(
            make_row(
                "b",
                title="Passion fruit export",
                crop_type="passion fruit",
                location="Eldoret",
                company_name="Highland Juices",
                benefits="Guaranteed buy-back price",
                status="completed",
            )
        ),
        parse_row(make_row("c", crop_type="maize", location="Kisumu", status="cancelled")),
    ]


def test_search_is_case_insensitive_across_fields():
    result = filter_opportunities(_opportunities(), search_term="  BUY-BACK ")

    assert [opp.id for opp in result] == ["b"]


def test_search_matches_company_name():
    result = filter_opportunities(_opportunities(), search_term="highland")

    assert [opp.id for opp in result] == ["b"]


def test_crop_and_status_filters():
    opportunities = _opportunities()

    assert [o.id for o in filter_opportunities(opportunities, crop_type="maize")] == ["c"]
    assert [o.id for o in filter_opportunities(opportunities, status="active")] == ["a"]
    assert filter_opportunities(opportunities, crop_type="maize", status="active") == []


def test_all_returns_everything_in_order():
    opportunities = _opportunities()

    assert filter_opportunities(opportunities) == opportunities


def test_filter_options_are_sorted_and_unique():
    options = filter_options(_opportunities())

    assert options.crops == ["maize", "passion fruit", "sorghum"]
    assert options.locations == ["Eldoret", "Kisumu"]
    assert options.statuses == ("all", "active", "completed")
