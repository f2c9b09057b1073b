"""Tests for site address and site list schemas."""

import pytest
from pydantic import ValidationError

from spvm.schemas import SiteList, SiteListUpdate, SiteValidationResult
from spvm.schemas.site import (
    build_sample_sites,
    is_valid_site_address,
    parse_site_list,
)


@pytest.mark.parametrize(
    "address",
    [
        "https://contoso.sharepoint.com/sites/finance",
        "https://contoso.sharepoint.com/sites/finance/",
        "  https://contoso-dev.sharepoint.com/sites/team_a-1  ",
    ],
)
def test_valid_site_addresses(address):
    """Test that SharePoint Online site URLs are accepted."""
    assert is_valid_site_address(address)


@pytest.mark.parametrize(
    "address",
    [
        "http://contoso.sharepoint.com/sites/finance",
        "https://contoso.sharepoint.com/teams/finance",
        "https://contoso.example.com/sites/finance",
        "https://contoso.sharepoint.com/sites/",
        "not a url",
    ],
)
def test_invalid_site_addresses(address):
    """Test that anything else is rejected."""
    assert not is_valid_site_address(address)


def test_parse_site_list_keeps_order_and_duplicates():
    """Test that lines are trimmed, blanks dropped and duplicates kept."""
    text = "  https://a.sharepoint.com/sites/x\n\nhttps://a.sharepoint.com/sites/y\r\n" \
        "https://a.sharepoint.com/sites/x\n   \n"

    assert parse_site_list(text) == [
        "https://a.sharepoint.com/sites/x",
        "https://a.sharepoint.com/sites/y",
        "https://a.sharepoint.com/sites/x",
    ]


def test_build_sample_sites():
    """Test that sample sites are derived from the tenant address."""
    assert build_sample_sites("https://contoso.sharepoint.com/") == [
        "https://contoso.sharepoint.com/sites/exemplo-site-1",
        "https://contoso.sharepoint.com/sites/exemplo-site-2",
        "https://contoso.sharepoint.com/sites/exemplo-site-3",
    ]


def test_site_list_update_prefers_explicit_list():
    """Test that an explicit list wins over text."""
    update = SiteListUpdate(sites=[" https://a.sharepoint.com/sites/x "], text="ignored")
    assert update.resolve() == ["https://a.sharepoint.com/sites/x"]

    assert SiteListUpdate(text="a\nb").resolve() == ["a", "b"]
    assert SiteListUpdate().resolve() == []


def test_site_list_rejects_blank_entries():
    """Test that blank addresses are not accepted in a list."""
    with pytest.raises(ValidationError):
        SiteList(sites=["   "])


def test_site_list_text_round_trip():
    """Test newline-delimited rendering."""
    sites = SiteList(sites=["https://a.sharepoint.com/sites/x", "https://a.sharepoint.com/sites/y"])
    assert parse_site_list(sites.to_text()) == sites.sites


def test_validation_result_for_empty_list():
    """Test that an empty list is reported as invalid."""
    result = SiteValidationResult.for_sites([])
    assert result.is_valid is False
    assert result.message == "No sites in the list"


def test_validation_result_reports_invalid_sites():
    """Test that invalid addresses are listed and counted."""
    result = SiteValidationResult.for_sites(
        ["https://a.sharepoint.com/sites/x", "bad", "https://a.sharepoint.com/teams/y"]
    )
    assert result.is_valid is False
    assert result.valid_count == 1
    assert result.invalid_sites == ["bad", "https://a.sharepoint.com/teams/y"]
    assert result.message == "2 invalid URLs"


def test_validation_result_all_valid():
    """Test the all-valid outcome."""
    result = SiteValidationResult.for_sites(["https://a.sharepoint.com/sites/x"] * 2)
    assert result.is_valid is True
    assert result.valid_count == 2
    assert result.message == "All 2 sites are valid"
