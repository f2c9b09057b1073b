"""Site address, site list and document library schemas."""

import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field, StringConstraints
from typing_extensions import Annotated

SITE_URL_PATTERN = re.compile(r"^https://[a-zA-Z0-9-]+\.sharepoint\.com/sites/[a-zA-Z0-9-_]+/?$")

SAMPLE_SITE_SLUGS = ("exemplo-site-1", "exemplo-site-2", "exemplo-site-3")

# Opaque site identifier; order and duplicates in a list are significant.
SiteAddress = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def is_valid_site_address(address: str) -> bool:
    """Check whether an address looks like a SharePoint Online site URL."""
    return bool(SITE_URL_PATTERN.match(address.strip()))


def parse_site_list(text: str) -> List[str]:
    """Parse newline-delimited text into an ordered site list.

    Each line is trimmed and empty lines are dropped. Duplicates are kept.
    """
    return [line.strip() for line in text.splitlines() if line.strip()]


def build_sample_sites(tenant_address: str) -> List[str]:
    """Build the sample site list for a tenant address."""
    base = tenant_address.rstrip("/")
    return [f"{base}/sites/{slug}" for slug in SAMPLE_SITE_SLUGS]


class LibraryRef(BaseModel):
    """A document library discovered on a site during a run."""

    id: str = Field(..., description="Library identifier (list GUID)")
    display_name: str = Field(..., description="Library title")

    @classmethod
    def from_api(cls, item: dict) -> "LibraryRef":
        """Build a reference from a SharePoint list payload."""
        return cls(
            id=str(item.get("Id") or item.get("id")),
            display_name=item.get("Title") or item.get("displayName") or "",
        )


class SiteMetadata(BaseModel):
    """Site fields read before its libraries are listed."""

    title: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_api(cls, payload: dict) -> "SiteMetadata":
        """Build metadata from a SharePoint web payload."""
        return cls(title=payload.get("Title"), url=payload.get("Url"))


class SiteListUpdate(BaseModel):
    """Request body replacing the site list.

    Either ``sites`` or newline-delimited ``text`` may be supplied.
    """

    sites: Optional[List[SiteAddress]] = None
    text: Optional[str] = None

    def resolve(self) -> List[str]:
        """Return the ordered site list described by this request."""
        if self.sites is not None:
            return list(self.sites)
        return parse_site_list(self.text or "")


class SiteList(BaseModel):
    """The persisted, ordered list of target sites."""

    sites: List[SiteAddress] = Field(default_factory=list)

    def to_text(self) -> str:
        """Render as newline-delimited text."""
        return "\n".join(self.sites)


class SiteValidationResult(BaseModel):
    """Outcome of validating the site list."""

    is_valid: bool
    valid_count: int = 0
    invalid_sites: List[str] = Field(default_factory=list)
    message: str

    @classmethod
    def for_sites(cls, sites: List[Any]) -> "SiteValidationResult":
        """Validate every site of a list."""
        if not sites:
            return cls(is_valid=False, message="No sites in the list")

        invalid = [site for site in sites if not is_valid_site_address(site)]
        valid_count = len(sites) - len(invalid)
        if invalid:
            return cls(
                is_valid=False,
                valid_count=valid_count,
                invalid_sites=invalid,
                message=f"{len(invalid)} invalid URLs",
            )
        return cls(
            is_valid=True,
            valid_count=valid_count,
            message=f"All {valid_count} sites are valid",
        )
