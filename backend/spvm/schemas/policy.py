"""Version retention policy schema."""

from pydantic import BaseModel, ConfigDict, Field


class VersionPolicy(BaseModel):
    """Limits applied to every document library of a batch.

    Frozen: a batch takes this snapshot at start and never mutates it.
    """

    model_config = ConfigDict(frozen=True)

    major_version_limit: int = Field(..., ge=0, description="Major versions to retain")
    minor_version_limit: int = Field(
        ..., ge=0, description="Major versions for which minor versions are retained"
    )

    def to_library_patch(self) -> dict:
        """Build the request body that applies this policy to one library."""
        return {
            "enableVersioning": True,
            "majorVersionLimit": self.major_version_limit,
            "majorWithMinorVersionsLimit": self.minor_version_limit,
        }
