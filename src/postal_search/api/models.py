"""
API response models.
"""

from pydantic import BaseModel, Field


class AddressItem(BaseModel):
    """A single matched address."""

    unique_id: int = Field(..., description="Record ID within the index version")
    zip_code: str = Field(..., description="7-digit postal code")
    prefecture: str = Field(..., description="Prefecture name")
    detail_address1: str = Field(..., description="City / ward name")
    detail_address2: str = Field(..., description="Town area")
    formatted: str = Field(..., description="Quoted, comma-separated result line")


class SearchResponse(BaseModel):
    """Response for GET /v1/search."""

    keyword: str = Field(..., description="Keyword as received")
    version: str = Field(..., description="Index version that answered the query")
    count: int = Field(..., description="Number of matched addresses")
    items: list[AddressItem] = Field(
        default_factory=list, description="Matched addresses sorted by formatted text"
    )
    message: str | None = Field(None, description="Set when nothing matched")


class RebuildResponse(BaseModel):
    """Response for POST /v1/index."""

    version: str = Field(..., description="Newly published index version")
    record_count: int = Field(..., description="Canonical records in the version")
    bigram_count: int = Field(..., description="Distinct bigrams in the version")


class IndexStats(BaseModel):
    """Response for GET /v1/index/stats."""

    version: str = Field(..., description="Current index version")
    created_at: str = Field(..., description="ISO timestamp of the build")
    num_records: int = Field(..., description="Canonical records")
    num_bigrams: int = Field(..., description="Distinct bigrams")
    records_bytes: int = Field(..., description="Size of the record store on disk")
    index_bytes: int = Field(..., description="Size of the index store on disk")
