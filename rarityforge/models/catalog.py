from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CatalogItem(BaseModel):
    """
    One slot of the collection as supplied by the catalog.

    Attributes:
        index: Stable, unique, non-negative item identity
        name: Display name (may be empty)
        image: Image reference
        metadata_uri: Location of the attribute document
        attributes: Embedded attribute records, or None when they must be fetched
        minted: Informational mint flag
    """

    model_config = ConfigDict(populate_by_name=True)

    index: int = Field(..., ge=0)
    name: str = ""
    image: str | None = None
    metadata_uri: str | None = Field(
        default=None,
        validation_alias=AliasChoices("metadata_uri", "metadataUri", "metadata"),
        serialization_alias="metadataUri",
    )
    attributes: list[Any] | None = None
    minted: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("minted", mode="before")
    @classmethod
    def _coerce_minted(cls, value: Any) -> bool:
        # Catalog writers emit true, "true" or 1; everything else is unminted
        if isinstance(value, bool):
            return value
        return value == "true" or value == 1

    @field_validator("attributes", mode="before")
    @classmethod
    def _drop_non_list_attributes(cls, value: Any) -> list[Any] | None:
        # Anything that is not a list is treated as "not embedded"
        return value if isinstance(value, list) else None

    @property
    def has_embedded_attributes(self) -> bool:
        """True if attributes were supplied inline and need no fetch."""
        return self.attributes is not None


class Catalog(BaseModel):
    """The raw item list of a collection, before rarity enrichment."""

    model_config = ConfigDict(populate_by_name=True)

    collection_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("collection_id", "collectionId", "collectionMint"),
        serialization_alias="collectionId",
    )
    items: list[CatalogItem] = Field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of items in the collection."""
        return len(self.items)
