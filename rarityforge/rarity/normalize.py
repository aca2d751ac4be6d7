"""
Trait normalization.

Every place that compares, counts or scores trait data goes through these
functions. Raw attribute values can be any JSON type; they are collapsed to
a canonical string here and the raw form never travels further.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any

MISSING_TRAIT_TYPE = "—"
NONE_VALUE = "None"


def normalize_trait_type(raw: Any) -> str:
    """
    Canonicalize a trait type.

    Args:
        raw: Raw trait_type from an attribute record

    Returns:
        Trimmed string, or "—" if missing or blank.
    """
    if raw is None:
        return MISSING_TRAIT_TYPE
    text = _stringify(raw).strip()
    return text if text else MISSING_TRAIT_TYPE


def normalize_trait_value(raw: Any) -> str:
    """
    Canonicalize a trait value.

    Args:
        raw: Raw value from an attribute record

    Returns:
        "None" for null/empty values, canonical JSON for structured values,
        otherwise the trimmed string form.
    """
    if raw is None or raw == "":
        return NONE_VALUE
    if isinstance(raw, (dict, list, tuple)):
        return json.dumps(raw, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    text = _stringify(raw).strip()
    return text if text else NONE_VALUE


def _stringify(raw: Any) -> str:
    # Render scalars the way they appear in the JSON documents they came from
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def _raw_trait_type(record: Mapping[str, Any]) -> Any:
    if "trait_type" in record:
        return record["trait_type"]
    return record.get("traitType")


def iter_normalized(attributes: Iterable[Any] | None) -> Iterable[tuple[str, str]]:
    """
    Yield a (trait_type, value) pair for every entry of an attribute list.

    Entries that are not mappings carry neither field, so they come out as
    ("—", "None"). Repeated trait types are passed through unchanged.
    """
    for record in attributes or []:
        if not isinstance(record, Mapping):
            yield MISSING_TRAIT_TYPE, NONE_VALUE
            continue
        trait_type = normalize_trait_type(_raw_trait_type(record))
        yield trait_type, normalize_trait_value(record.get("value"))


def normalize_attributes(attributes: Iterable[Any] | None) -> dict[str, str]:
    """
    Map each trait type on an item to its normalized value.

    The first occurrence of a trait type wins.
    """
    normalized: dict[str, str] = {}
    for trait_type, value in iter_normalized(attributes):
        normalized.setdefault(trait_type, value)
    return normalized
