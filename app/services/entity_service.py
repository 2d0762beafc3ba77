from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from app.models.enums import EntityType
from app.schemas.report import LookupEntityIn


@dataclass(frozen=True)
class NormalizedEntity:
    entity_type: EntityType
    value: str


def normalize_entity(entity_type: Union[EntityType, str], raw_value: Optional[str]) -> Optional[NormalizedEntity]:
    """Trim a contact value and pair it with its type.

    Values are kept case-preserving and are not checked for format, so an
    "email" entity does not need an "@". Blank values yield ``None``.
    """
    if raw_value is None:
        return None
    value = raw_value.strip()
    if not value:
        return None
    return NormalizedEntity(entity_type=EntityType(entity_type), value=value)


def normalize_entities(items: Iterable[LookupEntityIn]) -> list[NormalizedEntity]:
    entities: list[NormalizedEntity] = []
    for item in items:
        entity = normalize_entity(item.entity_type, item.value)
        if entity is not None:
            entities.append(entity)
    return entities
