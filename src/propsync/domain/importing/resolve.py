"""Resolution of loosely specified references to canonical entity IDs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Literal
from uuid import UUID

from propsync.domain.model import Destination

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsync.domain.importing.context import BatchContext
    from propsync.domain.importing.writer import EntityWriter
    from propsync.domain.model import Entity, Property


log = getLogger(__name__)

SUGGESTION_LIMIT = 3
NAME_PREFIX = "name:"
UNKNOWN_COUNTRY = "Unknown"

# checked in order; the first key contained in the destination name wins
COUNTRY_BY_CITY: dict[str, str] = {
    "mallorca": "Spain",
    "palma": "Spain",
    "ibiza": "Spain",
    "barcelona": "Spain",
    "marbella": "Spain",
    "valencia": "Spain",
    "madrid": "Spain",
    "seville": "Spain",
    "cannes": "France",
    "nice": "France",
    "paris": "France",
    "monaco": "Monaco",
    "london": "United Kingdom",
    "edinburgh": "United Kingdom",
    "dublin": "Ireland",
    "rome": "Italy",
    "florence": "Italy",
    "venice": "Italy",
    "milan": "Italy",
    "athens": "Greece",
    "mykonos": "Greece",
    "santorini": "Greece",
    "crete": "Greece",
    "lisbon": "Portugal",
    "porto": "Portugal",
    "algarve": "Portugal",
}


def infer_country(name: str) -> str:
    lowered = name.lower()
    for city, country in COUNTRY_BY_CITY.items():
        if city in lowered:
            return country
    return UNKNOWN_COUNTRY


class ResolutionMethod(StrEnum):
    EXACT_ID = "exact-id"
    EXACT_NAME_MATCH = "exact-name-match"
    FUZZY_SUGGESTION_ONLY = "fuzzy-suggestion-only"
    AUTO_CREATED = "auto-created"


@dataclass(frozen=True, slots=True)
class ParsedReference:
    kind: Literal["id", "name"]
    value: str

    @property
    def entity_id(self) -> UUID:
        return UUID(self.value)


def parse_reference(raw: str) -> ParsedReference:
    """Classify a reference cell: ``name:`` prefix, UUID, or bare name."""

    text = raw.strip()
    if text.lower().startswith(NAME_PREFIX):
        return ParsedReference("name", text[len(NAME_PREFIX) :].strip())
    try:
        UUID(text)
    except ValueError:
        return ParsedReference("name", text)
    return ParsedReference("id", text)


@dataclass(frozen=True, kw_only=True)
class ResolvedReference[T: Entity]:
    entity: T
    method: ResolutionMethod
    status: Literal["resolved"] = "resolved"

    @property
    def entity_id(self) -> UUID:
        return self.entity.id


@dataclass(frozen=True, slots=True, kw_only=True)
class UnresolvedReference:
    reference: str
    message: str
    suggestions: tuple[str, ...] = ()
    method: ResolutionMethod = ResolutionMethod.FUZZY_SUGGESTION_ONLY
    status: Literal["unresolved"] = "unresolved"


type ReferenceResolution[T: Entity] = ResolvedReference[T] | UnresolvedReference


def suggest(candidates: Iterable[str], name: str, limit: int = SUGGESTION_LIMIT) -> tuple[str, ...]:
    """Up to ``limit`` canonical names containing ``name``, case-insensitively."""

    needle = name.strip().lower()
    if not needle:
        return ()
    found: list[str] = []
    for candidate in candidates:
        if needle in candidate.lower():
            found.append(candidate)
            if len(found) >= limit:
                break
    return tuple(found)


class ReferenceResolver:
    """Resolve property and destination references against the batch maps.

    Destinations may be auto-created; the write happens in its own row scope,
    so it survives a later failure of the row that triggered it.
    """

    def __init__(self, context: BatchContext, writer: EntityWriter) -> None:
        self._context = context
        self._writer = writer

    def resolve_property(self, raw: str) -> ReferenceResolution[Property]:
        parsed = parse_reference(raw)
        index = self._context.properties
        if parsed.kind == "id":
            found = index.get(parsed.entity_id)
            if found is None:
                return UnresolvedReference(
                    reference=raw, message=f'Property ID "{parsed.value}" not found'
                )
            return ResolvedReference(entity=found, method=ResolutionMethod.EXACT_ID)
        found = index.find_by_name(parsed.value)
        if found is not None:
            return ResolvedReference(entity=found, method=ResolutionMethod.EXACT_NAME_MATCH)
        suggestions = suggest(index.names(), parsed.value)
        message = f'Property "{parsed.value}" not found. Please import properties first.'
        if suggestions:
            message += f" Similar properties: {', '.join(suggestions)}"
        return UnresolvedReference(reference=raw, message=message, suggestions=suggestions)

    async def resolve_destination(
        self,
        raw: str,
        *,
        auto_create: bool = True,
    ) -> ReferenceResolution[Destination]:
        parsed = parse_reference(raw)
        index = self._context.destinations
        if parsed.kind == "id":
            found = index.get(parsed.entity_id)
            if found is None:
                return UnresolvedReference(
                    reference=raw, message=f'Destination ID "{parsed.value}" not found'
                )
            return ResolvedReference(entity=found, method=ResolutionMethod.EXACT_ID)

        found = index.find_by_name(parsed.value)
        if found is not None:
            return ResolvedReference(entity=found, method=ResolutionMethod.EXACT_NAME_MATCH)
        if not auto_create:
            suggestions = suggest(index.names(), parsed.value)
            message = f'Destination "{parsed.value}" not found.'
            if suggestions:
                message += f" Similar destinations: {', '.join(suggestions)}"
            return UnresolvedReference(reference=raw, message=message, suggestions=suggestions)

        async with self._writer.scope():
            # another row may have created it while this one waited for the scope
            found = index.find_by_name(parsed.value)
            if found is not None:
                return ResolvedReference(entity=found, method=ResolutionMethod.EXACT_NAME_MATCH)
            destination = Destination(name=parsed.value, country=infer_country(parsed.value))
            await self._writer.create(
                destination,
                summary=f"Auto-created destination {destination.name} during import",
            )
        index.add(destination)
        log.info("Auto-created destination %r (%s)", destination.name, destination.country)
        return ResolvedReference(entity=destination, method=ResolutionMethod.AUTO_CREATED)


__all__ = [
    "COUNTRY_BY_CITY",
    "ParsedReference",
    "ReferenceResolution",
    "ReferenceResolver",
    "ResolutionMethod",
    "ResolvedReference",
    "UnresolvedReference",
    "infer_country",
    "parse_reference",
    "suggest",
]
