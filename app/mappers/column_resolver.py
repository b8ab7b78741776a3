"""
app/mappers/column_resolver.py

Resolves the logical dashboard fields (date, product, revenue, source,
campaign, content) against an ingested header list.

Resolution order per field
--------------------------
1. Manual override (field -> header), validated against the headers.
2. Synonym lookup: the first header, in header order, that equals or
   contains any synonym (case-insensitive).
3. Positional fallback: the header at the configured index, when present
   and non-empty.

A field that resolves nowhere stays ``None``; the views depending on it
degrade to no-ops instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.config import COLUMN_FIELDS, ColumnSpec, DEFAULT_COLUMN_SPECS


@dataclass(frozen=True)
class ColumnMappingErrorDetail:
    """
    Structured column mapping error detail.
    """

    code: str
    message: str
    field: str | None = None
    header: str | None = None
    context: dict[str, Any] | None = None


class ColumnMappingError(ValueError):
    """
    Raised when manual column overrides cannot be applied.
    """

    def __init__(self, *, message: str, errors: Sequence[ColumnMappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "field": error.field,
                    "header": error.header,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


@dataclass(frozen=True)
class ResolvedColumns:
    """
    Header chosen for each logical field, plus how it was chosen.
    """

    date: str | None = None
    product: str | None = None
    revenue: str | None = None
    source: str | None = None
    campaign: str | None = None
    content: str | None = None
    strategies: Mapping[str, str] | None = None

    @property
    def categorical(self) -> tuple[str, ...]:
        """
        Distinct filterable columns: product, source, campaign, content.
        """

        seen: list[str] = []
        for column in (self.product, self.source, self.campaign, self.content):
            if column and column not in seen:
                seen.append(column)
        return tuple(seen)

    def as_dict(self) -> dict[str, str | None]:
        return {name: getattr(self, name) for name in COLUMN_FIELDS}


class ColumnResolver:
    """
    Maps logical fields onto concrete CSV headers.
    """

    def __init__(self, *, specs: Mapping[str, ColumnSpec] | None = None) -> None:
        self._specs: dict[str, ColumnSpec] = dict(specs or DEFAULT_COLUMN_SPECS)

    def resolve(
        self,
        headers: Sequence[str],
        *,
        overrides: Mapping[str, str] | None = None,
    ) -> ResolvedColumns:
        resolved: dict[str, str | None] = {}
        strategies: dict[str, str] = {}
        errors: list[ColumnMappingErrorDetail] = []

        for field_name, header in (overrides or {}).items():
            field_name = field_name.strip()
            header = header.strip()
            if field_name not in COLUMN_FIELDS:
                errors.append(
                    ColumnMappingErrorDetail(
                        code="invalid_override_field",
                        message="Override names an unknown dashboard field.",
                        field=field_name,
                        header=header,
                        context={"allowed_fields": list(COLUMN_FIELDS)},
                    )
                )
                continue
            if header not in headers:
                errors.append(
                    ColumnMappingErrorDetail(
                        code="override_header_not_found",
                        message="Override points to a header not present in the CSV.",
                        field=field_name,
                        header=header,
                        context={"headers": list(headers)},
                    )
                )
                continue
            resolved[field_name] = header
            strategies[field_name] = "override"

        if errors:
            raise ColumnMappingError(message="Column overrides could not be applied.", errors=errors)

        for field_name in COLUMN_FIELDS:
            if field_name in resolved:
                continue
            spec = self._specs.get(field_name, ColumnSpec(synonyms=()))

            match = self._find_synonym_match(headers, spec.synonyms)
            if match is not None:
                resolved[field_name] = match
                strategies[field_name] = "synonym"
                continue

            positional = self._find_positional_match(headers, spec.fallback_index)
            if positional is not None:
                resolved[field_name] = positional
                strategies[field_name] = "position"
                continue

            resolved[field_name] = None
            strategies[field_name] = "unresolved"

        return ResolvedColumns(**resolved, strategies=strategies)

    @staticmethod
    def _find_synonym_match(headers: Sequence[str], synonyms: Sequence[str]) -> str | None:
        lowered = [synonym.lower() for synonym in synonyms if synonym]
        for header in headers:
            candidate = header.lower()
            if any(candidate == synonym or synonym in candidate for synonym in lowered):
                return header
        return None

    @staticmethod
    def _find_positional_match(headers: Sequence[str], index: int | None) -> str | None:
        if index is None or index < 0 or index >= len(headers):
            return None
        header = headers[index]
        return header if header else None
