"""Ports for persisting cleansing state and reading reference data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from feedcleanse.domain.model import AttributeCandidate, BatchRun, RecordError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from feedcleanse.domain.model import (
        AttributeDefinition,
        AttrSourceMapping,
        BatchMetadata,
        CleansePolicy,
        CleanseRuleSet,
        ListItem,
        ReferenceTableMap,
        TokenRoute,
    )

type Row = Mapping[str, object]


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class AttributeCandidateRepository(Repository[AttributeCandidate], Protocol):
    """Candidate rows of a batch, in stable insertion order."""

    def list_for_batch(self, batch_id: str) -> list[AttributeCandidate]: ...


@runtime_checkable
class RecordErrorRepository(Repository[RecordError], Protocol):
    """Append-only sink for per-row cleansing errors."""


@runtime_checkable
class BatchRunRepository(Protocol):
    def get(self, batch_id: str) -> BatchRun | None: ...


@runtime_checkable
class ReferenceTableReader(Protocol):
    """Generic single-row lookup against an external reference table."""

    def find_first(self, table: str, criteria: Mapping[str, object]) -> Row | None:
        """Return the first active row whose columns equal ``criteria``.

        Rows are ordered by primary key. Raises ``ReferenceLookupError`` when the
        table or one of the columns does not exist.
        """
        ...


@runtime_checkable
class AttrSourceMapRepository(Protocol):
    def find_candidates(
        self,
        group_company_cd: str,
        *,
        source_id: str | None,
        source_label: str | None,
    ) -> Sequence[AttrSourceMapping]:
        """Return active mappings whose source id or source name equals the input."""
        ...


@runtime_checkable
class TokenRouteRepository(Protocol):
    def routes_for(self, group_company_cd: str, attr_cd: str) -> Sequence[TokenRoute]:
        """Return active routes applicable to ``attr_cd`` for the group company."""
        ...


@runtime_checkable
class ReferenceDataSource(Protocol):
    """Independent fetches backing the per-run reference data cache.

    Each method may be called from its own worker thread.
    """

    def fetch_definitions(self) -> Sequence[AttributeDefinition]: ...

    def fetch_policies(self) -> Sequence[CleansePolicy]: ...

    def fetch_reference_maps(self) -> Sequence[ReferenceTableMap]: ...

    def fetch_rule_sets(self) -> Sequence[CleanseRuleSet]: ...

    def fetch_list_items(self) -> Sequence[ListItem]: ...

    def fetch_batches(self) -> Sequence[BatchMetadata]: ...
