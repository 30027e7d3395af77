"""Reusable fakes and builders for cleansing tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from feedcleanse.domain.cleansing import ReferenceData
from feedcleanse.domain.model import (
    AttributeCandidate,
    AttributeDefinition,
    BatchMetadata,
    BatchRun,
    CleansePolicy,
    DataType,
    MatcherKind,
    SelectType,
)
from feedcleanse.domain.ports.unit_of_work import CleanseRepositories

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from types import TracebackType

    from feedcleanse.domain.model import (
        AttrSourceMapping,
        CleanseRuleSet,
        ListItem,
        RecordError,
        ReferenceTableMap,
        TokenRoute,
    )
    from feedcleanse.domain.ports.persistence import Row

BATCH_ID = "B-001"
GROUP_COMPANY = "GC01"


class FixedClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 10, 22, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(seconds=1)
        return value


def make_candidate(
    attr_cd: str,
    *,
    temp_row_id: str = "row-1",
    attr_seq: int = 1,
    source_id: str | None = None,
    source_label: str | None = None,
    source_raw: str | None = None,
    batch_id: str = BATCH_ID,
) -> AttributeCandidate:
    return AttributeCandidate(
        batch_id=batch_id,
        temp_row_id=temp_row_id,
        attr_cd=attr_cd,
        attr_seq=attr_seq,
        source_id=source_id,
        source_label=source_label,
        source_raw=source_raw,
    )


def make_definition(
    attr_cd: str,
    data_type: DataType,
    *,
    attr_id: int = 1,
    phase: int | None = None,
    select_type: SelectType = SelectType.SINGLE,
    list_group_cd: str | None = None,
) -> AttributeDefinition:
    return AttributeDefinition(
        attr_id=attr_id,
        attr_cd=attr_cd,
        data_type=data_type,
        select_type=select_type,
        cleanse_phase=phase,
        list_group_cd=list_group_cd,
    )


def make_policy(
    policy_id: int,
    attr_cd: str,
    *,
    data_type: DataType | None = None,
    matcher_kind: MatcherKind | None = None,
    step_no: int | None = 1,
    brand_scope: str | None = None,
    category_scope: str | None = None,
    gp_scope: str | None = None,
    ref_map_id: int | None = None,
    rule_set_id: int | None = 1,
    list_group_cd: str | None = None,
) -> CleansePolicy:
    return CleansePolicy(
        policy_id=policy_id,
        rule_set_id=rule_set_id,
        attr_cd=attr_cd,
        step_no=step_no,
        matcher_kind=matcher_kind,
        data_type=data_type,
        ref_map_id=ref_map_id,
        list_group_cd=list_group_cd,
        gp_scope=gp_scope,
        brand_scope=brand_scope,
        category_scope=category_scope,
    )


def make_reference(
    *,
    definitions: Iterable[AttributeDefinition] = (),
    policies: Iterable[CleansePolicy] = (),
    reference_maps: Iterable[ReferenceTableMap] = (),
    rule_sets: Iterable[CleanseRuleSet] = (),
    list_items: Iterable[ListItem] = (),
    batch_id: str = BATCH_ID,
    group_company_cd: str = GROUP_COMPANY,
) -> ReferenceData:
    return ReferenceData.build(
        definitions=definitions,
        policies=policies,
        reference_maps=reference_maps,
        rule_sets=rule_sets,
        list_items=list_items,
        batches=(BatchMetadata(batch_id=batch_id, group_company_cd=group_company_cd),),
    )


class FakeAttributeCandidateRepository:
    def __init__(self, initial: Iterable[AttributeCandidate] | None = None) -> None:
        self.items: list[AttributeCandidate] = list(initial or [])

    def add(self, entity: AttributeCandidate) -> None:
        self.items.append(entity)

    def list_for_batch(self, batch_id: str) -> list[AttributeCandidate]:
        return [item for item in self.items if item.batch_id == batch_id]


class FakeRecordErrorRepository:
    def __init__(self) -> None:
        self.items: list[RecordError] = []

    def add(self, entity: RecordError) -> None:
        self.items.append(entity)


class FakeBatchRunRepository:
    def __init__(self, initial: Iterable[BatchRun] | None = None) -> None:
        self.items = {run.batch_id: run for run in initial or ()}

    def get(self, batch_id: str) -> BatchRun | None:
        return self.items.get(batch_id)


class FakeReferenceTables:
    """In-memory tables; rows are matched on equality and kept in insertion order."""

    def __init__(self, tables: Mapping[str, Sequence[Row]] | None = None) -> None:
        self.tables = {name: list(rows) for name, rows in (tables or {}).items()}
        self.lookups: list[tuple[str, dict[str, object]]] = []

    def find_first(self, table: str, criteria: Mapping[str, object]) -> Row | None:
        self.lookups.append((table, dict(criteria)))
        for row in self.tables.get(table, ()):
            if row.get("is_active", True) is False:
                continue
            if all(row.get(column) == value for column, value in criteria.items()):
                return row
        return None


class FakeAttrSourceMapRepository:
    def __init__(self, mappings: Iterable[AttrSourceMapping] = ()) -> None:
        self.mappings = list(mappings)

    def find_candidates(
        self,
        group_company_cd: str,
        *,
        source_id: str | None,
        source_label: str | None,
    ) -> Sequence[AttrSourceMapping]:
        return [
            mapping
            for mapping in self.mappings
            if mapping.group_company_cd == group_company_cd
            and (
                (source_id is not None and mapping.source_attr_id == source_id)
                or (source_label is not None and mapping.source_attr_nm == source_label)
            )
        ]


class FakeTokenRouteRepository:
    def __init__(self, routes: Iterable[TokenRoute] = ()) -> None:
        self.routes = list(routes)

    def routes_for(self, group_company_cd: str, attr_cd: str) -> Sequence[TokenRoute]:
        return [
            route
            for route in self.routes
            if route.applicable_attr_cd == attr_cd
            and route.group_company_cd in {None, group_company_cd}
        ]


class FakeCleanseUnitOfWork:
    def __init__(
        self,
        *,
        candidates: Iterable[AttributeCandidate] = (),
        batch_runs: Iterable[BatchRun] | None = None,
        reference_tables: FakeReferenceTables | None = None,
        source_maps: Iterable[AttrSourceMapping] = (),
        token_routes: Iterable[TokenRoute] = (),
    ) -> None:
        if batch_runs is None:
            batch_runs = (BatchRun(batch_id=BATCH_ID, group_company_cd=GROUP_COMPANY),)
        self.candidates = FakeAttributeCandidateRepository(candidates)
        self.errors = FakeRecordErrorRepository()
        self.batches = FakeBatchRunRepository(batch_runs)
        self.reference_tables = reference_tables or FakeReferenceTables()
        self.source_maps = FakeAttrSourceMapRepository(source_maps)
        self.token_routes = FakeTokenRouteRepository(token_routes)
        self._repositories = CleanseRepositories(
            candidates=self.candidates,
            errors=self.errors,
            batches=self.batches,
            reference_tables=self.reference_tables,
            source_maps=self.source_maps,
            token_routes=self.token_routes,
        )
        self.commits = 0
        self.rollbacks = 0

    @property
    def repositories(self) -> CleanseRepositories:
        return self._repositories

    def __enter__(self) -> FakeCleanseUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class FakeReferenceDataSource:
    def __init__(
        self,
        *,
        definitions: Sequence[AttributeDefinition] = (),
        policies: Sequence[CleansePolicy] = (),
        reference_maps: Sequence[ReferenceTableMap] = (),
        rule_sets: Sequence[CleanseRuleSet] = (),
        list_items: Sequence[ListItem] = (),
        batches: Sequence[BatchMetadata] = (),
        failing: str | None = None,
    ) -> None:
        self.definitions = definitions
        self.policies = policies
        self.reference_maps = reference_maps
        self.rule_sets = rule_sets
        self.list_items = list_items
        self.batches = batches
        self.failing = failing
        self.calls: list[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name == self.failing:
            raise RuntimeError(f"{name} unavailable")

    def fetch_definitions(self) -> Sequence[AttributeDefinition]:
        self._record("definitions")
        return self.definitions

    def fetch_policies(self) -> Sequence[CleansePolicy]:
        self._record("policies")
        return self.policies

    def fetch_reference_maps(self) -> Sequence[ReferenceTableMap]:
        self._record("reference_maps")
        return self.reference_maps

    def fetch_rule_sets(self) -> Sequence[CleanseRuleSet]:
        self._record("rule_sets")
        return self.rule_sets

    def fetch_list_items(self) -> Sequence[ListItem]:
        self._record("list_items")
        return self.list_items

    def fetch_batches(self) -> Sequence[BatchMetadata]:
        self._record("batches")
        return self.batches
