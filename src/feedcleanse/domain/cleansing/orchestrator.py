"""Attribute cleansing orchestration for one batch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from feedcleanse.domain.cleansing.context import (
    AuditContext,
    CleanseCounters,
    MatchScope,
    ScopedContext,
)
from feedcleanse.domain.cleansing.errors import BatchNotFoundError
from feedcleanse.domain.cleansing.listing import LIST_MATCHER_KINDS, select_mapping
from feedcleanse.domain.cleansing.normalize import NORMALIZED_TYPES, normalize_value
from feedcleanse.domain.cleansing.outcome import Resolution
from feedcleanse.domain.cleansing.policy import resolve_policy
from feedcleanse.domain.cleansing.quality import record_outcome, rule_trace
from feedcleanse.domain.cleansing.reconcile import reconcile_single_values
from feedcleanse.domain.cleansing.reference import resolve_reference
from feedcleanse.domain.cleansing.tokens import expand_tokens
from feedcleanse.domain.model import (
    CLEANSE_STAGE,
    AttributeCandidate,
    BatchStatus,
    DataType,
    MatcherKind,
    ReasonCode,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from feedcleanse.domain.cleansing.reference_data import ReferenceData
    from feedcleanse.domain.model import AttributeDefinition, CleansePolicy
    from feedcleanse.domain.ports.unit_of_work import CleanseRepositories, CleanseUnitOfWork

log = logging.getLogger(__name__)

DEFAULT_WORKER_ID: Final[str] = "cleanse-worker-1"
DEFAULT_SCOPE_PHASE: Final[int] = 10


class Strategy(StrEnum):
    """Resolution strategies an attribute can be dispatched to."""

    REFERENCE = "reference"
    LIST = "list"
    TOKENS = "tokens"
    NORMALIZE = "normalize"


STRATEGY_BY_KIND: Final[Mapping[tuple[DataType, MatcherKind], Strategy]] = {
    (DataType.REF, MatcherKind.ID_EXACT): Strategy.REFERENCE,
    (DataType.REF, MatcherKind.DERIVE_COALESCE): Strategy.REFERENCE,
    (DataType.REF, MatcherKind.TOKEN_DICT): Strategy.TOKENS,
    (DataType.LIST, MatcherKind.TOKEN_DICT): Strategy.TOKENS,
    **{(DataType.LIST, kind): Strategy.LIST for kind in LIST_MATCHER_KINDS},
}


def select_strategy(data_type: DataType, matcher_kind: MatcherKind | None) -> Strategy | None:
    """Return the strategy for a (data type, matcher kind) pair, if any."""

    if data_type in NORMALIZED_TYPES:
        return Strategy.NORMALIZE
    if matcher_kind is None:
        return None
    return STRATEGY_BY_KIND.get((data_type, matcher_kind))


@dataclass(frozen=True, slots=True, kw_only=True)
class CleanseResult:
    batch_id: str
    read: int
    ok: int
    warn: int
    ng: int
    created: int
    demoted: int
    status: BatchStatus


@dataclass(frozen=True, slots=True)
class _Step:
    """Everything one strategy needs to resolve one attribute."""

    candidate: AttributeCandidate
    definition: AttributeDefinition
    policy: CleansePolicy
    scope: MatchScope
    audit: AuditContext
    repositories: CleanseRepositories


type _Handler = Callable[[_Step], Resolution]


class CleansingEngine:
    """Turns raw attribute candidates of a batch into resolved, audited values.

    Products are processed one after the other; attributes of a product run in
    ``cleanse_phase`` order so BRAND and CATEGORY_1 can unlock scoped policies for
    later phases. Every attribute is committed on its own.
    """

    def __init__(
        self,
        reference: ReferenceData,
        *,
        date_pattern: str | None = None,
        worker_id: str = DEFAULT_WORKER_ID,
        scope_phase_threshold: int = DEFAULT_SCOPE_PHASE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._reference = reference
        self._date_pattern = date_pattern
        self._worker_id = worker_id
        self._scope_phase_threshold = scope_phase_threshold
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._handlers: dict[Strategy, _Handler] = {
            Strategy.REFERENCE: self._resolve_reference,
            Strategy.LIST: self._resolve_list,
            Strategy.TOKENS: self._expand_tokens,
            Strategy.NORMALIZE: self._normalize,
        }

    def run(self, batch_id: str, *, uow: CleanseUnitOfWork) -> CleanseResult:
        batch = self._reference.batch(batch_id)
        if batch is None:
            raise BatchNotFoundError(batch_id)

        audit = AuditContext(
            batch_id=batch_id,
            group_company_cd=batch.group_company_cd,
            worker_id=self._worker_id,
            clock=self._clock,
        )
        repositories = uow.repositories
        candidates = repositories.candidates.list_for_batch(batch_id)
        products = group_by_product(candidates)
        log.info(
            "Cleansing batch %s (%s): %d candidates across %d products",
            batch_id,
            batch.group_company_cd,
            len(candidates),
            len(products),
        )

        counters = CleanseCounters()
        created = 0
        for rows in products.values():
            created += self._cleanse_product(rows, audit=audit, counters=counters, uow=uow)

        demotions = reconcile_single_values(
            repositories.candidates.list_for_batch(batch_id),
            self._reference.definition,
            now=self._clock(),
            step_no_for=self._reference.step_no_for,
        )
        for demotion in demotions:
            counters.demote(demotion.previous_status)
        uow.commit()

        status = counters.batch_status()
        batch_run = repositories.batches.get(batch_id)
        if batch_run is None:
            log.warning("No batch_run row for %s; counts not persisted", batch_id)
        else:
            batch_run.record_step(
                CLEANSE_STAGE,
                counters.as_dict(),
                status=status,
                now=self._clock(),
            )
            uow.commit()

        log.info(
            "Finished batch %s: status=%s read=%d ok=%d warn=%d ng=%d created=%d demoted=%d",
            batch_id,
            status,
            counters.read,
            counters.ok,
            counters.warn,
            counters.ng,
            created,
            len(demotions),
        )
        return CleanseResult(
            batch_id=batch_id,
            read=counters.read,
            ok=counters.ok,
            warn=counters.warn,
            ng=counters.ng,
            created=created,
            demoted=len(demotions),
            status=status,
        )

    def _cleanse_product(
        self,
        rows: Sequence[AttributeCandidate],
        *,
        audit: AuditContext,
        counters: CleanseCounters,
        uow: CleanseUnitOfWork,
    ) -> int:
        scope = ScopedContext()
        next_seq: dict[str, int] = {}
        for row in rows:
            code = row.attr_cd.upper()
            next_seq[code] = max(next_seq.get(code, 0), row.attr_seq)

        created = 0
        for candidate in sorted(rows, key=self._phase_key):
            counters.read += 1
            definition = self._reference.definition(candidate.attr_cd)
            phase = definition.cleanse_phase if definition is not None else None
            match_scope = scope.match_scope(phase, self._scope_phase_threshold)
            try:
                produced = self._cleanse_attribute(
                    candidate,
                    definition,
                    scope=match_scope,
                    audit=audit,
                    next_seq=next_seq,
                    repositories=uow.repositories,
                )
                uow.commit()
            except Exception as exc:  # noqa: BLE001
                log.exception(
                    "Unexpected failure cleansing %s on row %s",
                    candidate.attr_cd,
                    candidate.temp_row_id,
                )
                uow.rollback()
                produced = [candidate]
                self._finish(
                    candidate,
                    Resolution.ng(ReasonCode.UNEXPECTED_ERROR, str(exc) or type(exc).__name__),
                    policy=None,
                    audit=audit,
                    repositories=uow.repositories,
                )
                uow.commit()

            scope.observe(candidate.attr_cd, candidate.value_cd)
            for row in produced:
                counters.record(row.quality_status)
            created += len(produced) - 1
        return created

    def _cleanse_attribute(
        self,
        candidate: AttributeCandidate,
        definition: AttributeDefinition | None,
        *,
        scope: MatchScope,
        audit: AuditContext,
        next_seq: dict[str, int],
        repositories: CleanseRepositories,
    ) -> list[AttributeCandidate]:
        policy = resolve_policy(
            self._reference.policies_for(candidate.attr_cd, audit.group_company_cd),
            brand=scope.brand,
            category=scope.category,
        )

        if definition is None:
            resolution = Resolution.warn(
                ReasonCode.MISSING_ATTR_DEFINITION,
                f"No attribute definition for {candidate.attr_cd}",
            )
            self._finish(
                candidate,
                resolution,
                policy=policy,
                audit=audit,
                repositories=repositories,
            )
            return [candidate]

        candidate.data_type = definition.data_type.value
        if policy is None:
            resolution = Resolution.warn(
                ReasonCode.MISSING_CLEANSE_POLICY,
                f"No cleanse policy matches {candidate.attr_cd} "
                f"(brand={scope.brand}, category={scope.category})",
                quality_reason=ReasonCode.NO_MATCHING_POLICY,
            )
            self._finish(candidate, resolution, policy=None, audit=audit, repositories=repositories)
            return [candidate]

        data_type = policy.data_type or definition.data_type
        strategy = select_strategy(data_type, policy.matcher_kind)
        if strategy is None:
            resolution = Resolution.warn(
                ReasonCode.MISSING_MATCH_KIND,
                f"No resolution for data_type={data_type} matcher_kind={policy.matcher_kind}",
            )
        else:
            step = _Step(
                candidate=candidate,
                definition=definition,
                policy=policy,
                scope=scope,
                audit=audit,
                repositories=repositories,
            )
            resolution = self._handlers[strategy](step)

        if not resolution.outputs:
            self._finish(
                candidate,
                resolution,
                policy=policy,
                audit=audit,
                repositories=repositories,
            )
            return [candidate]
        return self._apply_outputs(
            candidate,
            resolution,
            policy=policy,
            audit=audit,
            next_seq=next_seq,
            repositories=repositories,
        )

    def _apply_outputs(
        self,
        candidate: AttributeCandidate,
        resolution: Resolution,
        *,
        policy: CleansePolicy,
        audit: AuditContext,
        next_seq: dict[str, int],
        repositories: CleanseRepositories,
    ) -> list[AttributeCandidate]:
        """Fill the input row with its first own output and add rows for the rest.

        When every output is routed to another attribute the input row keeps no
        value and is finished as WARN ``COLOR_OUTPUT_EMPTY``.
        """

        attr_cd = candidate.attr_cd.upper()
        own = next((output for output in resolution.outputs if output.attr_cd == attr_cd), None)
        if own is None:
            own_resolution = Resolution.warn(
                ReasonCode.COLOR_OUTPUT_EMPTY,
                f"Every token of {candidate.source_text!r} routes to another attribute",
                summary=resolution.summary,
            )
        else:
            own_resolution = resolution.for_output(own)
        assignments: list[tuple[AttributeCandidate, Resolution]] = [(candidate, own_resolution)]
        for output in resolution.outputs:
            if output is own:
                continue
            seq = next_seq.get(output.attr_cd, 0) + 1
            next_seq[output.attr_cd] = seq
            row = AttributeCandidate(
                batch_id=candidate.batch_id,
                temp_row_id=candidate.temp_row_id,
                attr_cd=output.attr_cd,
                attr_seq=seq,
                source_id=candidate.source_id,
                source_label=candidate.source_label,
                source_raw=candidate.source_raw,
                data_type=candidate.data_type,
                created_at=audit.now(),
            )
            repositories.candidates.add(row)
            assignments.append((row, resolution.for_output(output)))

        for row, row_resolution in assignments:
            self._finish(
                row,
                row_resolution,
                policy=policy,
                audit=audit,
                repositories=repositories,
            )
        return [row for row, _ in assignments]

    def _finish(
        self,
        candidate: AttributeCandidate,
        resolution: Resolution,
        *,
        policy: CleansePolicy | None,
        audit: AuditContext,
        repositories: CleanseRepositories,
    ) -> None:
        rule = rule_trace(
            candidate.attr_cd,
            policy,
            self._reference.rule_version_for(policy),
        )
        error = record_outcome(candidate, resolution, rule=rule, audit=audit)
        if error is not None:
            repositories.errors.add(error)

    def _phase_key(self, candidate: AttributeCandidate) -> tuple[bool, int]:
        definition = self._reference.definition(candidate.attr_cd)
        phase = definition.cleanse_phase if definition is not None else None
        return (phase is None, phase or 0)

    # strategies ---------------------------------------------------------------

    def _resolve_reference(self, step: _Step) -> Resolution:
        candidate, policy = step.candidate, step.policy
        ref_map = self._reference.ref_map(policy.ref_map_id) if policy.ref_map_id else None
        if ref_map is None:
            ref_map = self._reference.ref_map_for_attr(candidate.attr_cd)
            if ref_map is not None:
                log.info(
                    "Policy %s: reference map resolved by attr_cd %s (legacy path)",
                    policy.policy_id,
                    candidate.attr_cd,
                )
        if ref_map is None:
            return Resolution.ng(
                ReasonCode.REF_TABLE_MAP_NOT_FOUND,
                f"No reference table map for policy {policy.policy_id} ({candidate.attr_cd})",
            )

        match = resolve_reference(
            ref_map,
            source_id=candidate.source_id,
            source_label=candidate.source_label,
            tables=step.repositories.reference_tables,
        )
        if match is None:
            return Resolution.warn(
                ReasonCode.REF_NOT_FOUND,
                f"No {ref_map.hop1_table} entry for id={candidate.source_id} "
                f"label={candidate.source_label}",
            )
        return Resolution.ok(value_cd=match.value_cd, value_text=match.value_text)

    def _resolve_list(self, step: _Step) -> Resolution:
        candidate, policy = step.candidate, step.policy
        if policy.matcher_kind is None:
            return Resolution.warn(ReasonCode.MISSING_MATCH_KIND)
        mappings = step.repositories.source_maps.find_candidates(
            step.audit.group_company_cd,
            source_id=candidate.source_id,
            source_label=candidate.source_label,
        )
        mapping = select_mapping(
            mappings,
            matcher_kind=policy.matcher_kind,
            source_id=candidate.source_id,
            source_label=candidate.source_label,
            scope=step.scope,
            list_group_cd=policy.list_group_cd or step.definition.list_group_cd,
            list_items=self._reference.list_item,
        )
        if mapping is None:
            return Resolution.ng(
                ReasonCode.LIST_GROUP_NOT_FOUND,
                f"No source mapping for id={candidate.source_id} label={candidate.source_label}",
            )
        item = (
            self._reference.list_item(mapping.list_item_id)
            if mapping.list_item_id is not None
            else None
        )
        if item is None:
            return Resolution.warn(
                ReasonCode.LIST_GROUP_NOT_FOUND,
                f"Source mapping {mapping.map_id} points to unknown list item "
                f"{mapping.list_item_id}",
            )
        return Resolution.ok(
            value_cd=item.item_cd,
            value_text=item.item_label,
            list_item_id=item.list_item_id,
        )

    def _expand_tokens(self, step: _Step) -> Resolution:
        candidate = step.candidate
        try:
            routes = step.repositories.token_routes.routes_for(
                step.audit.group_company_cd,
                candidate.attr_cd,
            )
            expansion = expand_tokens(
                candidate.source_text,
                routes,
                attr_cd=candidate.attr_cd,
                scope=step.scope,
            )
        except Exception as exc:  # noqa: BLE001
            log.warning("Token expansion failed for %s: %s", candidate.attr_cd, exc)
            return Resolution.ng(ReasonCode.COLOR_PROCESS_EXCEPTION, str(exc))

        if not expansion.outputs:
            return Resolution.warn(
                ReasonCode.COLOR_OUTPUT_EMPTY,
                f"No token route matched {candidate.source_text!r}",
                summary=expansion.summary,
            )
        return Resolution.ok(outputs=expansion.outputs, summary=expansion.summary)

    def _normalize(self, step: _Step) -> Resolution:
        candidate = step.candidate
        raw = candidate.source_text
        if raw is None or not raw.strip():
            return Resolution.ng(
                ReasonCode.SOURCE_RAW_NOT_FOUND,
                f"No source value for {candidate.attr_cd}",
            )
        data_type = step.policy.data_type or step.definition.data_type
        try:
            value = normalize_value(data_type, raw, date_pattern=self._date_pattern)
        except ValueError as exc:
            return Resolution.ng(ReasonCode.INVALID_TYPE_CAST, str(exc))
        return Resolution.ok(
            value_cd=value.value_cd,
            value_text=value.value_text,
            value_num=value.value_num,
            value_date=value.value_date,
        )


def group_by_product(
    candidates: Iterable[AttributeCandidate],
) -> dict[str, list[AttributeCandidate]]:
    """Group rows by ``temp_row_id`` keeping first-seen product order."""

    products: dict[str, list[AttributeCandidate]] = {}
    for candidate in candidates:
        products.setdefault(candidate.temp_row_id, []).append(candidate)
    return products
