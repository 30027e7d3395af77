"""Read-only reference data shared by every attribute of a batch run.

The six sources are independent, so they are fetched concurrently and frozen
into lookup maps before any attribute is processed. Nothing mutates them
afterwards; the engine only ever reads.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence

    from feedcleanse.domain.model import (
        AttributeDefinition,
        BatchMetadata,
        CleansePolicy,
        CleanseRuleSet,
        ListItem,
        ReferenceTableMap,
    )
    from feedcleanse.domain.ports.persistence import ReferenceDataSource

log = logging.getLogger(__name__)

UNKNOWN_RULE_VERSION: Final[str] = "UNKNOWN"
DEFAULT_LOADER_WORKERS: Final[int] = 6


def _frozen[K, V](values: Mapping[K, V] | None = None) -> Mapping[K, V]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class ReferenceData:
    """Frozen indexes over rule and master data."""

    definitions: Mapping[str, AttributeDefinition] = field(default_factory=_frozen)
    policies: Mapping[str, tuple[CleansePolicy, ...]] = field(default_factory=_frozen)
    reference_maps: Mapping[int, ReferenceTableMap] = field(default_factory=_frozen)
    reference_maps_by_attr: Mapping[str, ReferenceTableMap] = field(default_factory=_frozen)
    rule_sets: Mapping[int, CleanseRuleSet] = field(default_factory=_frozen)
    list_items: Mapping[int, ListItem] = field(default_factory=_frozen)
    batches: Mapping[str, BatchMetadata] = field(default_factory=_frozen)

    @classmethod
    def build(
        cls,
        *,
        definitions: Iterable[AttributeDefinition] = (),
        policies: Iterable[CleansePolicy] = (),
        reference_maps: Iterable[ReferenceTableMap] = (),
        rule_sets: Iterable[CleanseRuleSet] = (),
        list_items: Iterable[ListItem] = (),
        batches: Iterable[BatchMetadata] = (),
    ) -> ReferenceData:
        active_maps = [ref_map for ref_map in reference_maps if ref_map.is_active]
        return cls(
            definitions=_index(
                (definition for definition in definitions if definition.is_active),
                key=lambda definition: definition.attr_cd.upper(),
                rank=lambda definition: definition.attr_id,
                kind="attribute definition",
            ),
            policies=_group_policies(policies),
            reference_maps=_index(
                active_maps,
                key=lambda ref_map: ref_map.ref_map_id,
                rank=lambda ref_map: ref_map.ref_map_id,
                kind="reference table map",
            ),
            reference_maps_by_attr=_index(
                active_maps,
                key=lambda ref_map: ref_map.attr_cd.upper(),
                rank=lambda ref_map: ref_map.ref_map_id,
                kind="reference table map (by attribute)",
                warn=False,
            ),
            rule_sets=_index(
                rule_sets,
                key=lambda rule_set: rule_set.rule_set_id,
                rank=lambda rule_set: rule_set.rule_set_id,
                kind="rule set",
            ),
            list_items=_index(
                list_items,
                key=lambda item: item.list_item_id,
                rank=lambda item: item.list_item_id,
                kind="list item",
            ),
            batches=_index(
                batches,
                key=lambda batch: batch.batch_id,
                rank=lambda batch: batch.batch_id,
                kind="batch",
            ),
        )

    def definition(self, attr_cd: str) -> AttributeDefinition | None:
        return self.definitions.get(attr_cd.upper())

    def policies_for(self, attr_cd: str, group_company_cd: str | None) -> tuple[CleansePolicy, ...]:
        """Active policies for the attribute that apply to the group company."""

        candidates = self.policies.get(attr_cd.upper(), ())
        if group_company_cd is None:
            return tuple(policy for policy in candidates if not policy.gp_scope)
        return tuple(policy for policy in candidates if _applies_to(policy, group_company_cd))

    def ref_map(self, ref_map_id: int) -> ReferenceTableMap | None:
        return self.reference_maps.get(ref_map_id)

    def ref_map_for_attr(self, attr_cd: str) -> ReferenceTableMap | None:
        return self.reference_maps_by_attr.get(attr_cd.upper())

    def rule_set(self, rule_set_id: int) -> CleanseRuleSet | None:
        return self.rule_sets.get(rule_set_id)

    def rule_version_for(self, policy: CleansePolicy | None) -> str:
        if policy is None or policy.rule_set_id is None:
            return UNKNOWN_RULE_VERSION
        rule_set = self.rule_sets.get(policy.rule_set_id)
        if rule_set is None:
            return str(policy.rule_set_id)
        return rule_set.version_label

    def list_item(self, list_item_id: int) -> ListItem | None:
        return self.list_items.get(list_item_id)

    def batch(self, batch_id: str) -> BatchMetadata | None:
        return self.batches.get(batch_id)

    def step_no_for(self, attr_cd: str) -> int | None:
        """Lowest positive ``step_no`` among the attribute's active policies."""

        steps = [
            policy.step_no
            for policy in self.policies.get(attr_cd.upper(), ())
            if policy.step_no is not None and policy.step_no > 0
        ]
        return min(steps, default=None)


def load_reference_data(
    source: ReferenceDataSource,
    group_company_cd: str | None = None,
    *,
    max_workers: int = DEFAULT_LOADER_WORKERS,
) -> ReferenceData:
    """Fetch every reference table concurrently and freeze the result.

    With ``group_company_cd`` the cache keeps only policies whose ``gp_scope``
    is empty or names that group company. A failing fetch propagates its
    exception once all submitted fetches have finished; no partial cache is
    ever returned.
    """

    fetchers: dict[str, Callable[[], Sequence[object]]] = {
        "definitions": source.fetch_definitions,
        "policies": source.fetch_policies,
        "reference_maps": source.fetch_reference_maps,
        "rule_sets": source.fetch_rule_sets,
        "list_items": source.fetch_list_items,
        "batches": source.fetch_batches,
    }
    with ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(fetchers))),
        thread_name_prefix="reference-loader",
    ) as executor:
        futures = {name: executor.submit(fetch) for name, fetch in fetchers.items()}
        loaded = {name: future.result() for name, future in futures.items()}

    if group_company_cd is not None:
        loaded["policies"] = [
            policy
            for policy in loaded["policies"]
            if _applies_to(policy, group_company_cd)  # pyright: ignore[reportArgumentType]
        ]

    log.info(
        "Loaded reference data: %s",
        ", ".join(f"{name}={len(rows)}" for name, rows in loaded.items()),
    )
    return ReferenceData.build(**loaded)  # pyright: ignore[reportArgumentType]


def _index[K: Hashable, V](
    values: Iterable[V],
    *,
    key: Callable[[V], K],
    rank: Callable[[V], int | str],
    kind: str,
    warn: bool = True,
) -> Mapping[K, V]:
    """Index ``values`` by ``key``; on duplicate keys the lowest ``rank`` wins."""

    indexed: dict[K, V] = {}
    for value in values:
        value_key = key(value)
        existing = indexed.get(value_key)
        if existing is None:
            indexed[value_key] = value
            continue
        keep, drop = (existing, value) if rank(existing) <= rank(value) else (value, existing)
        indexed[value_key] = keep
        if warn:
            log.warning(
                "Duplicate %s for key %s: keeping %s, ignoring %s",
                kind,
                value_key,
                rank(keep),
                rank(drop),
            )
    return MappingProxyType(indexed)


def _applies_to(policy: CleansePolicy, group_company_cd: str) -> bool:
    return not policy.gp_scope or policy.gp_scope.casefold() == group_company_cd.casefold()


def _group_policies(
    policies: Iterable[CleansePolicy],
) -> Mapping[str, tuple[CleansePolicy, ...]]:
    grouped: defaultdict[str, list[CleansePolicy]] = defaultdict(list)
    for policy in policies:
        if policy.is_active:
            grouped[policy.attr_cd.upper()].append(policy)
    return MappingProxyType(
        {
            attr_cd: tuple(sorted(candidates, key=lambda policy: policy.policy_id))
            for attr_cd, candidates in grouped.items()
        }
    )
