"""Select the cleansing policy that applies to an attribute in a scope."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feedcleanse.domain.model import CleansePolicy

log = logging.getLogger(__name__)


def policy_order(policy: CleansePolicy) -> tuple[bool, int, int]:
    """Ascending ``step_no`` with unset or zero steps last, then ``policy_id``."""

    step = policy.step_no or 0
    return (step <= 0, step, policy.policy_id)


def resolve_policy(
    candidates: Iterable[CleansePolicy],
    *,
    brand: str | None = None,
    category: str | None = None,
) -> CleansePolicy | None:
    """Return the first fully matching specific policy, else the common one.

    A specific policy is skipped while a scope it requires is unknown, and when
    the known value differs (case-insensitively). Each common policy met while
    scanning replaces the previous one, so the last in step order is returned
    when nothing specific matches.
    """

    common: CleansePolicy | None = None
    for policy in sorted(candidates, key=policy_order):
        if policy.is_common:
            common = policy
            continue
        if not _scope_matches(policy.brand_scope, brand):
            log.debug(
                "Skipping policy %s: brand scope %s vs %s",
                policy.policy_id,
                policy.brand_scope,
                brand,
            )
            continue
        if not _scope_matches(policy.category_scope, category):
            log.debug(
                "Skipping policy %s: category scope %s vs %s",
                policy.policy_id,
                policy.category_scope,
                category,
            )
            continue
        log.debug("Selected specific policy %s for %s", policy.policy_id, policy.attr_cd)
        return policy

    if common is not None:
        log.debug("Falling back to common policy %s for %s", common.policy_id, common.attr_cd)
    return common


def _scope_matches(required: str | None, known: str | None) -> bool:
    if not required:
        return True
    if known is None:
        return False
    return required.strip().casefold() == known.strip().casefold()
