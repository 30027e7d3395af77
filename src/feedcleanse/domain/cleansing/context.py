"""Per-run and per-product state threaded through the cleansing loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from feedcleanse.domain.model import BatchStatus, QualityStatus

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

log = logging.getLogger(__name__)

BRAND_ATTR_CD: Final[str] = "BRAND"
CATEGORY_ATTR_CD: Final[str] = "CATEGORY_1"


@dataclass(frozen=True, slots=True)
class MatchScope:
    """Brand/category context handed to policy and dictionary matching."""

    brand: str | None = None
    category: str | None = None


@dataclass(slots=True)
class ScopedContext:
    """Scope established so far for one product.

    Values only move forward: once BRAND or CATEGORY_1 resolve, every attribute
    processed afterwards sees the code, earlier ones never do.
    """

    brand: str | None = None
    category: str | None = None

    def observe(self, attr_cd: str, value_cd: str | None) -> None:
        if value_cd is None or not value_cd.strip():
            return
        code = attr_cd.upper()
        if code == BRAND_ATTR_CD:
            self.brand = value_cd
            log.debug("Scope brand set to %s", value_cd)
        elif code == CATEGORY_ATTR_CD:
            self.category = value_cd
            log.debug("Scope category set to %s", value_cd)

    def match_scope(self, phase: int | None, threshold: int) -> MatchScope:
        if phase is None or phase <= threshold:
            return MatchScope()
        return MatchScope(brand=self.brand, category=self.category)


@dataclass(slots=True)
class CleanseCounters:
    read: int = 0
    ok: int = 0
    warn: int = 0
    ng: int = 0

    def record(self, status: QualityStatus | None) -> None:
        if status is QualityStatus.OK:
            self.ok += 1
        elif status is QualityStatus.WARN:
            self.warn += 1
        elif status is QualityStatus.NG:
            self.ng += 1

    def demote(self, previous: QualityStatus | None) -> None:
        """Move one row from ``previous`` to WARN."""

        if previous is QualityStatus.WARN:
            return
        if previous is QualityStatus.OK:
            self.ok -= 1
        elif previous is QualityStatus.NG:
            self.ng -= 1
        self.warn += 1

    def batch_status(self) -> BatchStatus:
        if self.warn == 0 and self.ng == 0:
            return BatchStatus.SUCCESS
        if self.ok > 0:
            return BatchStatus.PARTIAL
        return BatchStatus.FAILED

    def as_dict(self) -> dict[str, int]:
        return {"read": self.read, "ok": self.ok, "warn": self.warn, "ng": self.ng}


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditContext:
    batch_id: str
    group_company_cd: str
    worker_id: str
    clock: Callable[[], datetime] = field(repr=False)

    def now(self) -> datetime:
        return self.clock()
