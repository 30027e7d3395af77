"""The mutable unit of work of the cleansing engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal

    from feedcleanse.domain.model.audit import ProvenanceEntry, QualityDetail
    from feedcleanse.domain.model.enums import QualityStatus


type CandidateKey = tuple[str, str, str, int]


@dataclass(eq=False, kw_only=True)
class AttributeCandidate:
    """One raw attribute value of one product row within a batch.

    Rows are created upstream with every output field empty and are mutated in
    place by the engine. ``provenance`` is only ever replaced, never appended to
    in place, so persistence layers notice the change.
    """

    batch_id: str
    temp_row_id: str
    attr_cd: str
    attr_seq: int = 1

    source_id: str | None = None
    source_label: str | None = None
    source_raw: str | None = None
    data_type: str | None = None

    value_cd: str | None = None
    value_text: str | None = None
    value_num: Decimal | None = None
    value_date: str | None = None
    list_item_id: int | None = None

    quality_status: QualityStatus | None = None
    quality_detail: QualityDetail | None = None
    provenance: list[ProvenanceEntry] = field(default_factory=list["ProvenanceEntry"])
    rule_version: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def key(self) -> CandidateKey:
        return (self.batch_id, self.temp_row_id, self.attr_cd, self.attr_seq)

    @property
    def source_text(self) -> str | None:
        """Raw value with the label as a fallback, as used by value normalization."""

        if self.source_raw is not None and self.source_raw.strip():
            return self.source_raw
        return self.source_label

    @property
    def latest_provenance(self) -> ProvenanceEntry | None:
        return self.provenance[-1] if self.provenance else None

    def append_provenance(self, entry: ProvenanceEntry) -> None:
        self.provenance = [*self.provenance, entry]
