"""Result of resolving one attribute, before it is applied to the row."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from feedcleanse.domain.model import QualityStatus

if TYPE_CHECKING:
    from decimal import Decimal

    from feedcleanse.domain.model import ReasonCode, TokenSummary


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolvedValue:
    """One output value of a token expansion."""

    attr_cd: str
    value_cd: str | None = None
    value_text: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Resolution:
    """Status plus values produced by one resolution strategy.

    ``reason`` is the error code written to the error sink; ``quality_reason``
    overrides what the quality detail reports when the two differ.
    """

    status: QualityStatus
    reason: ReasonCode | None = None
    quality_reason: ReasonCode | None = None
    message: str | None = None

    value_cd: str | None = None
    value_text: str | None = None
    value_num: Decimal | None = None
    value_date: str | None = None
    list_item_id: int | None = None

    outputs: tuple[ResolvedValue, ...] = ()
    summary: TokenSummary | None = None

    @classmethod
    def ok(
        cls,
        *,
        value_cd: str | None = None,
        value_text: str | None = None,
        value_num: Decimal | None = None,
        value_date: str | None = None,
        list_item_id: int | None = None,
        outputs: tuple[ResolvedValue, ...] = (),
        summary: TokenSummary | None = None,
    ) -> Resolution:
        return cls(
            status=QualityStatus.OK,
            value_cd=value_cd,
            value_text=value_text,
            value_num=value_num,
            value_date=value_date,
            list_item_id=list_item_id,
            outputs=outputs,
            summary=summary,
        )

    @classmethod
    def warn(
        cls,
        reason: ReasonCode,
        message: str | None = None,
        *,
        quality_reason: ReasonCode | None = None,
        summary: TokenSummary | None = None,
    ) -> Resolution:
        return cls(
            status=QualityStatus.WARN,
            reason=reason,
            quality_reason=quality_reason,
            message=message,
            summary=summary,
        )

    @classmethod
    def ng(cls, reason: ReasonCode, message: str | None = None) -> Resolution:
        return cls(status=QualityStatus.NG, reason=reason, message=message)

    @property
    def reported_reason(self) -> ReasonCode | None:
        return self.quality_reason or self.reason

    def for_output(self, output: ResolvedValue) -> Resolution:
        """Project an expanded resolution onto a single produced row."""

        return replace(
            self,
            value_cd=output.value_cd,
            value_text=output.value_text,
            outputs=(),
        )
