"""Accumulates per-row outcomes into an :class:`ImportResult`."""

from __future__ import annotations

from .logging_setup import get_logger
from .models import ImportResult, OutcomeKind, ParseWarning, RowOutcome

logger = get_logger("bill_import.aggregator")


class ResultAggregator:
    """Running tally for one parse call.

    The only stateful piece of the parse phase. It never raises on a row
    outcome; rejected rows turn into ``errors`` entries prefixed with their
    1-based line number within the (blank-line-stripped) file.
    """

    def __init__(self, source: str) -> None:
        self._result = ImportResult(source=source)
        self._finished = False

    def warn(self, warning: ParseWarning) -> None:
        if warning not in self._result.warnings:
            self._result.warnings.append(warning)

    def add(self, outcome: RowOutcome, line_no: int) -> None:
        if self._finished:
            raise RuntimeError("ResultAggregator.add() called after finish()")
        res = self._result
        if outcome.kind is OutcomeKind.ACCEPTED:
            assert outcome.record is not None
            res.records.append(outcome.record)
            res.success_count += 1
        elif outcome.kind is OutcomeKind.REJECTED:
            res.failed_count += 1
            res.errors.append(f"row {line_no}: {outcome.reason}")
            logger.debug("%s row %d rejected: %s", res.source, line_no, outcome.reason)
        else:
            res.excluded_count += 1
            logger.debug("%s row %d excluded: %s", res.source, line_no, outcome.reason)

    def finish(self) -> ImportResult:
        self._finished = True
        return self._result


__all__ = ["ResultAggregator"]
