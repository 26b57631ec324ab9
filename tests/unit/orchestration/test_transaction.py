"""Unit tests — apply_with_rollback."""

from __future__ import annotations

from unittest.mock import MagicMock, call

import pytest
from structlog.testing import capture_logs

from seqflow.orchestration.transaction import RollbackJournal, apply_with_rollback


class ApplyError(Exception):
    pass


class RollbackError(Exception):
    pass


def _failing_on(*bad: int):
    applied: list[int] = []

    def apply(element: int) -> None:
        if element in bad:
            raise ApplyError(f"cannot apply {element}")
        applied.append(element)

    return apply, applied


@pytest.mark.unit
class TestApplyWithRollbackSuccess:
    def test_applies_in_order(self) -> None:
        apply, applied = _failing_on()
        rollback = MagicMock()
        apply_with_rollback([1, 2, 3], apply, rollback)
        assert applied == [1, 2, 3]

    def test_rollback_never_called_on_success(self) -> None:
        apply, _ = _failing_on()
        rollback = MagicMock()
        apply_with_rollback(range(10), apply, rollback)
        rollback.assert_not_called()

    def test_empty_input(self) -> None:
        apply = MagicMock()
        rollback = MagicMock()
        apply_with_rollback([], apply, rollback)
        apply.assert_not_called()
        rollback.assert_not_called()

    def test_accepts_generator(self) -> None:
        apply, applied = _failing_on()
        apply_with_rollback((n * 2 for n in range(3)), apply, MagicMock())
        assert applied == [0, 2, 4]


@pytest.mark.unit
class TestApplyWithRollbackFailure:
    def test_rolls_back_previous_elements_in_reverse(self) -> None:
        apply, _ = _failing_on(4)
        rollback = MagicMock()
        with pytest.raises(ApplyError, match="cannot apply 4"):
            apply_with_rollback([1, 2, 3, 4, 5], apply, rollback)
        assert rollback.call_args_list == [call(3), call(2), call(1)]

    def test_failing_element_not_rolled_back(self) -> None:
        apply, _ = _failing_on(2)
        rollback = MagicMock()
        with pytest.raises(ApplyError):
            apply_with_rollback([1, 2], apply, rollback)
        rollback.assert_called_once_with(1)

    def test_first_element_failure_rolls_back_nothing(self) -> None:
        apply, _ = _failing_on(1)
        rollback = MagicMock()
        with pytest.raises(ApplyError):
            apply_with_rollback([1, 2, 3], apply, rollback)
        rollback.assert_not_called()

    def test_stops_advancing_after_failure(self) -> None:
        apply, applied = _failing_on(2)
        with pytest.raises(ApplyError):
            apply_with_rollback([1, 2, 3], apply, MagicMock())
        assert applied == [1]

    def test_original_error_survives_rollback_failures(self) -> None:
        apply, _ = _failing_on(3)
        attempted: list[int] = []

        def rollback(element: int) -> None:
            attempted.append(element)
            raise RollbackError(f"cannot undo {element}")

        with pytest.raises(ApplyError) as exc_info:
            apply_with_rollback([1, 2, 3], apply, rollback)
        assert str(exc_info.value) == "cannot apply 3"
        # Rollback continued past the first failing entry.
        assert attempted == [2, 1]

    def test_rollback_failures_logged(self) -> None:
        apply, _ = _failing_on(3)

        def rollback(element: int) -> None:
            if element == 2:
                raise RollbackError("cannot undo 2")

        with capture_logs() as logs:
            with pytest.raises(ApplyError):
                apply_with_rollback([1, 2, 3], apply, rollback)

        failed = [e for e in logs if e["event"] == "rollback_failed"]
        assert len(failed) == 1
        assert failed[0]["log_level"] == "error"
        assert failed[0]["element"] == "2"
        assert failed[0]["error_type"] == "RollbackError"
        assert any(e["event"] == "apply_failed" for e in logs)

    def test_base_exceptions_are_not_intercepted(self) -> None:
        def apply(element: int) -> None:
            raise KeyboardInterrupt

        rollback = MagicMock()
        with pytest.raises(KeyboardInterrupt):
            apply_with_rollback([1], apply, rollback)
        rollback.assert_not_called()


@pytest.mark.unit
class TestRollbackJournal:
    def test_reversed_is_most_recent_first(self) -> None:
        journal: RollbackJournal[str] = RollbackJournal()
        for element in ("a", "b", "c"):
            journal.record(element)
        assert list(journal.reversed()) == ["c", "b", "a"]
        assert len(journal) == 3

    def test_empty(self) -> None:
        journal: RollbackJournal[str] = RollbackJournal()
        assert list(journal.reversed()) == []
        assert len(journal) == 0


class Opaque:
    """Element whose repr raises."""

    def __init__(self, value: int) -> None:
        self.value = value

    def __repr__(self) -> str:
        raise RuntimeError("no repr")


class UnprintableError(Exception):
    def __str__(self) -> str:
        raise RuntimeError("no str")


@pytest.mark.unit
class TestUnprintableValues:
    def test_rollback_runs_when_elements_have_broken_repr(self) -> None:
        elements = [Opaque(0), Opaque(1), Opaque(2)]
        rolled_back: list[int] = []

        def apply(element: Opaque) -> None:
            if element.value == 2:
                raise ApplyError("cannot apply 2")

        with capture_logs() as logs:
            with pytest.raises(ApplyError, match="cannot apply 2"):
                apply_with_rollback(elements, apply, lambda e: rolled_back.append(e.value))
        assert rolled_back == [1, 0]
        failed = next(e for e in logs if e["event"] == "apply_failed")
        assert "Opaque object at" in failed["element"]

    def test_apply_error_with_broken_str(self) -> None:
        error = UnprintableError()

        def apply(element: int) -> None:
            if element == 2:
                raise error

        rollback = MagicMock()
        with capture_logs() as logs:
            with pytest.raises(UnprintableError) as exc_info:
                apply_with_rollback([1, 2], apply, rollback)
        assert exc_info.value is error
        rollback.assert_called_once_with(1)
        failed = next(e for e in logs if e["event"] == "apply_failed")
        assert failed["error"] == "<unprintable UnprintableError>"

    def test_rollback_error_with_broken_str(self) -> None:
        apply, _ = _failing_on(3)
        attempted: list[int] = []

        def rollback(element: int) -> None:
            attempted.append(element)
            raise UnprintableError()

        with pytest.raises(ApplyError, match="cannot apply 3"):
            apply_with_rollback([1, 2, 3], apply, rollback)
        assert attempted == [2, 1]
