from itertools import product
from unittest.mock import call

import pytest

from dbguard import TransactionGuard


def make_guard(driver):
    return TransactionGuard(driver.begin, driver.commit, driver.rollback)


def test_nested_begin_commit_issues_one_physical_pair(driver):
    guard = make_guard(driver)

    guard.begin()
    guard.begin()
    assert driver.mock_calls == [call.begin()]

    guard.commit()
    assert driver.mock_calls == [call.begin()]
    assert guard.active
    assert guard.depth == 1

    guard.commit()
    assert driver.mock_calls == [call.begin(), call.commit()]
    assert not guard.active
    assert guard.depth == 0


def test_rollback_then_commit_issues_no_commit(driver):
    guard = make_guard(driver)

    guard.begin()
    guard.begin()
    guard.rollback()
    guard.commit()

    assert driver.mock_calls == [call.begin(), call.rollback()]
    assert not guard.active
    assert guard.depth == 0


@pytest.mark.parametrize("depth", [1, 2, 5])
def test_rollback_at_any_depth_resets(driver, depth):
    guard = make_guard(driver)
    for _ in range(depth):
        guard.begin()

    guard.rollback()

    assert not guard.active
    assert guard.depth == 0
    driver.rollback.assert_called_once_with()


def test_commit_without_transaction_is_noop(driver):
    guard = make_guard(driver)

    guard.commit()
    guard.commit()

    assert driver.mock_calls == []
    assert guard.depth == 0


def test_rollback_without_transaction_is_noop(driver):
    guard = make_guard(driver)
    guard.rollback()
    assert driver.mock_calls == []


def test_extra_commits_are_clamped(driver):
    guard = make_guard(driver)

    guard.begin()
    guard.commit()
    guard.commit()
    guard.commit()
    assert guard.depth == 0

    # A fresh span starts a new physical transaction and closes it normally.
    guard.begin()
    guard.commit()

    assert driver.mock_calls == [
        call.begin(),
        call.commit(),
        call.begin(),
        call.commit(),
    ]


def test_sequential_spans_each_get_a_physical_transaction(driver):
    guard = make_guard(driver)

    for _ in range(3):
        guard.begin()
        guard.begin()
        guard.commit()
        guard.commit()

    assert driver.begin.call_count == 3
    assert driver.commit.call_count == 3


def test_failed_begin_leaves_guard_untouched(driver):
    driver.begin.side_effect = RuntimeError("server gone")
    guard = make_guard(driver)

    with pytest.raises(RuntimeError, match="server gone"):
        guard.begin()

    assert not guard.active
    assert guard.depth == 0


def test_failed_commit_keeps_transaction_for_rollback(driver):
    driver.commit.side_effect = RuntimeError("deadlock")
    guard = make_guard(driver)

    guard.begin()
    with pytest.raises(RuntimeError, match="deadlock"):
        guard.commit()

    assert guard.active
    assert guard.depth == 0

    guard.rollback()
    driver.rollback.assert_called_once_with()
    assert not guard.active


def test_failed_rollback_still_resets(driver):
    driver.rollback.side_effect = RuntimeError("lost connection")
    guard = make_guard(driver)

    guard.begin()
    guard.begin()
    with pytest.raises(RuntimeError, match="lost connection"):
        guard.rollback()

    assert not guard.active
    assert guard.depth == 0


@pytest.mark.parametrize("ops", list(product("bc", repeat=6)))
def test_physical_calls_follow_depth_transitions(driver, ops):
    guard = make_guard(driver)

    depth = 0
    expected = []
    for op in ops:
        if op == "b":
            if depth == 0:
                expected.append(call.begin())
            depth += 1
            guard.begin()
        else:
            if depth == 1:
                expected.append(call.commit())
            depth = max(depth - 1, 0)
            guard.commit()

        assert guard.depth == depth
        assert guard.active == (depth > 0)

    assert driver.mock_calls == expected
