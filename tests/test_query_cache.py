from __future__ import annotations

import sqlite3

import pytest

from cashbook.services import query_cache as qc


def _counting_fetch(result):
    calls = []

    def fetch():
        calls.append(1)
        return list(result)

    return fetch, calls


def test_reads_are_cached_per_user_and_period() -> None:
    cache = qc.QueryCache(ttl_seconds=300)
    fetch, calls = _counting_fetch([1, 2])
    assert cache.get_list(qc.EXPENSES, "u1", fetch, period="2024-05") == [1, 2]
    assert cache.get_list(qc.EXPENSES, "u1", fetch, period="2024-05") == [1, 2]
    assert len(calls) == 1
    cache.get_list(qc.EXPENSES, "u1", fetch, period="2024-06")
    cache.get_list(qc.EXPENSES, "u2", fetch, period="2024-05")
    assert len(calls) == 3


def test_zero_ttl_always_refetches() -> None:
    cache = qc.QueryCache(ttl_seconds=0)
    fetch, calls = _counting_fetch([])
    cache.get_list(qc.WALLETS, "u1", fetch)
    cache.get_list(qc.WALLETS, "u1", fetch)
    assert len(calls) == 2


def test_mutation_invalidates_declared_kinds_only() -> None:
    cache = qc.QueryCache()
    cache.get_list(qc.WALLETS, "u1", lambda: ["w"])
    cache.get_list(qc.WALLET_TRANSACTIONS, "u1", lambda: ["t"], period="*")
    cache.get_list(qc.EXPENSES, "u1", lambda: ["e"], period="2024-05")
    cache.get_list(qc.WALLETS, "u2", lambda: ["other"])

    cache.invalidate_for("wallet.delete", "u1")

    assert (qc.WALLETS, "u1", "*") not in cache
    assert (qc.WALLET_TRANSACTIONS, "u1", "*") not in cache
    assert (qc.EXPENSES, "u1", "2024-05") in cache
    assert (qc.WALLETS, "u2", "*") in cache


def test_every_mutation_declares_known_kinds() -> None:
    for mutation, kinds in qc.MUTATION_INVALIDATES.items():
        assert kinds, mutation
        assert set(kinds) <= set(qc.KINDS)


def test_unknown_mutation_or_kind_is_rejected() -> None:
    cache = qc.QueryCache()
    with pytest.raises(ValueError):
        cache.invalidate_for("expense.explode", "u1")
    with pytest.raises(ValueError):
        cache.get_list("trips", "u1", list)


def test_read_failure_yields_empty_list_and_is_not_cached() -> None:
    cache = qc.QueryCache()

    def broken():
        raise sqlite3.OperationalError("no such table: expenses")

    assert cache.get_list(qc.EXPENSES, "u1", broken, period="2024-05") == []
    assert (qc.EXPENSES, "u1", "2024-05") not in cache
    assert cache.get_list(qc.EXPENSES, "u1", lambda: ["ok"], period="2024-05") == ["ok"]


def test_clear_single_user() -> None:
    cache = qc.QueryCache()
    cache.get_list(qc.EXPENSES, "u1", lambda: [1])
    cache.get_list(qc.EXPENSES, "u2", lambda: [2])
    cache.clear("u1")
    assert (qc.EXPENSES, "u1", "*") not in cache
    assert (qc.EXPENSES, "u2", "*") in cache


def test_expired_entries_are_dropped_on_write() -> None:
    cache = qc.QueryCache(ttl_seconds=0)
    for i in range(1000):
        cache.get_list(qc.EXPENSES, "u1", lambda: [i], period=f"p{i}")
    assert len(cache) <= 1


def test_entry_count_is_capped_least_recently_used_first() -> None:
    cache = qc.QueryCache(ttl_seconds=300, max_entries=2)
    fetch, calls = _counting_fetch([1])
    cache.get_list(qc.EXPENSES, "u1", fetch, period="a")
    cache.get_list(qc.EXPENSES, "u1", fetch, period="b")
    cache.get_list(qc.EXPENSES, "u1", fetch, period="a")  # hit, "b" is now oldest
    cache.get_list(qc.EXPENSES, "u1", fetch, period="c")
    assert len(cache) == 2
    assert (qc.EXPENSES, "u1", "a") in cache
    assert (qc.EXPENSES, "u1", "b") not in cache
    assert (qc.EXPENSES, "u1", "c") in cache
    assert len(calls) == 3


def test_max_entries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        qc.QueryCache(max_entries=0)
