"""Tests for the in-memory result store: one-shot take, overwrite, TTL, concurrent take."""
import threading

from oauth_bridge.result_store import STATUS_FAILED, STATUS_READY, MemoryResultStore, create_store


def test_take_missing_returns_none(store):
    assert store.take("never-stored") is None


def test_put_then_take_returns_tokens_once(store):
    store.put("s1", {"access_token": "at", "refresh_token": "rt"}, provider="google")

    result = store.take("s1")
    assert result is not None
    assert result.status == STATUS_READY
    assert result.provider == "google"
    assert result.tokens["access_token"] == "at"
    assert store.take("s1") is None
    assert len(store) == 0


def test_put_overwrites_previous_entry(store):
    store.put("s1", {"access_token": "first"})
    store.put("s1", {"access_token": "second"})

    assert len(store) == 1
    assert store.take("s1").tokens["access_token"] == "second"


def test_put_copies_tokens(store):
    tokens = {"access_token": "at"}
    store.put("s1", tokens)
    tokens["access_token"] = "mutated"

    assert store.take("s1").tokens["access_token"] == "at"


def test_put_failure_is_taken_once(store):
    store.put_failure("s1", "token_exchange_failed", "invalid_grant", provider="notion")

    result = store.take("s1")
    assert result.status == STATUS_FAILED
    assert result.to_response() == {
        "status": "failed",
        "provider": "notion",
        "error": "token_exchange_failed",
        "error_description": "invalid_grant",
    }
    assert store.take("s1") is None


def test_ready_response_shape(store):
    store.put("s1", {"access_token": "at"}, provider="google")

    assert store.take("s1").to_response() == {
        "status": "ready",
        "provider": "google",
        "tokens": {"access_token": "at"},
    }


def test_expired_entry_reads_as_absent(store, clock):
    store.put("s1", {"access_token": "at"})
    clock.advance(601)

    assert store.take("s1") is None
    assert len(store) == 0


def test_entry_within_ttl_is_returned(store, clock):
    store.put("s1", {"access_token": "at"})
    clock.advance(599)

    assert store.take("s1") is not None


def test_purge_expired_removes_only_old_entries(store, clock):
    store.put("old", {"access_token": "a"})
    clock.advance(500)
    store.put("new", {"access_token": "b"})
    clock.advance(200)

    assert store.purge_expired() == 1
    assert len(store) == 1
    assert store.take("old") is None
    assert store.take("new") is not None


def test_concurrent_take_only_one_winner():
    results = MemoryResultStore(ttl_seconds=600)
    results.put("shared", {"access_token": "at"})
    barrier = threading.Barrier(8)
    got = []

    def poll():
        barrier.wait()
        got.append(results.take("shared"))

    threads = [threading.Thread(target=poll) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [r for r in got if r is not None]
    assert len(winners) == 1
    assert winners[0].tokens == {"access_token": "at"}


def test_create_store_without_url_is_memory():
    assert isinstance(create_store("", 600), MemoryResultStore)
