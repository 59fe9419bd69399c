from unittest.mock import Mock

import pytest

from shortener.codes import ALPHABET
from shortener.exceptions import (
    DuplicateCodeError,
    InvalidURLError,
    LinkNotFoundError,
    RetriesExhaustedError,
    StorageError,
)
from shortener.service import ShortenerService
from shortener.store import LinkStore
from tests.conftest import FixedCodes


def make_service(store, generator=None, max_attempts=5):
    return ShortenerService(
        store=store,
        generator=generator or FixedCodes(),
        base_url="http://short.test/",
        max_attempts=max_attempts,
    )


def test_shorten_then_info_round_trip(service):
    created = service.shorten("https://example.com/page")
    code = created["code"]

    assert len(code) == 7
    assert all(c in ALPHABET for c in code)
    assert created["short_url"] == f"http://testserver/{code}"

    info = service.info(code)
    assert info["original_url"] == "https://example.com/page"
    assert info["hits"] == 0
    assert info["created_at"].tzinfo is not None


@pytest.mark.parametrize("url", [
    None,
    "",
    "not-a-url",
    "ftp://example.com/file",
    "javascript:alert(1)",
    "example.com/page",
    "http://",
])
def test_invalid_urls_never_reach_store(url):
    store = Mock(spec=LinkStore)
    with pytest.raises(InvalidURLError):
        make_service(store).shorten(url)
    store.create_link.assert_not_called()


@pytest.mark.parametrize("length", [2100, 5000])
def test_long_urls_shorten_and_resolve_exactly(service, length):
    url = "https://example.com/?q=" + "a" * (length - len("https://example.com/?q="))
    assert len(url) == length

    code = service.shorten(url)["code"]
    assert service.info(code)["original_url"] == url
    assert service.redirect(code, lambda func, *args: None) == url


@pytest.mark.parametrize("url", [
    "http://localhost:5000/x",
    "http://[::1]/",
    "https://example.com/path?x=1#frag",
])
def test_valid_urls_are_accepted(service, url):
    assert service.info(service.shorten(url)["code"])["original_url"] == url


def test_collision_is_retried_with_fresh_code():
    store = Mock(spec=LinkStore)
    link = Mock(code="bbbbbbb", original_url="https://example.com", created_at=None, hits=0)
    store.create_link.side_effect = [DuplicateCodeError("aaaaaaa"), link]
    generator = FixedCodes()

    result = make_service(store, generator).shorten("https://example.com")

    assert result["code"] == "bbbbbbb"
    assert result["short_url"] == "http://short.test/bbbbbbb"
    assert store.create_link.call_count == 2
    assert generator.calls == 2


def test_collisions_exhaust_after_max_attempts(store):
    store.create_link("aaaaaaa", "https://example.com/taken")
    generator = FixedCodes("aaaaaaa")

    with pytest.raises(RetriesExhaustedError) as excinfo:
        make_service(store, generator).shorten("https://example.com/new")

    assert excinfo.value.attempts == 5
    assert generator.calls == 5


def test_storage_error_is_not_retried():
    store = Mock(spec=LinkStore)
    store.create_link.side_effect = StorageError("down")

    with pytest.raises(StorageError):
        make_service(store).shorten("https://example.com")
    assert store.create_link.call_count == 1


def test_redirect_schedules_hit_without_running_it():
    store = Mock(spec=LinkStore)
    store.lookup_link.return_value = Mock(original_url="https://example.com/page")
    scheduled = []

    service = make_service(store)
    target = service.redirect("aaaaaaa", lambda func, *args: scheduled.append((func, args)))

    assert target == "https://example.com/page"
    assert scheduled == [(service.record_hit, ("aaaaaaa",))]
    store.increment_hits.assert_not_called()


def test_redirect_unknown_code_schedules_nothing():
    store = Mock(spec=LinkStore)
    store.lookup_link.side_effect = LinkNotFoundError("nothere")
    schedule = Mock()

    with pytest.raises(LinkNotFoundError):
        make_service(store).redirect("nothere", schedule)
    schedule.assert_not_called()


def test_redirect_survives_failing_increment():
    store = Mock(spec=LinkStore)
    store.lookup_link.return_value = Mock(original_url="https://example.com/page")
    store.increment_hits.side_effect = StorageError("down")

    # run the hit inline to prove its failure does not escape
    target = make_service(store).redirect("aaaaaaa", lambda func, *args: func(*args))

    assert target == "https://example.com/page"
    store.increment_hits.assert_called_once_with("aaaaaaa")


def test_record_hit_counts(service):
    code = service.shorten("https://example.com")["code"]
    service.record_hit(code)
    service.record_hit(code)
    assert service.info(code)["hits"] == 2


def test_record_hit_on_unknown_code_is_swallowed(service):
    service.record_hit("nothere")
