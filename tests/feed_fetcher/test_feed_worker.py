from src.functions.feed_fetcher.core.config import FetcherConfig
from src.functions.feed_fetcher.core.contracts import FetchStatus, Profile
from src.functions.feed_fetcher.core.errors import ParseError, TransportError
from src.functions.feed_fetcher.core.identifiers import content_id
from src.functions.feed_fetcher.core.workers import FeedFetchWorker
from tests.feed_fetcher.fixtures import EMPTY_RSS, NOT_A_FEED, SAMPLE_RSS, FakeHttpClient

FEED_URL = "https://blog.example.com/feed"


def _worker(body) -> FeedFetchWorker:
    http_client = FakeHttpClient({FEED_URL: body} if body is not None else {})
    return FeedFetchWorker(0, FetcherConfig(), http_client=http_client)


def _profile() -> Profile:
    return Profile(pid="blog", feed_url=FEED_URL, follower_count=2)


def test_feed_items_are_mapped_to_profile_items():
    result = _worker(SAMPLE_RSS).process(_profile())

    assert result.status is FetchStatus.OK
    assert result.error is None
    assert [item.id for item in result.items] == [
        content_id("https://blog.example.com/?p=1"),
        content_id("https://blog.example.com/?p=2"),
    ]
    first = result.items[0]
    assert first.pid == "blog"
    assert first.text == "First post"
    assert first.link == "https://blog.example.com/first"
    assert first.image == "https://cdn.example.com/first.jpg"
    assert first.event > 0


def test_transport_error_yields_no_items():
    result = _worker(None).process(_profile())

    assert result.status is FetchStatus.TRANSPORT_ERROR
    assert result.items is None
    assert not result.processed
    assert isinstance(result.error, TransportError)


def test_parse_error_yields_empty_item_list():
    result = _worker(NOT_A_FEED).process(_profile())

    assert result.status is FetchStatus.PARSE_ERROR
    assert result.items == []
    assert result.processed
    assert isinstance(result.error, ParseError)


def test_feed_without_entries_is_empty():
    result = _worker(EMPTY_RSS).process(_profile())

    assert result.status is FetchStatus.EMPTY
    assert result.items == []
    assert result.ok


def test_failure_result_and_close():
    worker = _worker(SAMPLE_RSS)

    result = worker.failure(_profile(), RuntimeError("unexpected"))
    worker.close()

    assert result.status is FetchStatus.FAILED
    assert result.items is None
    assert worker.http_client.closed
