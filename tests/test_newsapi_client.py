import httpx
import pytest

from flashnews.exceptions import FetchError
from flashnews.news.services.sources.newsapi_client import NewsAPIClient


def provider_payload(*items):
    return {"status": "ok", "totalResults": len(items), "articles": list(items)}


def provider_item(i):
    return {
        "source": {"id": None, "name": "Example Wire"},
        "title": f"Provider headline number {i}",
        "url": f"https://wire.example.com/{i}",
        "publishedAt": "2025-10-26T06:52:51Z",
    }


class RecordingTransport:
    """Answers every request with a fixed response and remembers the requests"""

    def __init__(self, status_code=200, json=None, content=None, error=None):
        self.status_code = status_code
        self.json = json if json is not None else provider_payload()
        self.content = content
        self.error = error
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json)


def make_client(settings, transport):
    return NewsAPIClient(settings, client=httpx.Client(transport=httpx.MockTransport(transport)))


class TestNewsAPIClientRequests:
    def test_category_uses_top_headlines(self, settings):
        transport = RecordingTransport()
        client = make_client(settings, transport)

        client.fetch("technology", "us", 20)

        request = transport.requests[0]
        assert request.url.path == "/v2/top-headlines"
        assert request.url.params["category"] == "technology"
        assert request.url.params["country"] == "us"
        assert request.url.params["pageSize"] == "20"
        assert request.url.params["sortBy"] == "publishedAt"
        assert request.url.params["language"] == "en"
        assert request.url.params["apiKey"] == "test-key"

    def test_no_category_uses_everything_search(self, settings):
        transport = RecordingTransport()
        client = make_client(settings, transport)

        client.fetch(None, None, 10)

        request = transport.requests[0]
        assert request.url.path == "/v2/everything"
        assert request.url.params["q"] == "news"
        assert "category" not in request.url.params
        assert "country" not in request.url.params

    @pytest.mark.parametrize("limit, page_size", [(0, "1"), (50, "50"), (500, "100")])
    def test_page_size_is_bounded(self, settings, limit, page_size):
        transport = RecordingTransport()
        client = make_client(settings, transport)

        client.fetch(None, None, limit)

        assert transport.requests[0].url.params["pageSize"] == page_size

    def test_missing_api_key_returns_empty_without_request(self, settings):
        transport = RecordingTransport()
        client = make_client(settings.model_copy(update={"news_api_key": "  "}), transport)

        assert client.fetch("technology", "us", 20) == []
        assert transport.requests == []


class TestNewsAPIClientResponses:
    def test_valid_items_are_mapped_and_invalid_ones_dropped(self, settings):
        items = [
            provider_item(1),
            {**provider_item(2), "title": "Short"},
            {**provider_item(3), "url": None},
            {**provider_item(4), "url": "mailto:desk@example.com"},
            provider_item(5),
        ]
        client = make_client(settings, RecordingTransport(json=provider_payload(*items)))

        articles = client.fetch(None, None, 20)

        assert [a.url for a in articles] == ["https://wire.example.com/1", "https://wire.example.com/5"]
        assert articles[0].source_name == "Example Wire"

    def test_non_success_status_raises_fetch_error(self, settings):
        client = make_client(settings, RecordingTransport(status_code=429, json={"status": "error"}))

        with pytest.raises(FetchError) as exc_info:
            client.fetch(None, None, 20)

        assert exc_info.value.status_code == 429

    def test_transport_failure_raises_fetch_error(self, settings):
        client = make_client(settings, RecordingTransport(error=httpx.ConnectError("refused")))

        with pytest.raises(FetchError):
            client.fetch(None, None, 20)

    def test_malformed_body_raises_fetch_error(self, settings):
        client = make_client(settings, RecordingTransport(content=b"<html>oops</html>"))

        with pytest.raises(FetchError):
            client.fetch(None, None, 20)

    def test_body_without_articles_yields_nothing(self, settings):
        client = make_client(settings, RecordingTransport(json={"status": "ok"}))

        assert client.fetch(None, None, 20) == []

    def test_connection_check(self, settings):
        assert make_client(settings, RecordingTransport(json=provider_payload(provider_item(1)))).test_connection()
        assert not make_client(settings, RecordingTransport(status_code=500)).test_connection()
