from unittest.mock import Mock

import pytest
import requests

from autocrawler.exceptions import RetrievalError
from autocrawler.services.fetch_channels import ALL_ORIGINS, DEFAULT_CHANNELS, FetchChannel, THING_PROXY
from autocrawler.services.retriever import Retriever, add_cache_buster

PAGE = "<html><body><p>" + "Plenty of readable text. " * 4 + "</p></body></html>"


def _channel(name):
    return FetchChannel(
        name=name,
        build_url=lambda target, n=name: f"https://{n}.proxy/?u={target}",
        extract_content=lambda resp: resp.text,
    )


def _response(status_code=200, text=""):
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    return resp


def _retriever(http_client, channels, **kwargs):
    return Retriever(
        user_agent="TestAgent",
        http_client=http_client,
        channels=channels,
        clock=lambda: 1700000000.0,
        **kwargs,
    )


def test_add_cache_buster_uses_question_mark_without_query():
    assert add_cache_buster("https://x.com/p", 123) == "https://x.com/p?_t=123"


def test_add_cache_buster_appends_to_existing_query():
    assert add_cache_buster("https://x.com/p?id=4", 123) == "https://x.com/p?id=4&_t=123"


def test_first_channel_success_returns_content():
    http_client = Mock(return_value=_response(200, PAGE))
    retriever = _retriever(http_client, [_channel("one"), _channel("two")])

    doc = retriever.retrieve("https://x.com/p")

    assert doc.content == PAGE
    assert doc.status_code == 200
    assert http_client.call_count == 1
    called_url = http_client.call_args[0][0]
    assert called_url == "https://one.proxy/?u=https://x.com/p?_t=1700000000000"
    assert http_client.call_args[1]["headers"] == {"User-Agent": "TestAgent"}
    assert http_client.call_args[1]["timeout"] == 30


def test_falls_through_timeout_and_short_content_to_third_channel():
    third = "x" * 60
    http_client = Mock(side_effect=[
        requests.exceptions.Timeout("timed out"),
        _response(200, "too short"),
        _response(200, third),
    ])
    retriever = _retriever(http_client, [_channel("a"), _channel("b"), _channel("c")])

    doc = retriever.retrieve("https://x.com/p")

    assert doc.content == third
    assert doc.status_code == 200
    assert http_client.call_count == 3


def test_non_success_status_advances_to_next_channel():
    http_client = Mock(side_effect=[_response(503, PAGE), _response(200, PAGE)])
    retriever = _retriever(http_client, [_channel("a"), _channel("b")])

    assert retriever.retrieve("https://x.com/p").content == PAGE
    assert http_client.call_count == 2


def test_all_channels_failing_raises_retrieval_error(caplog):
    http_client = Mock(side_effect=[
        requests.exceptions.ConnectionError("refused"),
        _response(404, PAGE),
        _response(200, ""),
    ])
    retriever = _retriever(http_client, [_channel("a"), _channel("b"), _channel("c")])

    with pytest.raises(RetrievalError) as exc:
        retriever.retrieve("https://x.com/p")

    assert exc.value.url == "https://x.com/p"
    assert "blocking access or is unreachable" in str(exc.value)
    # channel-level detail is logged, not raised
    assert "Proxy a failed" in caplog.text
    assert "refused" not in str(exc.value)


def test_min_content_length_is_configurable():
    http_client = Mock(return_value=_response(200, "short page"))
    retriever = _retriever(http_client, [_channel("a")], min_content_length=5)

    assert retriever.retrieve("https://x.com/p").content == "short page"


def test_unexpected_http_client_error_falls_through_to_next_channel(caplog):
    http_client = Mock(side_effect=[RuntimeError("bug"), _response(200, PAGE)])
    retriever = _retriever(http_client, [_channel("a"), _channel("b")])

    assert retriever.retrieve("https://x.com/p").content == PAGE
    assert http_client.call_count == 2
    assert "Proxy a failed" in caplog.text


def test_unexpected_extraction_error_falls_through_to_next_channel():
    def missing_contents(resp):
        return resp.json()["contents"]

    broken = FetchChannel(
        name="broken",
        build_url=lambda target: f"https://broken.proxy/?u={target}",
        extract_content=missing_contents,
    )
    bad = _response(200, "{}")
    bad.json.return_value = {}
    http_client = Mock(side_effect=[bad, _response(200, PAGE)])
    retriever = _retriever(http_client, [broken, _channel("b")])

    assert retriever.retrieve("https://x.com/p").content == PAGE


def test_unexpected_errors_on_every_channel_raise_retrieval_error():
    http_client = Mock(side_effect=RuntimeError("bug"))
    retriever = _retriever(http_client, [_channel("a"), _channel("b")])

    with pytest.raises(RetrievalError):
        retriever.retrieve("https://x.com/p")


def test_allorigins_channel_reads_json_contents():
    resp = Mock()
    resp.json.return_value = {"contents": PAGE, "status": {"http_code": 200}}
    assert ALL_ORIGINS.extract_content(resp) == PAGE
    assert ALL_ORIGINS.build_url("https://x.com/a?b=1") == (
        "https://api.allorigins.win/get?url=https%3A%2F%2Fx.com%2Fa%3Fb%3D1"
    )


def test_allorigins_invalid_json_counts_as_failed_attempt():
    bad = _response(200, "not json")
    bad.json.side_effect = ValueError("no json")
    http_client = Mock(side_effect=[bad, _response(200, PAGE)])
    retriever = _retriever(http_client, [ALL_ORIGINS, _channel("b")])

    assert retriever.retrieve("https://x.com/p").content == PAGE


def test_thingproxy_does_not_encode_target():
    assert THING_PROXY.build_url("https://x.com/a") == "https://thingproxy.freeboard.io/fetch/https://x.com/a"


def test_default_channel_order():
    assert [c.name for c in DEFAULT_CHANNELS] == ["AllOrigins", "CodeTabs", "CorsProxy", "ThingProxy", "HacApp"]
