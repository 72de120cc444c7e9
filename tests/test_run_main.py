"""
Tests for run.py main() with an injected container.
"""
from unittest.mock import Mock, patch

from run import build_parser, main
from autocrawler.container import Container
from autocrawler.domain.extracted_page import ExtractedPage
from autocrawler.domain.retrieved_document import RetrievedDocument
from autocrawler.services.traversal_engine import TraversalEngine


def _container(retriever=None):
    container = Container()
    container.config.CRAWL_DELAY.from_value(0.0)
    if retriever is None:
        retriever = Mock()
        retriever.retrieve.return_value = RetrievedDocument("<html><body>hello</body></html>")
    extractor = Mock()
    extractor.extract.return_value = ExtractedPage(text="hello world", title="Hello", links=[])
    container.retriever.override(retriever)
    container.extractor.override(extractor)
    return container


def test_container_creates_services():
    container = Container()
    container.config.USER_AGENT.from_value("TestBot/1.0")
    container.config.HTTP_TIMEOUT.from_value(5)

    retriever = container.retriever()
    assert retriever.user_agent == "TestBot/1.0"
    assert retriever.timeout == 5
    assert container.extractor() is not None
    assert container.summarizer() is not None

    engine = container.traversal_engine()
    assert isinstance(engine, TraversalEngine)
    assert engine is container.traversal_engine()


def test_crawl_command_writes_report(tmp_path):
    out = tmp_path / "report.txt"
    code = main(["crawl", "https://x.com/a", "--output", str(out)], container=_container())

    assert code == 0
    text = out.read_bytes().decode("utf-8-sig")
    assert "Total Pages: 1" in text
    assert "FILE #1: https://x.com/a" in text
    assert "hello world" in text


def test_crawl_command_with_yaml_config(tmp_path):
    cfg = tmp_path / "crawl.yml"
    cfg.write_text("seed_url: https://x.com/n/{{page}}\nmode: paginate\nstart_id: 1\nend_id: 2\n", encoding="utf-8")
    out = tmp_path / "report.txt"

    code = main(["crawl", "--config", str(cfg), "--output", str(out)], container=_container())

    assert code == 0
    assert "Total Pages: 2" in out.read_bytes().decode("utf-8-sig")


def test_crawl_command_without_url_fails(tmp_path):
    out = tmp_path / "report.txt"
    code = main(["crawl", "--output", str(out)], container=_container())
    assert code == 1
    assert not out.exists()


def test_crawl_command_with_no_results_writes_nothing(tmp_path):
    from autocrawler.exceptions import RetrievalError

    retriever = Mock()
    retriever.retrieve.side_effect = RetrievalError("https://x.com/a")
    out = tmp_path / "report.txt"

    code = main(["crawl", "https://x.com/a", "--output", str(out)], container=_container(retriever))

    assert code == 0
    assert not out.exists()


def test_serve_command_starts_uvicorn():
    container = _container()
    with patch("run.uvicorn.run") as mock_uvicorn:
        code = main(["serve", "--port", "9001"], container=container)

    assert code == 0
    assert mock_uvicorn.called
    assert mock_uvicorn.call_args[1]["port"] == 9001


def test_parser_rejects_unknown_mode():
    parser = build_parser()
    try:
        parser.parse_args(["crawl", "https://x.com", "--mode", "sideways"])
        assert False, "expected SystemExit"
    except SystemExit as e:
        assert e.code == 2
