import pytest

from autocrawler.domain.crawl_config import TraversalMode
from autocrawler.exceptions import ConfigurationError
from autocrawler.services.crawl_config_loader import crawl_config_from_dict, load_crawl_config


def test_load_yaml_config(tmp_path):
    path = tmp_path / "news.yml"
    path.write_text(
        "seed_url: https://x.com/news/{{page}}\n"
        "mode: pagination\n"
        "start_id: 10\n"
        "end_id: 12\n"
        "summarize: true\n",
        encoding="utf-8",
    )

    cfg = load_crawl_config(str(path))

    assert cfg.seed_url == "https://x.com/news/{{page}}"
    assert cfg.mode is TraversalMode.PAGINATE
    assert (cfg.start_id, cfg.end_id) == (10, 12)
    assert cfg.summarize is True
    assert cfg.page_limit == 5


def test_missing_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_crawl_config(str(tmp_path / "nope.yml"))


def test_invalid_yaml_is_configuration_error(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("seed_url: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_crawl_config(str(path))


def test_empty_file_is_missing_seed(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="seed_url"):
        load_crawl_config(str(path))


@pytest.mark.parametrize("data", [
    {"seed_url": "https://x.com", "mode": "sideways"},
    {"seed_url": "https://x.com", "page_limit": "many"},
    ["not", "a", "mapping"],
])
def test_invalid_values_are_configuration_errors(data):
    with pytest.raises(ConfigurationError):
        crawl_config_from_dict(data)


@pytest.mark.parametrize("raw, expected", [
    (True, True),
    (False, False),
    ("no", False),
    ("false", False),
    ("Yes", True),
    ("1", True),
])
def test_boolean_fields_parse_strings(raw, expected):
    cfg = crawl_config_from_dict({"seed_url": "https://x.com", "summarize": raw, "record_failures": raw})
    assert cfg.summarize is expected
    assert cfg.record_failures is expected


@pytest.mark.parametrize("raw", ["maybe", 2, [True]])
def test_unrecognized_boolean_is_configuration_error(raw):
    with pytest.raises(ConfigurationError, match="summarize"):
        crawl_config_from_dict({"seed_url": "https://x.com", "summarize": raw})


def test_quoted_false_in_yaml_disables_summaries(tmp_path):
    path = tmp_path / "quoted.yml"
    path.write_text('seed_url: https://x.com\nsummarize: "no"\n', encoding="utf-8")
    assert load_crawl_config(str(path)).summarize is False
