# File: tests/test_cli.py
import json

import pytest
import yaml
from click.testing import CliRunner

from conftest import BASE_URL
from sitemap_builder import __version__
from sitemap_builder.cli import cli
from sitemap_builder.logger import configure

INLINE_CONFIG = {
    "base_url": BASE_URL,
    "pages": {
        "root_page_id": 1,
        "nodes": [
            {"id": 1, "slug": "/", "timestamp": 1700000000},
            {"id": 2, "parent_id": 1, "slug": "/blog", "sitemap_priority": "8"},
            {"id": 3, "parent_id": 1, "slug": "/drafts", "exclude": True},
        ],
    },
}


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    # CliRunner closes the stream the CLI attached its handler to
    configure()


@pytest.fixture()
def runner():
    return CliRunner()


def write_config(tmp_path, data, name="sitemap.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def json_line(output: str) -> dict:
    line = next(l for l in output.splitlines() if l.startswith("{"))
    return json.loads(line)


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert f"sitemap-builder, version {__version__}" in result.output


def test_config_command(runner, tmp_path):
    cfg_path = write_config(tmp_path, INLINE_CONFIG)
    result = runner.invoke(cli, ["--config", str(cfg_path), "config"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["pages"]["root_page_id"] == 1
    assert data["sources"] == []


def test_build_prints_json(runner, tmp_path):
    cfg_path = write_config(tmp_path, INLINE_CONFIG)
    result = runner.invoke(cli, ["-c", str(cfg_path), "--log-level", "WARNING", "build"])
    assert result.exit_code == 0, result.output
    data = json_line(result.output)
    assert data["entries"] == [
        {"loc": f"{BASE_URL}/", "lastmod": "2023-11-14"},
        {"loc": f"{BASE_URL}/blog", "priority": 0.8},
    ]
    assert data["diagnostics"]["aborted"] is False


def test_build_writes_json_file(runner, tmp_path):
    cfg_path = write_config(tmp_path, INLINE_CONFIG)
    out = tmp_path / "reports" / "sitemap.json"
    result = runner.invoke(cli, ["-c", str(cfg_path), "build", "--json", str(out), "--pretty"])
    assert result.exit_code == 0, result.output
    saved = json.loads(out.read_text(encoding="utf-8"))
    assert [e["loc"] for e in saved["entries"]] == [f"{BASE_URL}/", f"{BASE_URL}/blog"]
    assert "2 entries, 0 diagnostics" in result.output


def test_build_with_database(runner, tmp_path, site_db):
    data = {
        "base_url": BASE_URL,
        "database_url": site_db,
        "pages": {"root_page_id": 1},
        "sources": [
            {
                "table": "tx_news",
                "active": True,
                "field_map": {"loc": "{{ base_url }}/news/{{ path_segment }}"},
                "additional_filter": {"op": "eq", "column": "sys_language_uid", "value": 0},
            }
        ],
    }
    cfg_path = write_config(tmp_path, data)
    result = runner.invoke(cli, ["-c", str(cfg_path), "build", "--parallel"])
    assert result.exit_code == 0, result.output
    locs = [e["loc"] for e in json_line(result.output)["entries"]]
    assert locs[-2:] == [f"{BASE_URL}/news/first", f"{BASE_URL}/news/second"]


def test_build_aborted_on_schema_mismatch(runner, tmp_path, site_db):
    data = {
        "base_url": BASE_URL,
        "database_url": site_db,
        "sources": [
            {
                "table": "tx_news",
                "active": True,
                "field_map": {"loc": "{{ base_url }}/news/{{ uid }}", "priority": "weight"},
            }
        ],
    }
    cfg_path = write_config(tmp_path, data)
    result = runner.invoke(cli, ["-c", str(cfg_path), "build"])
    assert result.exit_code == 1
    report = json_line(result.output)
    assert report["entries"] == []
    assert report["diagnostics"]["aborted"] is True


@pytest.mark.parametrize(
    "content,name",
    [
        ("{}", "sitemap.json"),
        ("sources:\n  - table: news\n    active: true\n", "sitemap.yaml"),
        ("- a\n- b\n", "sitemap.yaml"),
    ],
)
def test_invalid_config_exits_with_error(runner, tmp_path, content, name):
    cfg_path = tmp_path / name
    cfg_path.write_text(content, encoding="utf-8")
    result = runner.invoke(cli, ["-c", str(cfg_path), "build"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_missing_config_file(runner, tmp_path):
    result = runner.invoke(cli, ["-c", str(tmp_path / "absent.yaml"), "build"])
    assert result.exit_code == 2


def test_check_command(runner, tmp_path, site_db):
    data = {
        "base_url": BASE_URL,
        "database_url": site_db,
        "sources": [
            {"name": "news", "table": "tx_news", "active": True, "field_map": {"loc": "{{ uid }}", "lastmod": "tstamp"}},
            {"name": "events", "table": "tx_events"},
        ],
    }
    result = runner.invoke(cli, ["-c", str(write_config(tmp_path, data)), "check"])
    assert result.exit_code == 0, result.output
    assert "OK: 1 active source(s)" in result.output
    assert "  - news" in result.output


def test_check_command_reports_missing_column(runner, tmp_path, site_db):
    data = {
        "base_url": BASE_URL,
        "database_url": site_db,
        "sources": [
            {"table": "tx_news", "active": True, "field_map": {"loc": "{{ uid }}", "changefreq": "freq"}},
        ],
    }
    result = runner.invoke(cli, ["-c", str(write_config(tmp_path, data)), "check"])
    assert result.exit_code == 1
    assert "freq" in result.output


@pytest.mark.parametrize(
    "database_url",
    ["sqlite:///{tmp}/missing_dir/site.db", "nosuchdialect://host/db"],
)
def test_check_command_reports_database_errors(runner, tmp_path, database_url):
    data = {
        "base_url": BASE_URL,
        "database_url": database_url.format(tmp=tmp_path),
        "sources": [{"table": "tx_news", "active": True, "field_map": {"loc": "{{ uid }}"}}],
    }
    result = runner.invoke(cli, ["-c", str(write_config(tmp_path, data)), "check"])
    assert result.exit_code == 1
    assert "База данных недоступна" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_build_with_unreachable_database_still_emits_pages(runner, tmp_path):
    data = dict(INLINE_CONFIG)
    data["database_url"] = f"sqlite:///{tmp_path}/missing_dir/site.db"
    data["sources"] = [{"name": "news", "table": "tx_news", "active": True, "field_map": {"loc": "{{ uid }}"}}]
    result = runner.invoke(cli, ["-c", str(write_config(tmp_path, data)), "build"])
    assert result.exit_code == 0, result.output
    report = json_line(result.output)
    assert [e["loc"] for e in report["entries"]] == [f"{BASE_URL}/", f"{BASE_URL}/blog"]
    assert report["diagnostics"]["records"][0]["kind"] == "source_unavailable"
