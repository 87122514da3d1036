import pytest

pytest.importorskip("sqlalchemy")

from pysynced.storage.sql_storage import SqlWatermarkStore
from run_watermarks import main


@pytest.fixture
def connection_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'pysynced.db'}"
    store = SqlWatermarkStore(connection_url=url)
    store.set("digest", 1792234800000)
    store.set("launch", 1792231200000)
    return url


def test_lists_all_watermarks(connection_url, capsys):
    main(["--connection-url", connection_url])
    out = capsys.readouterr().out
    assert "- digest: 1792234800000 (2026-10-17T11:00:00+00:00)" in out
    assert "- launch: 1792231200000 (2026-10-17T10:00:00+00:00)" in out


def test_shows_single_job(connection_url, capsys):
    main(["--connection-url", connection_url, "--job", "launch"])
    out = capsys.readouterr().out
    assert "launch" in out
    assert "digest" not in out


def test_clear_watermark(connection_url, capsys):
    main(["--connection-url", connection_url, "--job", "digest", "--clear"])
    assert "Cleared watermark for digest." in capsys.readouterr().out
    assert SqlWatermarkStore(connection_url=connection_url).get("digest") is None

    main(["--connection-url", connection_url, "--job", "digest"])
    assert "No watermarks found." in capsys.readouterr().out


def test_clear_requires_job(connection_url):
    with pytest.raises(SystemExit):
        main(["--connection-url", connection_url, "--clear"])
