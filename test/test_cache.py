import os
import pathlib

from osmosis_check.cache import CacheConfig, FileCache


def test_set_and_get_page(tmp_path):
    cfg = CacheConfig(enabled=True, directory=str(tmp_path / "oc_cache"), expire_seconds=30)
    fc = FileCache(cfg, app_name="osmosis_check_test")

    url = "https://www.osmosis.org/learn/Ebola_virus"
    fc.set_page(url, status=200, text="<html><video></video></html>", relay="cors.sh")

    got = fc.get(url)
    assert got == {"status": 200, "text": "<html><video></video></html>", "relay": "cors.sh"}
    fc.close()


def test_non_success_status_not_cached(tmp_path):
    cfg = CacheConfig(enabled=True, directory=str(tmp_path / "oc_cache"), expire_seconds=30)
    fc = FileCache(cfg)

    url = "https://example.org/bad"
    fc.set_page(url, status=404, text="not found", relay="cors.sh")
    assert fc.get(url) is None
    fc.close()


def test_stats_and_clear(tmp_path):
    cfg = CacheConfig(enabled=True, directory=str(tmp_path / "oc_cache"), expire_seconds=30)
    fc = FileCache(cfg)
    fc.set_page("https://example.org/a", status=200, text="a", relay="r")
    fc.set_page("https://example.org/b", status=200, text="b", relay="r")

    st = fc.stats()
    assert st["items"] == 2
    assert int(st["bytes"]) > 0
    assert st["directory"] == os.path.abspath(str(tmp_path / "oc_cache"))

    fc.clear_all()
    assert fc.stats()["items"] == 0
    fc.close()


def test_os_default_directory_uses_platformdirs(tmp_path, monkeypatch):
    # Monkeypatch the imported symbol used in cache.py
    from osmosis_check import cache as cache_mod

    target_dir = tmp_path / "os_default_here"

    def fake_user_cache_dir(app_name: str, appauthor: bool = False):
        # mirror platformdirs signature
        return str(target_dir)

    monkeypatch.setattr(cache_mod, "user_cache_dir", fake_user_cache_dir, raising=True)

    fc = FileCache(CacheConfig(enabled=True, directory="os-default"))
    assert pathlib.Path(fc.directory) == target_dir
    fc.close()


def test_disabled_cache_is_inert():
    fc = FileCache(CacheConfig(enabled=False, directory=".should_not_be_used"))
    assert fc.directory is None
    assert fc.get("https://example.org") is None
    fc.set_page("https://example.org", status=200, text="x", relay="r")
    assert fc.stats() == {"items": 0, "bytes": 0, "directory": ""}
    assert not os.path.exists(".should_not_be_used")
