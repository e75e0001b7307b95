from __future__ import annotations

import os

from adapters import LocalStorageAdapter
from env_loader import env_path, load_dotenv_if_present


def test_local_storage_roundtrip(tmp_path):
    storage = LocalStorageAdapter(tmp_path)
    location = storage.write_raw("charts/out.png", b"\x89PNG")
    assert location == str(tmp_path / "charts" / "out.png")
    assert storage.exists("charts/out.png")
    assert storage.read_raw("charts/out.png") == b"\x89PNG"
    assert not storage.exists("charts/missing.png")


def test_local_storage_reads_csv_as_text(tmp_path):
    (tmp_path / "panel.csv").write_text("Entity,Year\nChile,2001\n", encoding="utf-8")
    df = LocalStorageAdapter(tmp_path).read_csv("panel.csv", dtype=str)
    assert df.to_dict("records") == [{"Entity": "Chile", "Year": "2001"}]


def test_absolute_keys_bypass_root(tmp_path):
    target = tmp_path / "abs.bin"
    LocalStorageAdapter("unused-root").write_raw(str(target), b"x")
    assert target.read_bytes() == b"x"


def test_dotenv_does_not_override_existing(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\nexport CHART_TEST_A='quoted'\nCHART_TEST_B=new\nnot a pair\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("CHART_TEST_A", raising=False)
    monkeypatch.setenv("CHART_TEST_B", "old")
    loaded = load_dotenv_if_present(str(env_file))
    assert loaded == ["CHART_TEST_A"]
    assert os.environ["CHART_TEST_A"] == "quoted"
    assert os.environ["CHART_TEST_B"] == "old"
    monkeypatch.delenv("CHART_TEST_A")


def test_missing_dotenv_is_ignored(tmp_path):
    assert load_dotenv_if_present(str(tmp_path / "nope.env")) == []


def test_env_path_default(monkeypatch):
    monkeypatch.delenv("CHART_TEST_PATH", raising=False)
    assert str(env_path("CHART_TEST_PATH", "output")) == "output"
    monkeypatch.setenv("CHART_TEST_PATH", "/tmp/x")
    assert str(env_path("CHART_TEST_PATH", "output")) == "/tmp/x"
