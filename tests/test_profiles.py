"""Tests for profiles.py: loading and exact-key lookup of the school profile table."""

import json
from pathlib import Path

import pytest
import requests

import profiles
from errors import RetrievalError
from profiles import ProfileStore
from settings import DEFAULT_PROFILES_PATH, ProfilesConfig


def _store(source) -> ProfileStore:
    return ProfileStore(ProfilesConfig(source=str(source)))


class TestLocalFile:
    def test_exact_lookup(self, profiles_file, profile_records):
        store = _store(profiles_file)
        assert store.lookup("22153") == profile_records["22153"]
        assert store.lookup("55401") == profile_records["55401"]

    def test_absent_key_is_none(self, profiles_file):
        store = _store(profiles_file)
        assert store.lookup("99999") is None
        # no fuzzy or prefix matching
        assert store.lookup("2215") is None
        assert store.lookup(" 22153") is None

    def test_loaded_once(self, profiles_file):
        store = _store(profiles_file)
        store.lookup("22153")
        profiles_file.write_text("{}", encoding="utf-8")
        assert store.lookup("22153") is not None

    def test_missing_file(self, tmp_path):
        with pytest.raises(RetrievalError, match="Could not read"):
            _store(tmp_path / "nope.json").lookup("22153")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "school_trends.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RetrievalError, match="not valid JSON"):
            _store(path).lookup("22153")

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "school_trends.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(RetrievalError, match="not a JSON object"):
            _store(path).lookup("22153")

    def test_bundled_table_loads(self):
        store = ProfileStore()
        assert Path(store.source) == DEFAULT_PROFILES_PATH
        assert store.lookup("22153") is not None
        assert all(isinstance(record, dict) for record in store.table.values())


class TestUrlSource:
    def test_fetches_over_http(self, monkeypatch, fake_response, profile_records):
        calls = []

        def fake_get(url, **kwargs):
            calls.append(url)
            return fake_response(200, profile_records)

        monkeypatch.setattr(profiles.requests, "get", fake_get)
        store = _store("https://example.org/school_trends.json")

        assert store.lookup("22153") == profile_records["22153"]
        assert store.lookup("55401") == profile_records["55401"]
        assert calls == ["https://example.org/school_trends.json"]

    def test_http_error(self, monkeypatch, fake_response):
        monkeypatch.setattr(profiles.requests, "get", lambda url, **kw: fake_response(404, None))
        with pytest.raises(RetrievalError, match="404"):
            _store("https://example.org/school_trends.json").lookup("22153")

    def test_transport_failure(self, monkeypatch):
        def fake_get(url, **kwargs):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(profiles.requests, "get", fake_get)
        with pytest.raises(RetrievalError, match="refused"):
            _store("http://example.org/school_trends.json").lookup("22153")

    def test_malformed_json(self, monkeypatch, fake_response):
        monkeypatch.setattr(profiles.requests, "get", lambda url, **kw: fake_response(200, text="nope"))
        with pytest.raises(RetrievalError):
            _store("https://example.org/school_trends.json").lookup("22153")


def test_bundled_table_is_valid_json():
    with open(DEFAULT_PROFILES_PATH, encoding="utf-8") as f:
        assert isinstance(json.load(f), dict)
