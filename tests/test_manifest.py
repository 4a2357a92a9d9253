"""Tests for split datasets (manifest + part files) and data providers."""

from __future__ import annotations

import json

import pytest

from seasonal_backtest.data.market_data import MarketDataset
from seasonal_backtest.data.providers import CsvFileProvider, ManifestProvider
from seasonal_backtest.ingestion.manifest import (
    MANIFEST_FILENAME,
    ManifestError,
    read_manifest_text,
    split_into_parts,
    write_manifest,
)


class TestSplitIntoParts:
    def test_concatenation_is_lossless(self, price_csv_zh):
        parts = split_into_parts(price_csv_zh, chunk_size=50)

        assert len(parts) > 1
        assert "".join(parts) == price_csv_zh

    def test_splits_after_newline(self):
        parts = split_into_parts("aaaa\nbbbb\ncccc\n", chunk_size=7)
        assert parts == ["aaaa\n", "bbbb\n", "cccc\n"]

    def test_long_line_is_cut(self):
        assert split_into_parts("abcdefgh", chunk_size=3) == ["abc", "def", "gh"]

    def test_empty_text(self):
        assert split_into_parts("") == []

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            split_into_parts("abc", chunk_size=0)


class TestManifestRoundTrip:
    def test_write_then_read(self, tmp_path, price_csv_zh):
        manifest_path = write_manifest(price_csv_zh, tmp_path, chunk_size=60)

        assert manifest_path.name == MANIFEST_FILENAME
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        first = json.loads((tmp_path / manifest["parts"][0]).read_text(encoding="utf-8"))
        assert first["partIndex"] == 0
        assert first["totalParts"] == len(manifest["parts"])
        assert read_manifest_text(manifest_path) == price_csv_zh

    def test_provider_matches_single_file(self, tmp_path, price_csv_zh):
        csv_path = tmp_path / "prices.csv"
        csv_path.write_text(price_csv_zh, encoding="utf-8")
        manifest_path = write_manifest(price_csv_zh, tmp_path / "split", chunk_size=40)

        single = MarketDataset.from_provider(CsvFileProvider(csv_path))
        split = MarketDataset.from_provider(ManifestProvider(manifest_path))

        assert single.records == split.records
        assert single.name == "prices.csv"


class TestManifestErrors:
    def test_missing_parts_key(self, tmp_path):
        path = tmp_path / MANIFEST_FILENAME
        path.write_text(json.dumps({"files": []}))
        with pytest.raises(ManifestError):
            read_manifest_text(path)

    def test_part_without_csv_data(self, tmp_path):
        (tmp_path / "p1.json").write_text(json.dumps({"csvData": 3}))
        path = tmp_path / MANIFEST_FILENAME
        path.write_text(json.dumps({"parts": ["p1.json"]}))
        with pytest.raises(ManifestError):
            read_manifest_text(path)

    def test_part_missing_csv_data_key(self, tmp_path):
        (tmp_path / "p1.json").write_text(json.dumps({"partIndex": 0, "totalParts": 1}))
        path = tmp_path / MANIFEST_FILENAME
        path.write_text(json.dumps({"parts": ["p1.json"]}))
        with pytest.raises(ManifestError):
            read_manifest_text(path)

    def test_empty_csv_data_is_allowed(self, tmp_path):
        (tmp_path / "p1.json").write_text(json.dumps({"csvData": ""}))
        path = tmp_path / MANIFEST_FILENAME
        path.write_text(json.dumps({"parts": ["p1.json"]}))
        assert read_manifest_text(path) == ""

    def test_invalid_json(self, tmp_path):
        path = tmp_path / MANIFEST_FILENAME
        path.write_text("{not json")
        with pytest.raises(ManifestError):
            read_manifest_text(path)

    def test_missing_part_file(self, tmp_path):
        path = tmp_path / MANIFEST_FILENAME
        path.write_text(json.dumps({"parts": ["missing.json"]}))
        with pytest.raises(FileNotFoundError):
            read_manifest_text(path)


class TestCsvFileProvider:
    def test_bom_removed(self, tmp_path, price_csv_zh):
        path = tmp_path / "prices.csv"
        path.write_text("\ufeff" + price_csv_zh, encoding="utf-8")

        dataset = MarketDataset.from_provider(CsvFileProvider(path))
        assert dataset.layout.detected_by == "header"
        assert len(dataset) == 3
