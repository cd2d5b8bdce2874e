"""Tests for shared helpers and configuration."""

from __future__ import annotations

import pytest

from volscan.config import ScanConfig
from volscan.utils import display_path


class TestDisplayPath:
    def test_plain_path_unchanged(self):
        assert display_path("/data/video.mkv") == "/data/video.mkv"

    def test_surrogate_escape_replaced(self):
        assert display_path("/data/bad\udcff.bin") == "/data/bad\ufffd.bin"

    def test_result_is_encodable(self):
        display_path("caf\udce9").encode("utf-8")


class TestScanConfig:
    def test_defaults(self):
        config = ScanConfig()
        assert config.top_n == 5
        assert config.tick_interval == 1.0
        assert config.max_workers is None
        assert config.export_dir is None

    def test_with_options_skips_none(self):
        config = ScanConfig().with_options(max_workers=None, top_n=3)
        assert config.top_n == 3
        assert config.max_workers is None

    @pytest.mark.parametrize("kwargs", [{"max_workers": 0}, {"top_n": -1}, {"tick_interval": 0}])
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ScanConfig(**kwargs)
