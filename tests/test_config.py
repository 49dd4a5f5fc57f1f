"""
Tests for environment-driven configuration and service wiring.
"""

from pathlib import Path

import pytest

from poolwatch.api import DexScreenerClient, KyberSwapClient
from poolwatch.config import Config
from poolwatch.monitor import MonitorService
from poolwatch.monitor.scheduler import DailyAt, Every


class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.reference_symbols == ["USDT", "USDC"]
        assert config.disallowed_symbols == ["WETH"]
        assert config.kyberswap_chain_ids == [56, 8453]
        assert config.monitor_interval_sec == 30
        assert config.reset_at == (0, 0)
        assert config.seen_dir == config.data_dir / "sent_pools"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REFERENCE_SYMBOLS", "usdt, fdusd ,")
        monkeypatch.setenv("KYBERSWAP_CHAIN_IDS", "56")
        monkeypatch.setenv("MONITOR_INTERVAL_SEC", "45")
        monkeypatch.setenv("RESET_TIME", "08:30")
        monkeypatch.setenv("ALPHA_ENABLED", "false")
        monkeypatch.setenv("POOLWATCH_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("WEBHOOK_SERVICE", "QYWX")
        monkeypatch.setenv("WEBHOOK_KEY", "abc")
        monkeypatch.delenv("WEBHOOK_URL", raising=False)

        config = Config.from_env()

        assert config.reference_symbols == ["usdt", "fdusd"]
        assert config.kyberswap_chain_ids == [56]
        assert config.monitor_interval_sec == 45
        assert config.reset_at == (8, 30)
        assert config.alpha_enabled is False
        assert config.snapshot_path == Path(tmp_path) / "pools_snapshot.json"
        assert config.webhook_service == "qywx"
        assert config.webhook_endpoint == "https://qyapi.weixin.qq.com/cgi-bin/webhook/send?key=abc"

    def test_invalid_reset_time(self):
        with pytest.raises(ValueError):
            Config(reset_time="25:00").reset_at


class TestMonitorService:

    def test_from_config_wiring(self, tmp_path):
        config = Config(data_dir=tmp_path, webhook_service="serverchan", webhook_api_key="k", alpha_enabled=True)

        service = MonitorService.from_config(config)
        try:
            kyber, dex = service.sources.providers
            assert isinstance(kyber, KyberSwapClient)
            assert isinstance(dex, DexScreenerClient)
            assert kyber.retry_policy.max_attempts == 3
            assert service.webhook.service == "serverchan"
            assert service.alpha_job is not None
            assert service.seen_store.directory == tmp_path / "sent_pools"
        finally:
            service.close()

    def test_alpha_can_be_disabled(self, tmp_path):
        service = MonitorService.from_config(Config(data_dir=tmp_path), alpha=False)
        try:
            assert service.alpha_job is None
            assert service.webhook is None
        finally:
            service.close()

    def test_register_jobs(self, tmp_path):
        config = Config(data_dir=tmp_path, reset_time="06:15", reset_timezone="UTC")
        service = MonitorService.from_config(config, alpha=True)
        try:
            service.register_jobs()
            schedules = {job.name: job.schedule for job in service.scheduler.jobs}
            assert schedules["pools"] == Every(30)
            assert schedules["daily-reset"] == DailyAt(6, 15, "UTC")
            assert schedules["alpha"] == Every(60)
        finally:
            service.close()
