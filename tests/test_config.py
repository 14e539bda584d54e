"""配置测试"""

import pytest

from tavs.config import SignalConfig


class TestDefaults:
    def test_defaults(self):
        config = SignalConfig()

        assert config.enabled is True
        assert config.idle_timeout_ms == 30000
        assert config.debug is False
        assert config.idle_timeout_seconds == 30.0

    @pytest.mark.parametrize("timeout", [0, None, -5])
    def test_idle_disabled(self, timeout):
        config = SignalConfig(idle_timeout_ms=timeout)

        assert config.idle_enabled is False
        assert config.idle_timeout_seconds == 0.0


class TestFromEnv:
    def test_empty_env_uses_defaults(self):
        assert SignalConfig.from_env({}) == SignalConfig()

    def test_overrides(self):
        config = SignalConfig.from_env({
            "TAVS_ENABLED": "false",
            "TAVS_IDLE_TIMEOUT_MS": "60000",
            "TAVS_DEBUG": "1",
            "TAVS_TRIGGER_SCRIPT": "/opt/tavs/trigger.sh",
        })

        assert config.enabled is False
        assert config.idle_timeout_ms == 60000
        assert config.debug is True
        assert config.trigger_script == "/opt/tavs/trigger.sh"

    def test_zero_timeout_disables_idle(self):
        config = SignalConfig.from_env({"TAVS_IDLE_TIMEOUT_MS": "0"})
        assert config.idle_enabled is False

    def test_invalid_values_fall_back(self, caplog):
        with caplog.at_level("WARNING"):
            config = SignalConfig.from_env({
                "TAVS_ENABLED": "maybe",
                "TAVS_IDLE_TIMEOUT_MS": "soon",
            })

        assert config.enabled is True
        assert config.idle_timeout_ms == 30000
        assert "TAVS_ENABLED" in caplog.text
        assert "TAVS_IDLE_TIMEOUT_MS" in caplog.text
