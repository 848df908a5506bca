"""Tests for the console logger helpers."""

import logging

from shopagent.utils.logger import console, mask_secret


class TestMaskSecret:

    def test_credentials_are_masked(self):
        assert mask_secret("LLM_API_KEY", "sk-1234567890") == "sk-1***"
        assert mask_secret("access_token", "short") == "***"
        assert mask_secret("TAVILY_API_KEY", None) == "***"

    def test_other_values_pass_through(self):
        assert mask_secret("REDIS_KEY_PREFIX", "ai-agent") == "ai-agent"
        assert mask_secret("matched", 3) == 3


class TestConsole:

    def test_metadata_is_appended_and_masked(self, caplog):
        with caplog.at_level(logging.INFO, logger="shopagent"):
            console.info("Client ready", model="gpt-4o-mini", api_key="sk-abcdefghijkl")

        line = caplog.records[-1].getMessage()
        assert line.startswith("Client ready {")
        assert '"model": "gpt-4o-mini"' in line
        assert "sk-abcdefghijkl" not in line

    def test_success_level(self, caplog):
        with caplog.at_level(logging.INFO, logger="shopagent"):
            console.success("Tool discovery complete.")

        assert caplog.records[-1].levelname == "SUCCESS"
