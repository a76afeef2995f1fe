"""Configuration and .acenv loader tests."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from agentcheck.config import load_config
from agentcheck.env_loader import load_env_files
from agentcheck.exceptions import AgentCheckError, ConfigError
from agentcheck.state import OperationalState


BASE_ENV = {"AC_LISTEN_PORT": "5555", "AC_TALK_PORT": "5556"}


def _env(**overrides):
    env = dict(BASE_ENV)
    env.update(overrides)
    return env


class TestLoadConfig(unittest.TestCase):

    def test_defaults(self):
        cfg = load_config(BASE_ENV)
        self.assertEqual(cfg.report_address, ("", 5555))
        self.assertEqual(cfg.control_address, ("localhost", 5556))
        self.assertIs(cfg.initial_state, OperationalState.UP)
        self.assertIsNone(cfg.client_timeout)
        self.assertEqual(cfg.log_level, "INFO")

    def test_missing_listen_port(self):
        with self.assertRaises(ConfigError) as ctx:
            load_config({"AC_TALK_PORT": "5556"})
        self.assertEqual(str(ctx.exception), "AC LISTEN PORT not set")

    def test_missing_talk_port(self):
        with self.assertRaises(ConfigError) as ctx:
            load_config({"AC_LISTEN_PORT": "5555"})
        self.assertEqual(str(ctx.exception), "AC TALK PORT not set")

    def test_empty_port_counts_as_missing(self):
        with self.assertRaises(ConfigError) as ctx:
            load_config(_env(AC_LISTEN_PORT=""))
        self.assertEqual(str(ctx.exception), "AC LISTEN PORT not set")

    def test_bad_ports(self):
        for bad in ("http", "-1", "70000"):
            with self.assertRaises(ConfigError):
                load_config(_env(AC_TALK_PORT=bad))

    def test_ephemeral_port_rejected(self):
        for key in ("AC_LISTEN_PORT", "AC_TALK_PORT"):
            with self.assertRaises(ConfigError) as ctx:
                load_config(_env(**{key: "0"}))
            self.assertIn("1..65535", str(ctx.exception))
        self.assertEqual(load_config(_env(AC_TALK_PORT="1")).talk_port, 1)
        self.assertEqual(load_config(_env(AC_TALK_PORT="65535")).talk_port, 65535)

    def test_optional_overrides(self):
        cfg = load_config(_env(
            AC_LISTEN_HOST="0.0.0.0",
            AC_TALK_HOST="127.0.0.1",
            AC_INITIAL_STATE="maint",
            AC_CLIENT_TIMEOUT="2.5",
            AC_LOG_LEVEL="debug",
        ))
        self.assertEqual(cfg.report_address, ("0.0.0.0", 5555))
        self.assertEqual(cfg.control_address, ("127.0.0.1", 5556))
        self.assertIs(cfg.initial_state, OperationalState.MAINT)
        self.assertEqual(cfg.client_timeout, 2.5)
        self.assertEqual(cfg.log_level, "DEBUG")

    def test_invalid_optional_values(self):
        for overrides in (
            {"AC_INITIAL_STATE": "sideways"},
            {"AC_CLIENT_TIMEOUT": "soon"},
            {"AC_CLIENT_TIMEOUT": "0"},
            {"AC_LOG_LEVEL": "chatty"},
        ):
            with self.assertRaises(ConfigError, msg=overrides):
                load_config(_env(**overrides))

    def test_config_error_is_value_error(self):
        self.assertTrue(issubclass(ConfigError, ValueError))
        self.assertTrue(issubclass(ConfigError, AgentCheckError))

    def test_reads_process_environment_by_default(self):
        with mock.patch.dict(os.environ, BASE_ENV, clear=True):
            self.assertEqual(load_config().listen_port, 5555)


class TestEnvLoader(unittest.TestCase):

    def test_loads_files_without_overwriting(self):
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            (base / ".acenv").write_text(
                "# agent ports\n"
                "AC_LISTEN_PORT=6000\n"
                "AC_TALK_PORT='6001'\n"
                "\n"
                "not a pair\n",
                encoding="utf-8",
            )
            (base / ".acenv.local").write_text('AC_TALK_PORT="7001"\n', encoding="utf-8")

            with mock.patch.dict(os.environ, {"AC_LISTEN_PORT": "9000"}, clear=True):
                loaded = load_env_files(base)
                self.assertEqual(loaded, {"AC_LISTEN_PORT": "6000", "AC_TALK_PORT": "7001"})
                self.assertEqual(os.environ["AC_LISTEN_PORT"], "9000")
                self.assertEqual(os.environ["AC_TALK_PORT"], "7001")

    def test_missing_files_are_ignored(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {}, clear=True):
                self.assertEqual(load_env_files(Path(tmp)), {})


if __name__ == "__main__":
    unittest.main()
