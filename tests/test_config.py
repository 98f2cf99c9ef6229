"""
Configuration Tests
Tests environment loading, defaults and validation
"""

import os
import unittest
from unittest.mock import patch

from src.utils.config import (
    Config,
    ConfigurationError,
    DecoderConfig,
    OutputConfig,
    SystemConfig,
)


MISSING_ENV_FILE = "/nonexistent/msg-reader-test.env"


class TestConfigDefaults(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = Config(MISSING_ENV_FILE)

        self.assertEqual(config.decoder, DecoderConfig("extract_msg", "Message"))
        self.assertEqual(config.output, OutputConfig("attachments", False, True))
        self.assertEqual(config.system, SystemConfig("INFO", "", "text"))
        self.assertTrue(config.validate())

    @patch.dict(os.environ, {
        "MSG_DECODER_MODULE": " my_decoder ",
        "MSG_DECODER_FACTORY": "openMsg",
        "ATTACHMENT_OUTPUT_DIR": "/tmp/out",
        "OVERWRITE_ATTACHMENTS": "YES",
        "COLOR_OUTPUT": "off",
        "LOG_LEVEL": "debug",
        "LOG_FILE": "logs/reader.log",
        "LOG_FORMAT": "JSON",
    }, clear=True)
    def test_environment_overrides(self):
        config = Config(MISSING_ENV_FILE)

        self.assertEqual(config.decoder.module_name, "my_decoder")
        self.assertEqual(config.decoder.message_factory, "openMsg")
        self.assertEqual(config.output.attachment_dir, "/tmp/out")
        self.assertTrue(config.output.overwrite_attachments)
        self.assertFalse(config.output.color)
        self.assertEqual(config.system.log_file, "logs/reader.log")
        self.assertEqual(config.system.log_format, "json")
        self.assertTrue(config.validate())


class TestEnvFile(unittest.TestCase):

    def test_values_loaded_from_file(self):
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            env_path = os.path.join(tmp, ".env")
            with open(env_path, "w") as f:
                f.write("MSG_DECODER_MODULE=file_decoder\nLOG_LEVEL=WARNING\n")

            with patch.dict(os.environ, {}, clear=True):
                config = Config(env_path)

        self.assertEqual(config.decoder.module_name, "file_decoder")
        self.assertEqual(config.system.log_level, "WARNING")

    def test_process_environment_wins_over_file(self):
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            env_path = os.path.join(tmp, ".env")
            with open(env_path, "w") as f:
                f.write("LOG_LEVEL=WARNING\n")

            with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}, clear=True):
                config = Config(env_path)

        self.assertEqual(config.system.log_level, "ERROR")


class TestConfigValidation(unittest.TestCase):

    def setUp(self):
        with patch.dict(os.environ, {}, clear=True):
            self.config = Config(MISSING_ENV_FILE)

    def test_empty_module_name(self):
        self.config.decoder.module_name = ""
        with self.assertRaises(ConfigurationError):
            self.config.validate()

    def test_empty_factory(self):
        self.config.decoder.message_factory = ""
        with self.assertRaises(ConfigurationError):
            self.config.validate()

    def test_unknown_log_format(self):
        self.config.system.log_format = "xml"
        with self.assertRaises(ConfigurationError) as cm:
            self.config.validate()
        self.assertIn("LOG_FORMAT", str(cm.exception))

    def test_unknown_log_level(self):
        self.config.system.log_level = "LOUD"
        with self.assertRaises(ConfigurationError):
            self.config.validate()

    def test_configuration_error_is_value_error(self):
        self.assertTrue(issubclass(ConfigurationError, ValueError))


if __name__ == '__main__':
    unittest.main()
