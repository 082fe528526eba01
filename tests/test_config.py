"""
Tests for the configuration module
"""
import unittest
import tempfile
import os
import yaml
from audiobook_splitter.config import Config
from audiobook_splitter.services.errors import ConfigError


class TestConfig(unittest.TestCase):
    """Tests for the Config class"""

    def _write_yaml(self, content):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            yaml.dump(content, f)
            return f.name

    def test_default_configuration(self):
        """Defaults are set correctly"""
        config = Config()

        self.assertIsNone(config.get('audio'))
        self.assertIsNone(config.get('subtitle'))
        self.assertEqual(config.get('output_dir'), './gen')
        self.assertEqual(config.get('start_offset'), 0)
        self.assertEqual(config.get('end_offset'), 0)
        self.assertEqual(config.get('chunk_size'), 25)
        self.assertEqual(config.get('extension'), 'mp3')

    def test_get_with_default_value(self):
        config = Config()

        self.assertEqual(config.get('output_dir'), './gen')
        self.assertEqual(config.get('non_existent_key', 'default_value'), 'default_value')
        self.assertIsNone(config.get('non_existent_key'))

    def test_load_from_valid_yaml_file(self):
        """Values from a YAML file override the defaults"""
        temp_file = self._write_yaml({
            'audio': 'book.mp3',
            'subtitle': 'book.srt',
            'start_offset': -200,
            'chunk_size': 10,
        })
        try:
            config = Config(config_file=temp_file)

            self.assertEqual(config.get('audio'), 'book.mp3')
            self.assertEqual(config.get('subtitle'), 'book.srt')
            self.assertEqual(config.get('start_offset'), -200)
            self.assertEqual(config.get('chunk_size'), 10)
            # untouched default
            self.assertEqual(config.get('workers'), None)
        finally:
            os.unlink(temp_file)

    def test_load_from_nonexistent_file(self):
        """A missing file falls back to the defaults"""
        config = Config(config_file='/path/to/nonexistent/file.yaml')
        self.assertEqual(config.get('output_dir'), './gen')

    def test_load_from_invalid_yaml_file(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("invalid: yaml: content: [")
            temp_file = f.name

        try:
            with self.assertRaises(ConfigError) as context:
                Config(config_file=temp_file)
            self.assertIn("Error loading configuration file", str(context.exception))
        finally:
            os.unlink(temp_file)

    def test_load_non_mapping_yaml_file(self):
        temp_file = self._write_yaml(['a', 'b'])
        try:
            with self.assertRaises(ConfigError):
                Config(config_file=temp_file)
        finally:
            os.unlink(temp_file)

    def test_load_from_empty_yaml_file(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            temp_file = f.name
        try:
            config = Config(config_file=temp_file)
            self.assertEqual(config.get('output_dir'), './gen')
        finally:
            os.unlink(temp_file)

    def test_configuration_precedence(self):
        """default < file < CLI"""
        temp_file = self._write_yaml({'output_dir': './file_output', 'start_offset': 100})
        try:
            config = Config(config_file=temp_file)
            self.assertEqual(config.get('output_dir'), './file_output')

            config.update_from_args({'start_offset': -300, 'prefix': 'book'})

            self.assertEqual(config.get('start_offset'), -300)
            self.assertEqual(config.get('prefix'), 'book')
            self.assertEqual(config.get('output_dir'), './file_output')
        finally:
            os.unlink(temp_file)

    def test_validate_accepts_defaults(self):
        Config().validate()

    def test_validate_rejects_bad_values(self):
        for key, value in [
            ('start_offset', 1.5),
            ('end_offset', 'x'),
            ('start_offset', True),
            ('chunk_size', 0),
            ('workers', 0),
            ('workers', True),
            ('tool_timeout', True),
            ('tool_timeout', -1),
        ]:
            config = Config()
            config.update_from_args({key: value})
            with self.assertRaises(ConfigError, msg=key):
                config.validate()

    def test_values_are_read_through_get_only(self):
        config = Config()
        self.assertFalse(hasattr(config, 'get_all'))
        self.assertEqual(config.get('missing', 'fallback'), 'fallback')


if __name__ == "__main__":
    unittest.main()
