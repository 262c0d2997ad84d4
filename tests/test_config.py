"""
Unit tests for artifactindex.config module
"""
import json
import logging
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from artifactindex.config import (
    apply_env_overrides,
    configure_logging,
    get_config_path,
    get_default_config,
    load_config,
    merge_configs,
    save_config,
    validate_config,
)


class TestConfigManagement(unittest.TestCase):
    """Test configuration management functionality"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'HOME': self.temp_dir}, clear=False)
        self.env.start()
        for key in list(os.environ):
            if key.startswith('ARTIFACTINDEX_') or key == 'GITHUB_TOKEN':
                del os.environ[key]

    def tearDown(self):
        """Clean up test environment"""
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()

        for section in ('database', 'github', 'publishing', 'claims', 'non_standard',
                        'licenses', 'conversion', 'logging'):
            self.assertIn(section, config)

        self.assertTrue(config['database']['path'].endswith('catalog.db'))
        self.assertEqual(config['publishing']['admins'], [])
        self.assertEqual(config['conversion']['workers'], 1)
        self.assertIn('level', config['logging'])
        self.assertIn('format', config['logging'])

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        config = load_config()
        self.assertEqual(config, get_default_config())

    def test_default_config_path(self):
        self.assertEqual(get_config_path(), Path(self.temp_dir) / '.artifactindex' / 'config.json')

    def test_config_path_env_override(self):
        path = Path(self.temp_dir) / 'custom.yaml'
        path.write_text('claims: {}\n')
        os.environ['ARTIFACTINDEX_CONFIG'] = str(path)
        self.assertEqual(get_config_path(), path)

    def test_load_json_config(self):
        path = Path(self.temp_dir) / 'config.json'
        path.write_text(json.dumps({
            'claims': {'org.typelevel': 'typelevel/cats'},
            'github': {'rate_limit': {'max_retries': 7}},
        }))

        config = load_config(path)

        self.assertEqual(config['claims'], {'org.typelevel': 'typelevel/cats'})
        self.assertEqual(config['github']['rate_limit']['max_retries'], 7)
        # Defaults under the same section survive the merge
        self.assertEqual(config['github']['rate_limit']['max_delay_seconds'], 60)

    def test_load_yaml_config(self):
        path = Path(self.temp_dir) / 'config.yaml'
        with open(path, 'w') as f:
            yaml.safe_dump({'publishing': {'admins': ['root']}}, f)

        self.assertEqual(load_config(path)['publishing']['admins'], ['root'])

    def test_load_toml_config(self):
        path = Path(self.temp_dir) / 'config.toml'
        path.write_text('non_standard = ["org.scala-lang:scala-library"]\n\n[conversion]\nworkers = 4\n')

        config = load_config(path)

        self.assertEqual(config['non_standard'], ['org.scala-lang:scala-library'])
        self.assertEqual(config['conversion']['workers'], 4)

    def test_invalid_config_falls_back_to_defaults(self):
        path = Path(self.temp_dir) / 'config.json'
        path.write_text('{not json')

        with self.assertLogs('artifactindex', level='ERROR'):
            config = load_config(path)

        self.assertEqual(config, get_default_config())

    def test_save_and_reload(self):
        path = Path(self.temp_dir) / 'nested' / 'config.json'
        config = get_default_config()
        config['claims'] = {'org.example': 'org/repo'}

        written = save_config(config, path)

        self.assertEqual(written, path)
        self.assertEqual(load_config(path)['claims'], {'org.example': 'org/repo'})

    def test_save_toml_writes_json(self):
        path = Path(self.temp_dir) / 'config.toml'
        written = save_config({'claims': {}}, path)
        self.assertEqual(written.suffix, '.json')
        self.assertFalse(path.exists())


class TestMergeConfigs(unittest.TestCase):

    def test_nested_merge(self):
        base = {'a': {'x': 1, 'y': 2}, 'b': 1}
        merged = merge_configs(base, {'a': {'y': 3}, 'c': 4})
        self.assertEqual(merged, {'a': {'x': 1, 'y': 3}, 'b': 1, 'c': 4})
        self.assertEqual(base['a']['y'], 2)

    def test_non_dict_replaces(self):
        self.assertEqual(merge_configs({'a': {'x': 1}}, {'a': []}), {'a': []})


class TestEnvOverrides(unittest.TestCase):

    def test_nested_key(self):
        with patch.dict(os.environ, {'ARTIFACTINDEX_CONVERSION_WORKERS': '8'}):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config['conversion']['workers'], 8)

    def test_underscored_key(self):
        env = {'ARTIFACTINDEX_GITHUB_RATE_LIMIT_MAX_DELAY_SECONDS': '5'}
        with patch.dict(os.environ, env):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config['github']['rate_limit']['max_delay_seconds'], 5)

    def test_bool_values(self):
        config = {'feature': {'enabled': False}}
        with patch.dict(os.environ, {'ARTIFACTINDEX_FEATURE_ENABLED': 'yes'}):
            self.assertTrue(apply_env_overrides(config)['feature']['enabled'])

    def test_unknown_key_ignored(self):
        with patch.dict(os.environ, {'ARTIFACTINDEX_NOPE_VALUE': 'x'}):
            config = apply_env_overrides(get_default_config())
        self.assertNotIn('nope', config)

    def test_github_token_fallback(self):
        with patch.dict(os.environ, {'GITHUB_TOKEN': 'gh'}):
            os.environ.pop('ARTIFACTINDEX_GITHUB_TOKEN', None)
            self.assertEqual(apply_env_overrides(get_default_config())['github']['token'], 'gh')

    def test_own_token_wins(self):
        env = {'GITHUB_TOKEN': 'gh', 'ARTIFACTINDEX_GITHUB_TOKEN': 'own'}
        with patch.dict(os.environ, env):
            self.assertEqual(apply_env_overrides(get_default_config())['github']['token'], 'own')


class TestValidateConfig(unittest.TestCase):

    def test_defaults_are_valid(self):
        self.assertEqual(validate_config(get_default_config()), [])

    def test_bad_workers(self):
        for workers in (0, -1, "4", True):
            config = merge_configs(get_default_config(), {'conversion': {'workers': workers}})
            self.assertEqual(len(validate_config(config)), 1, workers)

    def test_bad_sections(self):
        config = merge_configs(get_default_config(), {
            'claims': ['org/repo'],
            'non_standard': 'org.scala-lang:scala-library',
            'publishing': {'admins': 'root'},
        })
        self.assertEqual(len(validate_config(config)), 3)


class TestConfigureLogging(unittest.TestCase):

    def tearDown(self):
        logger = logging.getLogger('artifactindex')
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    def test_level_from_config(self):
        logger = configure_logging({'logging': {'level': 'warning'}})
        self.assertEqual(logger.level, logging.WARNING)
        self.assertEqual(len(logger.handlers), 1)
        self.assertFalse(logger.propagate)

    def test_verbose_and_quiet(self):
        self.assertEqual(configure_logging(get_default_config(), verbose=True).level, logging.DEBUG)
        self.assertEqual(configure_logging(get_default_config(), quiet=True).level, logging.ERROR)

    def test_unknown_level_defaults_to_info(self):
        self.assertEqual(configure_logging({'logging': {'level': 'loud'}}).level, logging.INFO)

    def test_repeated_calls_keep_one_handler(self):
        configure_logging()
        logger = configure_logging()
        self.assertEqual(len(logger.handlers), 1)


if __name__ == '__main__':
    unittest.main()
