import logging
import os
import tempfile
import unittest
from unittest.mock import patch

from kubernetes.config import ConfigException

from volume_stats.config import DEFAULT_CONFIG, init_kubernetes_client, load_config, setup_logging
from volume_stats.errors import ConfigError


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "config.yaml")

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, text):
        with open(self.path, "w") as f:
            f.write(text)

    def test_missing_file_gives_defaults(self):
        config_data = load_config(os.path.join(self.tmpdir.name, "absent.yaml"))
        self.assertEqual(config_data, DEFAULT_CONFIG)
        self.assertIsNot(config_data, DEFAULT_CONFIG)

    def test_merges_over_defaults(self):
        self.write("volume_stats:\n  namespace: brokers\n  max_workers: 8\nlogging:\n  level: DEBUG\n")
        config_data = load_config(self.path)
        self.assertEqual(config_data['volume_stats']['namespace'], 'brokers')
        self.assertEqual(config_data['volume_stats']['max_workers'], 8)
        self.assertEqual(config_data['volume_stats']['broker_id_label'], 'kafka_broker_id')
        self.assertEqual(config_data['logging']['level'], 'DEBUG')
        self.assertEqual(config_data['kubernetes']['request_timeout'], 30)

    def test_empty_file(self):
        self.write("")
        self.assertEqual(load_config(self.path), DEFAULT_CONFIG)

    def test_invalid_yaml(self):
        self.write("volume_stats: [unclosed\n")
        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_not_a_mapping(self):
        self.write("- just\n- a list\n")
        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_empty_section_keeps_defaults(self):
        self.write("volume_stats:\n  # namespace: brokers\nlogging:\n")
        config_data = load_config(self.path)
        self.assertEqual(config_data['volume_stats'], DEFAULT_CONFIG['volume_stats'])
        self.assertEqual(config_data['logging'], DEFAULT_CONFIG['logging'])

    def test_section_not_a_mapping(self):
        self.write("volume_stats: kafka\n")
        with self.assertRaises(ConfigError) as ctx:
            load_config(self.path)
        self.assertIn("volume_stats", str(ctx.exception))


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        logging.basicConfig(handlers=[logging.NullHandler()], level=logging.WARNING, force=True)

    def test_file_handler(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, "volume_stats.log")
            setup_logging({'logging': {'file': log_file, 'stdout': False, 'level': 'WARNING'}})
            root = logging.getLogger()
            self.assertEqual(root.level, logging.WARNING)
            self.assertTrue(any(isinstance(h, logging.FileHandler) for h in root.handlers))
            for handler in root.handlers:
                handler.close()

    def test_verbose_overrides_level(self):
        setup_logging({'logging': {'file': None, 'stdout': True, 'level': 'INFO'}}, verbose=True)
        self.assertEqual(logging.getLogger().level, logging.DEBUG)


class TestInitKubernetesClient(unittest.TestCase):
    @patch('volume_stats.config.client.CoreV1Api')
    @patch('volume_stats.config.config.load_incluster_config')
    @patch('volume_stats.config.config.load_kube_config')
    def test_in_cluster_when_service_host_set(self, mock_kube, mock_incluster, mock_api):
        with patch.dict(os.environ, {'KUBERNETES_SERVICE_HOST': '10.0.0.1'}):
            api = init_kubernetes_client({'kubernetes': {'in_cluster': 'auto'}})
        mock_incluster.assert_called_once()
        mock_kube.assert_not_called()
        self.assertIs(api, mock_api.return_value)

    @patch('volume_stats.config.client.CoreV1Api')
    @patch('volume_stats.config.config.load_incluster_config')
    @patch('volume_stats.config.config.load_kube_config')
    def test_kubeconfig_outside_cluster(self, mock_kube, mock_incluster, mock_api):
        with patch.dict(os.environ, {}, clear=True):
            init_kubernetes_client({'kubernetes': {'in_cluster': 'auto', 'kubeconfig': '/tmp/kc', 'context': 'prod'}})
        mock_incluster.assert_not_called()
        mock_kube.assert_called_once_with(config_file='/tmp/kc', context='prod')

    @patch('volume_stats.config.config.load_kube_config', side_effect=ConfigException("no config"))
    def test_failure_raises_config_error(self, mock_kube):
        with self.assertRaises(ConfigError):
            init_kubernetes_client({'kubernetes': {'in_cluster': False}})


if __name__ == '__main__':
    unittest.main()
