"""
Configuration, logging and Kubernetes client setup
"""

import copy
import logging
import os
from typing import Dict, Any, Optional

import yaml
from kubernetes import client, config
from rich.logging import RichHandler

from volume_stats.errors import ConfigError

DEFAULT_CONFIG_PATH = 'config.yaml'

DEFAULT_CONFIG: Dict[str, Any] = {
    'kubernetes': {
        'in_cluster': 'auto',
        'kubeconfig': None,
        'context': None,
        'request_timeout': 30,
    },
    'volume_stats': {
        'namespace': 'kafka',
        'label_selector': '',
        'broker_id_label': 'kafka_broker_id',
        'max_workers': 1,
        'reuse_node_snapshots': False,
    },
    'logging': {
        'file': None,
        'stdout': True,
        'level': 'INFO',
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any], section: str = '') -> Dict[str, Any]:
    """Merge override into a copy of base; an empty section keeps its defaults"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        name = f"{section}.{key}" if section else str(key)
        if isinstance(merged.get(key), dict):
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ConfigError(f"Configuration section {name} must be a mapping, got {value!r}")
            merged[key] = _merge(merged[key], value, name)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file, on top of the built-in defaults

    A missing file yields the defaults.

    Raises:
        ConfigError: the file cannot be read, or it or one of its sections is not a YAML mapping
    """
    path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        logging.debug(f"Configuration file {path} not found, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load configuration from {path}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return _merge(DEFAULT_CONFIG, loaded)


def setup_logging(config_data: Dict[str, Any], verbose: bool = False):
    """Configure logging based on configuration"""
    log_config = config_data.get('logging', {})
    log_file = log_config.get('file')
    log_to_stdout = log_config.get('stdout', True)

    handlers = []
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        handlers.append(file_handler)
    if log_to_stdout:
        handlers.append(RichHandler(show_path=False, rich_tracebacks=True))
    if not handlers:
        handlers.append(logging.NullHandler())

    level = logging.DEBUG if verbose else getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(message)s',
        datefmt='[%X]',
        handlers=handlers,
        force=True,
    )


def init_kubernetes_client(config_data: Dict[str, Any]) -> client.CoreV1Api:
    """
    Initialize Kubernetes client

    In-cluster configuration is used when running inside a pod, the
    kubeconfig file otherwise.

    Raises:
        ConfigError: no usable Kubernetes configuration was found
    """
    kube_config = config_data.get('kubernetes', {})
    in_cluster = kube_config.get('in_cluster', 'auto')
    if in_cluster == 'auto':
        in_cluster = 'KUBERNETES_SERVICE_HOST' in os.environ

    try:
        if in_cluster:
            config.load_incluster_config()
            logging.info("Using in-cluster Kubernetes configuration")
        else:
            config.load_kube_config(
                config_file=kube_config.get('kubeconfig'),
                context=kube_config.get('context'),
            )
            logging.info("Using kubeconfig file for Kubernetes configuration")
    except (config.ConfigException, OSError) as e:
        raise ConfigError(f"Failed to initialize Kubernetes client: {e}") from e

    return client.CoreV1Api()
