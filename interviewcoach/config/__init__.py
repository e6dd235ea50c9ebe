"""Simple YAML configuration loader for Interview Coach."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "interviewcoach.yaml"
API_KEY_ENV_VAR = "OPENAI_API_KEY"

DEFAULTS: Dict[str, Any] = {
    "openai": {
        "model": "chatgpt-4o-latest",
        "base_url": "https://api.openai.com/v1/chat/completions",
        "request_timeout_seconds": None,
    },
    "interview": {
        "topic": "JavaScript",
    },
    "speech": {
        "language": "en-US",
        "sample_rate": 16000,
        "chunk_size": 1024,
        "channels": 1,
        "silence_threshold": 0.02,
        "end_silence_seconds": 1.5,
        "no_speech_timeout_seconds": 8.0,
        "max_utterance_seconds": 55.0,
        "recognize_timeout_seconds": 30.0,
    },
    "google_cloud": {
        "use_enhanced_model": True,
        "enable_automatic_punctuation": True,
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/interviewcoach.log",
        "console_output": False,
    },
    "ui": {
        "refresh_interval_seconds": 0.2,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict):
            # An empty section ("logging:" with nothing under it) keeps the defaults
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ValueError(f"Configuration section '{key}' must be a mapping, got {type(value).__name__}")
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class InterviewCoachConfig:
    """Interview Coach configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses interviewcoach.yaml
                        from the current directory when present, otherwise the
                        built-in defaults.
        """
        if config_path:
            self.config_file: Optional[Path] = Path(config_path)
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
        else:
            candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
            self.config_file = candidate if candidate.exists() else None

        if self.config_file:
            logger.info(f"Loading configuration from: {self.config_file}")
            self.config = self._load_config()
        else:
            logger.info("No configuration file found, using defaults")
            self.config = copy.deepcopy(DEFAULTS)

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        config = _merge(DEFAULTS, loaded)
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        creds_path = config.get('google_cloud', {}).get('credentials_path')
        if creds_path and not os.path.isabs(creds_path):
            config['google_cloud']['credentials_path'] = str(config_dir / creds_path)

        log_path = config.get('logging', {}).get('file_path')
        if log_path and not os.path.isabs(log_path):
            config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'speech.language').

        Args:
            key_path: Dot-separated key path (e.g., 'openai.model')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'interview.topic')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_api_key(self) -> str:
        """Get the chat-completion API key - CRASHES if not found.

        The OPENAI_API_KEY environment variable wins over openai.api_key.
        """
        api_key = os.environ.get(API_KEY_ENV_VAR) or self.get('openai.api_key')
        if not api_key:
            raise ValueError(f"API key not configured: set {API_KEY_ENV_VAR} or openai.api_key")
        return api_key

    def get_google_credentials_path(self) -> Optional[str]:
        """Get Google credentials path, or None to use application default credentials."""
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            return None

        creds_file = Path(creds_path)
        if not creds_file.exists():
            raise FileNotFoundError(f"Google credentials file not found: {creds_path}")

        return str(creds_file.absolute())
