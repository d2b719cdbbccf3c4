"""Centralized logging configuration management."""

import os
import yaml
from pathlib import Path
from typing import Dict, Optional


class LoggingConfig:
    """Centralized logging configuration for all components."""

    _instance: Optional['LoggingConfig'] = None

    def __init__(self, config_path: Optional[str] = None):
        """Initialize logging configuration.

        Args:
            config_path: Path to logging-config.yaml (default: searched upwards
                from this package, then the working directory)
        """
        if config_path is None:
            config_path = os.getenv("LOGGING_CONFIG")
        if config_path is None:
            candidates = [Path.cwd() / "logging-config.yaml"]
            current = Path(__file__).parent
            for _ in range(4):
                candidates.append(current / "logging-config.yaml")
                current = current.parent
            for config_file in candidates:
                if config_file.exists():
                    config_path = str(config_file)
                    break

        self._config: Dict = {
            'default_level': 'INFO',
            'components': {},
            'frameworks': {},
        }
        if config_path and Path(config_path).exists():
            with open(config_path) as f:
                self._config.update(yaml.safe_load(f) or {})

    @classmethod
    def get_instance(cls) -> 'LoggingConfig':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_level(self, component: str = 'default') -> str:
        """Get log level for a component.

        Order: LOG_LEVEL_<COMPONENT>, the component's YAML entry,
        LOG_LEVEL, then the YAML default_level.
        """
        env_var = f"LOG_LEVEL_{component.upper().replace('-', '_')}"
        if env_level := os.getenv(env_var):
            return env_level.upper()

        comp_cfg = self._config.get('components', {}).get(component)
        if isinstance(comp_cfg, dict) and 'level' in comp_cfg:
            return comp_cfg['level'].upper()
        elif isinstance(comp_cfg, str):
            return comp_cfg.upper()

        # Generic LOG_LEVEL for components without their own setting
        if env_level := os.getenv('LOG_LEVEL'):
            return env_level.upper()

        return self._config.get('default_level', 'INFO').upper()

    def get_json_format(self, component: str = 'default') -> bool:
        """Get JSON format flag for a component (same order as get_level)."""
        env_var = f"LOG_JSON_{component.upper().replace('-', '_')}"
        if env_json := os.getenv(env_var):
            return env_json.lower() in ('true', '1', 'yes')

        comp_cfg = self._config.get('components', {}).get(component)
        if isinstance(comp_cfg, dict) and 'json_format' in comp_cfg:
            return bool(comp_cfg['json_format'])

        if env_json := os.getenv('LOG_JSON'):
            return env_json.lower() in ('true', '1', 'yes')

        return False

    def framework_levels(self) -> Dict[str, str]:
        """All configured framework levels."""
        return {
            name: level.upper()
            for name, level in self._config.get('frameworks', {}).items()
        }


def get_logging_config() -> LoggingConfig:
    """Get singleton logging configuration instance."""
    return LoggingConfig.get_instance()
