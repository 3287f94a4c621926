"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    'debug': False,
    'post_processing': {
        'md_img_ref': True,
        'remove_quotation_blocks': True,
        'remove_consecutive_linebreaks': True,
        'remove_onenote_header': True
    },
    'export': {
        'resource_folder_name': 'resources',
        'absolute_attachment_ref': False,
        'progress_bars': True
    },
    'converter': {
        'pandoc_path': 'pandoc',
        'tmp_folder': '_tmp',
        'extra_args': []
    },
    'logging': {
        'level': None,
        'file': None
    }
}

BOOLEAN_FIELDS = [
    'debug',
    'post_processing.md_img_ref',
    'post_processing.remove_quotation_blocks',
    'post_processing.remove_consecutive_linebreaks',
    'post_processing.remove_onenote_header',
    'export.absolute_attachment_ref',
    'export.progress_bars'
]


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @staticmethod
    def defaults() -> Dict[str, Any]:
        """Return a fresh copy of the default configuration."""
        return copy.deepcopy(DEFAULT_CONFIG)

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Values from the file are merged over the defaults.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        # An empty file means "all defaults"
        if config_data is None:
            config_data = {}

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        config_data = cls._substitute_env_vars_recursive(config_data)

        return cls._deep_merge(cls.defaults(), config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for correct value types.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        for field in BOOLEAN_FIELDS:
            value = get_nested(config, field)
            if value is not None and not isinstance(value, bool):
                raise ValueError(f"{field} must be a boolean")

        folder_name = get_nested(config, 'export.resource_folder_name', 'resources')
        if not isinstance(folder_name, str) or not folder_name.strip():
            raise ValueError("export.resource_folder_name must be a non-empty string")

        pandoc_path = get_nested(config, 'converter.pandoc_path', 'pandoc')
        cls._validate_no_unsubstituted_env(pandoc_path, 'converter.pandoc_path')

        extra_args = get_nested(config, 'converter.extra_args', [])
        if extra_args is not None and not isinstance(extra_args, list):
            raise ValueError("converter.extra_args must be a list")

        level = get_nested(config, 'logging.level')
        if level is not None:
            allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
            if not isinstance(level, str) or level.upper() not in allowed_levels:
                raise ValueError(f"logging.level must be one of: {sorted(allowed_levels)}")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        for section in ('post_processing', 'export', 'converter', 'logging'):
            if section not in merged:
                merged[section] = {}

        if getattr(args, 'debug', False):
            merged['debug'] = True

        if getattr(args, 'absolute_refs', None) is not None:
            merged['export']['absolute_attachment_ref'] = args.absolute_refs

        if getattr(args, 'resource_folder_name', None):
            merged['export']['resource_folder_name'] = args.resource_folder_name

        if getattr(args, 'pandoc_path', None):
            merged['converter']['pandoc_path'] = args.pandoc_path

        # Pass toggles: only override when given explicitly on the command line
        toggles = {
            'md_img_ref': 'md_img_ref',
            'remove_quotation_blocks': 'remove_quotation_blocks',
            'remove_consecutive_linebreaks': 'remove_consecutive_linebreaks',
            'remove_header': 'remove_onenote_header'
        }
        for arg_name, config_key in toggles.items():
            value = getattr(args, arg_name, None)
            if value is not None:
                merged['post_processing'][config_key] = value

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        return merged

    @classmethod
    def _deep_merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override into base."""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key] = cls._deep_merge(base[key], value)
            else:
                base[key] = value
        return base

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @classmethod
    def _validate_no_unsubstituted_env(cls, value: Any, field: str) -> None:
        """Reject string values still holding a ${VAR} placeholder."""
        if isinstance(value, str) and '${' in value:
            match = cls.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "post_processing.md_img_ref")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'get_nested', 'DEFAULT_CONFIG']
