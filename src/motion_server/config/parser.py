"""
YAML configuration parser for motion-server.

This module loads the optional YAML configuration file, merges command-line
overrides on top of it and validates the result into an immutable
ServerConfig. Problems are reported as ConfigurationError with a message
suitable for printing to the user.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass
from pydantic import ValidationError

from ..models.config import (
    ServerConfig,
    DEFAULT_AUDIO_EXTENSIONS,
    DEFAULT_IMAGE_EXTENSIONS,
    DEFAULT_SUBTITLE_EXTENSIONS,
    DEFAULT_COVER_PATTERNS,
)


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Result of configuration parsing operation.

    Attributes:
        config: The parsed and validated configuration
        warnings: List of non-fatal warnings
        config_path: Path to the configuration file used
        is_default: Whether no configuration file was found
    """
    config: ServerConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when configuration parsing or validation fails."""
    pass


def merge_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge override values into a configuration dictionary.

    Nested dictionaries are merged key by key; ``None`` overrides are ignored
    so that unset command-line flags keep the file value.

    Args:
        base: Configuration loaded from file or defaults
        overrides: Values that take precedence

    Returns:
        New merged dictionary
    """
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_overrides(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigParser:
    """
    YAML configuration parser with validation and error handling.

    Searches the usual locations for a configuration file when none is given,
    applies overrides and builds a ServerConfig.
    """

    DEFAULT_CONFIG_NAMES = [
        '.motionserver.yaml',
        '.motionserver.yml',
        'motionserver.yaml',
        'motionserver.yml'
    ]

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the configuration parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None,
                    overrides: Optional[Dict[str, Any]] = None,
                    check_strict: bool = True) -> ConfigParseResult:
        """
        Load and parse configuration from file, defaults and overrides.

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            overrides: Values that take precedence over the file (e.g. CLI flags)
            check_strict: Apply strict mode here; callers that still complete the
                configuration pass False and call enforce_strict() afterwards

        Returns:
            ConfigParseResult containing parsed configuration and metadata

        Raises:
            ConfigurationError: If configuration is invalid or file cannot be read
        """
        if config_path:
            config_path = Path(config_path).expanduser()
            if not config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")

            config_data = self._load_yaml_file(config_path)
            is_default = False
        else:
            config_path, config_data = self._find_and_load_config()
            is_default = config_data is None
            if is_default:
                config_data = {}

        config_data = merge_overrides(config_data, overrides or {})
        server_config = self._build_config(config_data)

        warnings = server_config.validate_configuration()
        warnings.extend(self._get_parser_warnings(server_config, is_default))

        if check_strict:
            self.enforce_strict(warnings)

        self.logger.info(f"Configuration loaded from {config_path or 'defaults'}")

        return ConfigParseResult(
            config=server_config,
            warnings=warnings,
            config_path=config_path,
            is_default=is_default
        )

    def enforce_strict(self, warnings: List[str]) -> None:
        """
        Raise if strict mode is on and there are warnings.

        Raises:
            ConfigurationError: In strict mode, when warnings is not empty
        """
        if self.strict_mode and warnings:
            raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

    def _find_and_load_config(self) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load configuration file from default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        search_paths = [
            Path.cwd(),
            Path.home(),
            Path.home() / '.config' / 'motion-server',
        ]

        for search_path in search_paths:
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.is_file():
                    try:
                        config_data = self._load_yaml_file(config_file)
                    except ConfigurationError as e:
                        self.logger.warning(f"Failed to load {config_file}: {e}")
                        continue
                    self.logger.info(f"Found configuration file: {config_file}")
                    return config_file, config_data

        self.logger.debug("No configuration file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

        if data is None:
            self.logger.warning(f"Configuration file is empty: {file_path}")
            return {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

        return data

    def _build_config(self, config_data: Dict[str, Any]) -> ServerConfig:
        try:
            return ServerConfig.from_dict(config_data)
        except ValidationError as e:
            details = '; '.join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Configuration validation failed: {details}") from e

    def _get_parser_warnings(self, config: ServerConfig, is_default: bool) -> List[str]:
        warnings = []

        if is_default:
            warnings.append("No configuration file found, using default settings")

        if config.allow_external and config.music_path is None:
            warnings.append("External connections are allowed without a music folder - the whole filesystem is browsable")

        if config.port < 1024:
            warnings.append(f"Port {config.port} is privileged and may require elevated rights")

        return warnings

    def save_config(self, config: ServerConfig, output_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Configuration to save
            output_path: Path where to save the configuration

        Raises:
            ConfigurationError: If file cannot be written
        """
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self._generate_yaml_with_comments(config.to_dict()))
        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

        self.logger.info(f"Configuration saved to {output_path}")

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        lines = [
            "# motion-server configuration",
            "# Command-line flags take precedence over the values below",
            "",
        ]

        sections = [
            ("music_path", "Folder exposed under /music (-m); leave empty to browse the whole filesystem"),
            ("backgrounds_path", "Folder with background images and videos (-b)"),
            ("public_path", "Folder holding the web client bundle"),
            ("port", "Listening port (-p)"),
            ("host", "Interface for local-only connections"),
            ("allow_external", "Accept connections from other machines (-e)"),
            ("launch_client", "Open the client in a browser after startup (disable with -s)"),
            ("media", "Media classification rules")
        ]

        for section_name, comment in sections:
            if section_name in config_dict:
                lines.append(f"# {comment}")
                section_yaml = yaml.safe_dump({section_name: config_dict[section_name]},
                                              default_flow_style=False,
                                              sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a configuration file without starting anything.

        Args:
            config_path: Path to configuration file

        Returns:
            List of validation errors (empty if valid)
        """
        config_path = Path(config_path)
        if not config_path.exists():
            return [f"Configuration file not found: {config_path}"]

        try:
            self._build_config(self._load_yaml_file(config_path))
        except ConfigurationError as e:
            return [str(e)]

        return []

    def get_config_template(self) -> str:
        """
        Get a template configuration file with all options and comments.

        Returns:
            YAML template as string
        """
        template_config = {
            'music_path': '~/Music',
            'backgrounds_path': None,
            'public_path': None,
            'port': 8000,
            'host': 'localhost',
            'allow_external': False,
            'launch_client': True,
            'media': {
                'audio_extensions': list(DEFAULT_AUDIO_EXTENSIONS),
                'image_extensions': list(DEFAULT_IMAGE_EXTENSIONS),
                'subtitle_extensions': list(DEFAULT_SUBTITLE_EXTENSIONS),
                'cover_patterns': list(DEFAULT_COVER_PATTERNS),
                'show_hidden': False
            }
        }

        return self._generate_yaml_with_comments(template_config)


def load_config(config_path: Optional[Union[str, Path]] = None,
                overrides: Optional[Dict[str, Any]] = None,
                strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path, overrides)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """Convenience function to validate a configuration file."""
    parser = ConfigParser()
    return parser.validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Create a template configuration file.

    Args:
        output_path: Where to save the template

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = ConfigParser()
    template_content = parser.get_config_template()

    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)
    except OSError as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
