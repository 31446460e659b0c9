"""Configuration parser for the interpreter.

Parses and validates cmdpp.yaml. Every key is optional; a missing file
section falls back to the defaults defined on the models.
"""

from __future__ import annotations

import os
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator


def _default_executable_extensions() -> List[str]:
    if os.name == "nt":
        return [".exe", ".com"]
    return [".exe"]


def _normalize_extension(value: str) -> str:
    ext = str(value).strip().lower()
    if not ext:
        raise ValueError("Extension must not be empty")
    if not ext.startswith('.'):
        ext = f".{ext}"
    if len(ext) == 1 or any(c.isspace() for c in ext):
        raise ValueError(f"Invalid extension '{value}'")
    return ext


class InterpreterConfig(BaseModel):
    """Interpreter loop and resolution settings."""
    prompt_suffix: str = "> "
    exit_command: str = "exit"
    script_extension: str = ".shl"
    executable_extensions: List[str] = Field(default_factory=_default_executable_extensions)
    timing_enabled: bool = False
    max_depth: int = Field(default=64, ge=1)
    history_file: Optional[Path] = None
    history_length: int = Field(default=1000, ge=0)

    @field_validator('script_extension')
    @classmethod
    def normalize_script_extension(cls, v: str) -> str:
        """Lowercase and ensure a leading dot (e.g., SHL -> .shl)."""
        return _normalize_extension(v)

    @field_validator('executable_extensions', mode='before')
    @classmethod
    def normalize_executable_extensions(cls, v: Any) -> List[str]:
        """Accept a single string or a list of extensions."""
        if isinstance(v, str):
            v = [v]
        return [_normalize_extension(ext) for ext in v]

    @field_validator('exit_command')
    @classmethod
    def validate_exit_command(cls, v: str) -> str:
        """Ensure the exit command is a single word."""
        v = v.strip()
        if not v or len(v.split()) != 1:
            raise ValueError(f"exit_command must be a single word, got '{v}'")
        return v

    @field_validator('history_file', mode='before')
    @classmethod
    def expand_history_file(cls, v: Any) -> Any:
        """Expand ~ in the history file path."""
        if v is None or v == "":
            return None
        return Path(os.path.expanduser(str(v)))

    @model_validator(mode='after')
    def check_extensions_disjoint(self) -> 'InterpreterConfig':
        """A script extension cannot also be an executable extension."""
        if self.script_extension in self.executable_extensions:
            raise ValueError(
                f"Extension '{self.script_extension}' cannot be both a script "
                f"and an executable extension"
            )
        return self


class BannerConfig(BaseModel):
    """Start-up banner settings."""
    enabled: bool = True
    file: Optional[Path] = None
    delay_ms: int = Field(default=25, ge=0)

    @field_validator('file', mode='before')
    @classmethod
    def expand_file(cls, v: Any) -> Any:
        """Expand ~ in the banner path."""
        if v is None or v == "":
            return None
        return Path(os.path.expanduser(str(v)))


class ShellConfig(BaseModel):
    """Top-level configuration."""
    shell: InterpreterConfig = Field(default_factory=InterpreterConfig)
    banner: BannerConfig = Field(default_factory=BannerConfig)


class ConfigParser:
    """Parse and validate interpreter configuration."""

    def __init__(self, config_path: Union[str, Path]):
        """Initialize parser with config file path.

        Args:
            config_path: Path to cmdpp.yaml file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self.config: Optional[ShellConfig] = None
        self._raw_config: Optional[Dict[str, Any]] = None

    def parse(self) -> ShellConfig:
        """Parse and validate configuration.

        Returns:
            Validated configuration object

        Raises:
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If validation fails
        """
        with open(self.config_path) as f:
            self._raw_config = yaml.safe_load(f) or {}

        if not isinstance(self._raw_config, dict):
            raise ValueError(
                f"Configuration root must be a mapping, got {type(self._raw_config).__name__}"
            )

        self.config = ShellConfig(**self._raw_config)
        return self.config

    def get_interpreter_config(self) -> InterpreterConfig:
        """Get interpreter settings.

        Returns:
            Interpreter configuration object
        """
        if not self.config:
            raise ValueError("Configuration not parsed. Call parse() first.")
        return self.config.shell

    def get_banner_config(self) -> BannerConfig:
        """Get banner settings.

        Returns:
            Banner configuration object
        """
        if not self.config:
            raise ValueError("Configuration not parsed. Call parse() first.")
        return self.config.banner


def load_config(config_path: Union[str, Path]) -> ConfigParser:
    """Load and parse configuration file.

    Args:
        config_path: Path to cmdpp.yaml

    Returns:
        Parsed configuration

    Example:
        >>> parser = load_config("cmdpp.yaml")
        >>> parser.get_interpreter_config().script_extension
        '.shl'
    """
    parser = ConfigParser(config_path)
    parser.parse()
    return parser
