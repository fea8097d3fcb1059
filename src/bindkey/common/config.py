"""Load and parse configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from io import BufferedReader, StringIO
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field

from bindkey.common.config_misc import KeyFileEntry, KeyNameString, LoaderPolicy
from bindkey.common.data import FrozenBaseModel
from bindkey.common.integrity import checksum_bytes2str

__author__ = "ft"

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Base exception for errors in the configuration."""


class BindKeyConfig(FrozenBaseModel):
    """
    Configuration object.

    Holds configuration loaded from bindkey.yaml.
    """

    """
    Private key loader policy.

    Example:
    -------
        loader:
            crypto_provider: cryptography
            max_file_size: 65536
            require_algorithm_field: false
            accepted_key_formats:
              - v1.2
              - v1.3
            verify_key_tag: true
    """
    loader: LoaderPolicy = LoaderPolicy()

    """
    Named private key files.

    Example:
    -------
        keys:
            example_zsk:
                filename: /etc/bind/keys/Kexample.com.+008+12345.private
                description: Example ZSK
    """
    keys: Mapping[KeyNameString, KeyFileEntry] = Field(default_factory=dict)

    def get_key_filename(self, name: str) -> Path:
        """Return the filename of a named key from the 'keys' section of config."""
        if name not in self.keys:
            raise ConfigurationError(f"Key {name!r} not found in configuration")
        return self.keys[name].filename

    def update(self, data: Mapping[str, Any]) -> BindKeyConfig:
        """Update configuration on the fly. Usable in tests."""
        logger.warning(f"Updating configuration (sections {list(data.keys())})")
        _config = self.model_dump()
        _config.update(data)
        return self.from_dict(_config)

    @classmethod
    def from_yaml(
        cls: type[BindKeyConfig], stream: BufferedReader | StringIO
    ) -> BindKeyConfig:
        """Load configuration from a YAML stream."""
        config = yaml.safe_load(stream)
        if config is None:
            # empty file
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration must be a YAML mapping")
        return cls.from_dict(config)

    @classmethod
    def from_dict(cls: type[BindKeyConfig], config: Mapping[str, Any]) -> BindKeyConfig:
        return cls.model_validate(dict(config))


def get_config(filename: str | Path | None) -> BindKeyConfig:
    """Top-level function to load configuration, or return a default BindKeyConfig instance."""
    if not filename:
        # Avoid having Optional[BindKeyConfig] everywhere by always having a config, even if it is empty
        logger.debug("No configuration filename provided, using default configuration.")
        return BindKeyConfig()
    with open(filename, "rb") as fd:
        config_bytes = fd.read()
        logger.info(
            "Loaded configuration from file %s %s",
            filename,
            checksum_bytes2str(config_bytes),
        )
        fd.seek(0)
        return BindKeyConfig.from_yaml(fd)
