# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Custom exceptions for the configuration system.

We keep these separate so that the CLI can catch config-specific failures
without importing the pipeline.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when a toolchain file cannot be read from disk or parsed as YAML."""


class ConfigValidationError(ConfigError):
    """
    Raised when configuration parses fine but fails schema validation.
    This covers missing required fields, empty strings, type mismatches and
    unknown keys.
    """
