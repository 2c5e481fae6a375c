"""
Configuration dataclasses for the domain intelligence package.

Settings are resolved in three layers: built-in defaults, an optional JSON
configuration file, and environment variables (a local ``.env`` file is
loaded first through python-dotenv).
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .audit_logger import OUTPUT_FORMATS
from .enums import LogLevel
from .exceptions import ConfigError


LOG_LEVELS = tuple(level.value for level in LogLevel)

ENV_PREFIX = "DOMAIN_INTEL_"

DEFAULT_CONFIG_PATH = Path.home() / ".domain_intel" / "config.json"


@dataclass
class WhoisConfig:
    """WHOIS client settings."""

    connect_timeout: float = 10.0
    operation_timeout: float = 15.0
    port: int = 43
    servers: dict[str, list[str]] = field(default_factory=dict)
    default_servers: Optional[list[str]] = None


@dataclass
class TLSConfig:
    """Certificate probe settings."""

    connect_timeout: float = 10.0
    default_port: int = 443


@dataclass
class ServiceConfig:
    """Request-level timeout envelopes applied by the lookup service."""

    whois_request_timeout: float = 30.0
    ssl_request_timeout: float = 20.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main configuration combining all sub-configurations."""

    whois: WhoisConfig = field(default_factory=WhoisConfig)
    tls: TLSConfig = field(default_factory=TLSConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(
            code="invalid_env",
            message=f"{ENV_PREFIX}{name} must be a number, got {raw!r}",
            details={"variable": ENV_PREFIX + name},
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(
            code="invalid_env",
            message=f"{ENV_PREFIX}{name} must be an integer, got {raw!r}",
            details={"variable": ENV_PREFIX + name},
        )


def _choice_env(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value not in choices:
        raise ConfigError(
            code="invalid_env",
            message=f"{ENV_PREFIX}{name} must be one of {', '.join(choices)}, got {raw!r}",
            details={"variable": ENV_PREFIX + name},
        )
    return value


def load_config_from_env(
    base: Optional[SystemConfig] = None,
    dotenv_path: Optional[Path] = None,
) -> SystemConfig:
    """
    Apply environment overrides on top of a configuration.

    Args:
        base: Configuration to start from (defaults to built-in defaults)
        dotenv_path: Optional explicit .env file; the working directory's
            .env is used when omitted

    Returns:
        New SystemConfig with environment values applied
    """
    load_dotenv(dotenv_path=dotenv_path)
    config = base or SystemConfig()

    whois = replace(
        config.whois,
        connect_timeout=_float_env("WHOIS_CONNECT_TIMEOUT", config.whois.connect_timeout),
        operation_timeout=_float_env("WHOIS_OPERATION_TIMEOUT", config.whois.operation_timeout),
        port=_int_env("WHOIS_PORT", config.whois.port),
    )
    tls = replace(
        config.tls,
        connect_timeout=_float_env("TLS_CONNECT_TIMEOUT", config.tls.connect_timeout),
        default_port=_int_env("TLS_DEFAULT_PORT", config.tls.default_port),
    )
    service = replace(
        config.service,
        whois_request_timeout=_float_env(
            "WHOIS_REQUEST_TIMEOUT", config.service.whois_request_timeout
        ),
        ssl_request_timeout=_float_env(
            "SSL_REQUEST_TIMEOUT", config.service.ssl_request_timeout
        ),
    )
    logging_config = replace(
        config.logging,
        level=_choice_env("LOG_LEVEL", config.logging.level, LOG_LEVELS),
        output_format=_choice_env("LOG_FORMAT", config.logging.output_format, OUTPUT_FORMATS),
    )

    return SystemConfig(
        whois=whois,
        tls=tls,
        service=service,
        logging=logging_config,
    )


def config_from_dict(data: dict) -> SystemConfig:
    """
    Build a SystemConfig from its JSON mapping; missing keys keep defaults.

    Raises:
        ConfigError: If a section has the wrong shape
    """
    try:
        whois_data = data.get("whois", {})
        servers = {
            tld.lower(): list(hosts)
            for tld, hosts in whois_data.get("servers", {}).items()
        }
        default_servers = whois_data.get("default_servers")
        whois = WhoisConfig(
            connect_timeout=float(whois_data.get("connect_timeout", 10.0)),
            operation_timeout=float(whois_data.get("operation_timeout", 15.0)),
            port=int(whois_data.get("port", 43)),
            servers=servers,
            default_servers=list(default_servers) if default_servers else None,
        )

        tls_data = data.get("tls", {})
        tls = TLSConfig(
            connect_timeout=float(tls_data.get("connect_timeout", 10.0)),
            default_port=int(tls_data.get("default_port", 443)),
        )

        service_data = data.get("service", {})
        service = ServiceConfig(
            whois_request_timeout=float(service_data.get("whois_request_timeout", 30.0)),
            ssl_request_timeout=float(service_data.get("ssl_request_timeout", 20.0)),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=str(logging_data.get("level", "info")).lower(),
            output_format=str(logging_data.get("output_format", "text")).lower(),
        )
        if logging_config.level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {logging_config.level!r}")
        if logging_config.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"unknown log format {logging_config.output_format!r}")
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(
            code="invalid_config",
            message=f"Invalid configuration: {e}",
        ) from e

    return SystemConfig(
        whois=whois,
        tls=tls,
        service=service,
        logging=logging_config,
    )


def config_to_dict(config: SystemConfig) -> dict:
    """Convert a SystemConfig to its JSON mapping."""
    return {
        "whois": {
            "connect_timeout": config.whois.connect_timeout,
            "operation_timeout": config.whois.operation_timeout,
            "port": config.whois.port,
            "servers": config.whois.servers,
            "default_servers": config.whois.default_servers,
        },
        "tls": {
            "connect_timeout": config.tls.connect_timeout,
            "default_port": config.tls.default_port,
        },
        "service": {
            "whois_request_timeout": config.service.whois_request_timeout,
            "ssl_request_timeout": config.service.ssl_request_timeout,
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
    }


def load_config_from_file(config_path: Path) -> SystemConfig:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig parsed from the file

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            code="config_not_found",
            message=f"No configuration found at: {config_path}",
            details={"path": str(config_path)},
        ) from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(
            code="config_unreadable",
            message=f"Error loading config: {e}",
            details={"path": str(config_path)},
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(
            code="invalid_config",
            message="Configuration root must be a JSON object",
            details={"path": str(config_path)},
        )

    return config_from_dict(data)


def save_config_to_file(config: SystemConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file, creating parent directories.

    Raises:
        ConfigError: If the file cannot be written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigError(
            code="config_unwritable",
            message=f"Error saving config: {e}",
            details={"path": str(config_path)},
        ) from e
