"""Configuration models using Pydantic for validation."""
from typing import Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator
import os

DEFAULT_ADDRESS = "127.0.0.1:9000"


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` bind address.

    IPv6 hosts may be given in brackets, e.g. ``[::1]:9000``.

    Raises:
        ValueError: if the address has no host, no port, or a bad port
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port:
        raise ValueError(f"invalid address {address!r}, expected host:port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"invalid address {address!r}, IPv6 hosts must be bracketed")

    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"invalid port {port!r} in address {address!r}") from None

    if not 0 <= port_number <= 65535:
        raise ValueError(f"port {port_number} out of range in address {address!r}")

    return host, port_number


class ExporterConfig(BaseModel):
    """Prometheus pull exporter configuration."""
    address: str = DEFAULT_ADDRESS
    refresh_interval_s: float = Field(default=1.0, gt=0)
    self_metrics: bool = True

    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        """Reject addresses that cannot be bound."""
        parse_address(v)
        return v

    @property
    def host(self) -> str:
        return parse_address(self.address)[0]

    @property
    def port(self) -> int:
        return parse_address(self.address)[1]


class ShellConfig(BaseModel):
    """Interactive prompt configuration."""
    prompt: str = "gsh> "
    history_file: Optional[str] = None
    history_length: int = 1000


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"


class Config(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    exporter: ExporterConfig = Field(default_factory=ExporterConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)

    def with_address(self, address: str) -> "Config":
        """Return a copy bound to another exposition address."""
        exporter = ExporterConfig(**{**self.exporter.model_dump(), "address": address})
        return self.model_copy(update={"exporter": exporter})


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate configuration from an optional YAML file."""
    import yaml

    raw_config = {}
    if config_path is not None:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

    # Apply environment variable overrides
    if env_address := os.getenv('GAUGESHELL_ADDRESS'):
        raw_config.setdefault('exporter', {})['address'] = env_address

    if env_log_level := os.getenv('LOG_LEVEL'):
        raw_config.setdefault('global', {})['log_level'] = env_log_level

    try:
        config = Config(**raw_config)
        return config
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
