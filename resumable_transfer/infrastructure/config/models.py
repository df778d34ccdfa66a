"""
Configuration models and data structures.

This module defines the configuration models used throughout the application,
providing type safety and validation for configuration values.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path

from ...core.domain.transfer import ChunkCountMode


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class UploadConfig:
    """Transfer engine configuration."""
    upload_directory: str = "uploads"
    chunk_size: int = 100
    chunk_count_mode: str = ChunkCountMode.EXACT.value
    spool_max_size: int = 1024 * 1024  # request bodies above this spill to disk
    session_ttl: float = 3600.0
    purge_interval: float = 300.0
    shutdown_timeout: float = 10.0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = True


@dataclass
class PerformanceConfig:
    """Request timing configuration."""
    enabled: bool = True
    slow_request_threshold: float = 1.0


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    name: str = "Resumable Transfer"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    server: ServerConfig = field(default_factory=ServerConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)

    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_server()
        self._validate_upload()
        self._validate_logging()

    def _validate_server(self) -> None:
        if not (1 <= self.server.port <= 65535):
            raise ValueError(
                f"Server port must be between 1 and 65535, got {self.server.port}")

    def _validate_upload(self) -> None:
        upload = self.upload
        if upload.chunk_size <= 0:
            raise ValueError(
                f"Chunk size must be positive, got {upload.chunk_size}")
        try:
            ChunkCountMode(upload.chunk_count_mode)
        except ValueError:
            modes = ", ".join(m.value for m in ChunkCountMode)
            raise ValueError(
                f"Chunk count mode must be one of {modes}, got {upload.chunk_count_mode!r}")
        if upload.spool_max_size < 0:
            raise ValueError(
                f"Spool size must not be negative, got {upload.spool_max_size}")

        timeouts = [
            ("Session TTL", upload.session_ttl),
            ("Purge interval", upload.purge_interval),
            ("Shutdown timeout", upload.shutdown_timeout),
        ]
        for name, timeout in timeouts:
            if timeout <= 0:
                raise ValueError(f"{name} must be positive, got {timeout}")

    def _validate_logging(self) -> None:
        levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        if self.logging.level.upper() not in levels:
            raise ValueError(f"Unknown log level: {self.logging.level}")

    def ensure_directories(self) -> None:
        """Create the upload and log directories."""
        paths = [self.upload.upload_directory]
        if self.logging.file_enabled:
            paths.append(self.logging.log_directory)

        for path_str in paths:
            path = Path(path_str)
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ValueError(f"Cannot create directory {path}: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        return cls(
            name=data.get('name', 'Resumable Transfer'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            server=ServerConfig(**data.get('server', {})),
            upload=UploadConfig(**data.get('upload', {})),
            logging=LoggingConfig(**data.get('logging', {})),
            performance=PerformanceConfig(**data.get('performance', {})),
            config_file_path=data.get('config_file_path')
        )
