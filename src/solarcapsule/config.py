"""Configuration management module for Solar Capsule."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import yaml


@dataclass
class ZoningConfig:
    """Solar zone configuration settings."""

    total_zones: int = 51
    minutes_per_degree: float = 4.0  # 1440 minutes / 360 degrees

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.total_zones < 1:
            raise ValueError("total_zones must be positive")
        if self.minutes_per_degree <= 0:
            raise ValueError("minutes_per_degree must be positive")


@dataclass
class DriftConfig:
    """Longitude drift configuration settings."""

    degrees_per_hour: float = 15.0  # westward


@dataclass
class DisclosureConfig:
    """Reply disclosure configuration settings."""

    band_hours: int = 24
    lifetime_days: int = 7
    preview_length: int = 50

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.band_hours < 1:
            raise ValueError("band_hours must be positive")
        if self.lifetime_days < 1:
            raise ValueError("lifetime_days must be positive")
        if self.preview_length < 1:
            raise ValueError("preview_length must be positive")


@dataclass
class StorageConfig:
    """Storage configuration settings."""

    path: Path = field(
        default_factory=lambda: Path.home() / ".solarcapsule" / "capsules.json"
    )

    def __post_init__(self) -> None:
        """Convert string path to Path object if necessary."""
        if isinstance(self.path, str):
            self.path = Path(self.path).expanduser()


@dataclass
class LoggingConfig:
    """Logging configuration settings."""

    level: str = "INFO"
    file: Optional[Path] = None
    max_size_mb: int = 10
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate and convert configuration values."""
        if isinstance(self.file, str):
            self.file = Path(self.file)
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if self.level.upper() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")
        self.level = self.level.upper()


@dataclass
class Config:
    """Main configuration container."""

    zoning: ZoningConfig = field(default_factory=ZoningConfig)
    drift: DriftConfig = field(default_factory=DriftConfig)
    disclosure: DisclosureConfig = field(default_factory=DisclosureConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create Config from dictionary."""
        return cls(
            zoning=ZoningConfig(**data.get("zoning", {})),
            drift=DriftConfig(**data.get("drift", {})),
            disclosure=DisclosureConfig(**data.get("disclosure", {})),
            storage=StorageConfig(**data.get("storage", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def to_dict(self) -> dict:
        """Convert Config to dictionary."""
        return {
            "zoning": {
                "total_zones": self.zoning.total_zones,
                "minutes_per_degree": self.zoning.minutes_per_degree,
            },
            "drift": {
                "degrees_per_hour": self.drift.degrees_per_hour,
            },
            "disclosure": {
                "band_hours": self.disclosure.band_hours,
                "lifetime_days": self.disclosure.lifetime_days,
                "preview_length": self.disclosure.preview_length,
            },
            "storage": {
                "path": str(self.storage.path),
            },
            "logging": {
                "level": self.logging.level,
                "file": str(self.logging.file) if self.logging.file else None,
                "max_size_mb": self.logging.max_size_mb,
                "backup_count": self.logging.backup_count,
            },
        }


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        Config object with loaded or default values.
    """
    # Default config paths to try
    if config_path is None:
        default_paths = [
            Path("config/config.yaml"),
            Path("/etc/solarcapsule/config.yaml"),
            Path.home() / ".config" / "solarcapsule" / "config.yaml",
        ]
        for path in default_paths:
            if path.exists():
                config_path = path
                break

    if config_path is None or not config_path.exists():
        return Config()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return Config()

    return Config.from_dict(data)


def save_config(config: Config, config_path: Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: Config object to save.
        config_path: Path to save configuration file.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, allow_unicode=True)
