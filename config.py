"""Configuration management for Cattree.

Reads configuration from ~/.config/cattree.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import tomllib
import tomli_w


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    uploads_dir: Path
    uploads_url_prefix: str = "/uploads"
    db_timeout: float = 5.0
    max_subtree_depth: int = 10
    enable_reset: bool = False

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "cattree"
        return cls(
            base_dir=base_dir,
            db_data_dir=base_dir / "db",
            db_filename="cattree.db",
            log_level="INFO",
            log_dir=base_dir / "logs",
            uploads_dir=base_dir / "uploads",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "cattree.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Args:
        config_path: Optional override of the config file location.

    Returns:
        Config object with loaded or default values.
    """
    config_path = config_path or get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config, config_path)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse with defaults for any missing values
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "cattree"))
    enable_reset = data.get("enable_reset", False)

    db_config = data.get("database", {})
    db_data_dir = Path(db_config.get("data_dir", base_dir / "db"))
    db_filename = db_config.get("filename", "cattree.db")
    db_timeout = float(db_config.get("timeout", 5.0))

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    uploads_config = data.get("uploads", {})
    uploads_dir = Path(uploads_config.get("uploads_dir", base_dir / "uploads"))
    uploads_url_prefix = uploads_config.get("url_prefix", "/uploads")

    tree_config = data.get("tree", {})
    max_subtree_depth = int(tree_config.get("max_subtree_depth", 10))

    return Config(
        base_dir=base_dir,
        db_data_dir=db_data_dir,
        db_filename=db_filename,
        log_level=log_level,
        log_dir=log_dir,
        uploads_dir=uploads_dir,
        uploads_url_prefix=uploads_url_prefix,
        db_timeout=db_timeout,
        max_subtree_depth=max_subtree_depth,
        enable_reset=enable_reset,
    )


def _write_config(config: Config, config_path: Path) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
        config_path: Destination file.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "base_dir": str(config.base_dir),
        "enable_reset": config.enable_reset,
        "database": {
            "data_dir": str(config.db_data_dir),
            "filename": config.db_filename,
            "timeout": config.db_timeout,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "uploads": {
            "uploads_dir": str(config.uploads_dir),
            "url_prefix": config.uploads_url_prefix,
        },
        "tree": {
            "max_subtree_depth": config.max_subtree_depth,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
