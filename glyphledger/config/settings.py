"""Runtime configuration.

Configuration is read once from a directory of TOML files and then passed
explicitly into every run; core functions never read the environment.

Layout of the config directory:
    slo.toml              [death_criteria] pce_transitivity_min
                          [twin] max_divergence
                          [health] pce_transitivity (optional)
    ledger.sqlite.toml    path, retention_seconds (optional)
    ledger.archive.toml   path
    producers.toml        names (optional)

Environment overrides: TENANT_ID, PCE_TRANSITIVITY.
"""
import logging
import math
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from glyphledger.core.constants import (
    DEATH_PCE_THRESHOLD,
    DEFAULT_PCE_TRANSITIVITY,
    DEFAULT_PRODUCERS,
    DEFAULT_TENANT_ID,
    MAX_DIVERGENCE,
)
from glyphledger.core.errors import ConfigError

logger = logging.getLogger("glyphledger.config")

CONFIG_DIR_ENV = "GLYPH_CONFIG_DIR"
DEFAULT_CONFIG_DIR = "config"


@dataclass(frozen=True)
class GlyphConfig:
    """Explicit configuration value for a run."""

    tenant_id: str = DEFAULT_TENANT_ID
    producers: tuple[str, ...] = DEFAULT_PRODUCERS

    # Stores
    hot_store_path: Path | None = None
    hot_retention_seconds: int | None = None
    cold_store_path: Path | None = None

    # Health and thresholds
    pce_transitivity: float = DEFAULT_PCE_TRANSITIVITY
    death_threshold: float = DEATH_PCE_THRESHOLD
    max_divergence: float = MAX_DIVERGENCE

    def with_env(self, env: Mapping[str, str] | None = None) -> "GlyphConfig":
        """Return a copy with TENANT_ID and PCE_TRANSITIVITY applied.

        An unparsable PCE_TRANSITIVITY is logged and ignored.
        """
        env = os.environ if env is None else env
        config = self

        tenant = env.get("TENANT_ID")
        if tenant:
            config = replace(config, tenant_id=tenant)

        raw = env.get("PCE_TRANSITIVITY")
        if raw is not None:
            try:
                value = float(raw)
            except ValueError:
                value = math.nan
            if math.isfinite(value):
                config = replace(config, pce_transitivity=value)
            else:
                logger.warning(
                    "ignoring unparsable PCE_TRANSITIVITY=%r, using %s",
                    raw, config.pce_transitivity,
                )
        return config

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "GlyphConfig":
        """Defaults plus environment overrides; no files read."""
        return cls().with_env(env)

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []
        if not self.tenant_id:
            errors.append("tenant_id must be non-empty")
        if not self.producers:
            errors.append("producers must be non-empty")
        for name in ("pce_transitivity", "death_threshold", "max_divergence"):
            if not math.isfinite(getattr(self, name)):
                errors.append(f"{name} must be finite")
        if not 0.0 <= self.death_threshold <= 1.0:
            errors.append("death_threshold must be in [0, 1]")
        if self.max_divergence < 0:
            errors.append("max_divergence must be >= 0")
        if self.hot_retention_seconds is not None and self.hot_retention_seconds < 0:
            errors.append("retention_seconds must be >= 0")
        return errors


def read_toml(path: Path) -> dict:
    """Parse one TOML file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid TOML
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"config file not found: {path}") from None
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"failed to parse TOML {path}: {e}") from e


def resolve_path(root: Path, value, source: str) -> Path:
    """Absolute paths are kept; relative ones resolve against root."""
    if not isinstance(value, str) or not value:
        raise ConfigError(f"missing or invalid `path` in {source}")
    p = Path(value)
    return p if p.is_absolute() else root / p


def _table(data: dict, key: str, source: str) -> dict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"`[{key}]` in {source} must be a table")
    return value


def _number(table: dict, key: str, default: float, source: str) -> float:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"`{key}` in {source} must be a number")
    if not math.isfinite(value):
        raise ConfigError(f"`{key}` in {source} must be finite, got {value}")
    return float(value)


def load_config(
    config_dir: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> GlyphConfig:
    """Load configuration from config_dir, then apply environment overrides.

    config_dir defaults to $GLYPH_CONFIG_DIR, then ./config. Relative
    store paths resolve against the config directory's parent.

    Raises:
        ConfigError: On any missing, unreadable or invalid setting
    """
    env = os.environ if env is None else env
    config_dir = Path(config_dir or env.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR)
    root = config_dir.resolve().parent

    slo_path = config_dir / "slo.toml"
    slo = read_toml(slo_path)
    sqlite_cfg = read_toml(config_dir / "ledger.sqlite.toml")
    archive_cfg = read_toml(config_dir / "ledger.archive.toml")

    death = _table(slo, "death_criteria", slo_path.name)
    twin = _table(slo, "twin", slo_path.name)
    health = _table(slo, "health", slo_path.name)

    retention = sqlite_cfg.get("retention_seconds")
    if retention is not None and (isinstance(retention, bool) or not isinstance(retention, int)):
        raise ConfigError("`retention_seconds` in ledger.sqlite.toml must be an integer")

    producers = DEFAULT_PRODUCERS
    producers_path = config_dir / "producers.toml"
    if producers_path.exists():
        names = read_toml(producers_path).get("names")
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ConfigError("`names` in producers.toml must be a list of strings")
        producers = tuple(names)

    config = GlyphConfig(
        tenant_id=str(slo.get("tenant_id", DEFAULT_TENANT_ID)),
        producers=producers,
        hot_store_path=resolve_path(root, sqlite_cfg.get("path"), "ledger.sqlite.toml"),
        hot_retention_seconds=retention,
        cold_store_path=resolve_path(root, archive_cfg.get("path"), "ledger.archive.toml"),
        pce_transitivity=_number(health, "pce_transitivity", DEFAULT_PCE_TRANSITIVITY, slo_path.name),
        death_threshold=_number(death, "pce_transitivity_min", DEATH_PCE_THRESHOLD, slo_path.name),
        max_divergence=_number(twin, "max_divergence", MAX_DIVERGENCE, slo_path.name),
    ).with_env(env)

    errors = config.validate()
    if errors:
        raise ConfigError("; ".join(errors))

    logger.debug("loaded config from %s for tenant %s", config_dir, config.tenant_id)
    return config


def load_config_if_present(
    config_dir: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> GlyphConfig:
    """load_config when a config directory is named or ./config exists.

    Falls back to defaults plus environment overrides when there is no
    directory to read.

    Raises:
        ConfigError: If a named directory is missing or invalid
    """
    env = os.environ if env is None else env
    if config_dir or env.get(CONFIG_DIR_ENV) or Path(DEFAULT_CONFIG_DIR).is_dir():
        return load_config(config_dir, env)
    return GlyphConfig.from_env(env)
