"""Config subpackage: TOML + environment configuration passed into runs."""
from .settings import GlyphConfig, load_config, load_config_if_present, read_toml, resolve_path

__all__ = ["GlyphConfig", "load_config", "load_config_if_present", "read_toml", "resolve_path"]
