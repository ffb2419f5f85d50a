from pathlib import Path
from typing import TYPE_CHECKING

from nightsky.errors import ConfigError

if TYPE_CHECKING:
    import tomli as tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:  # Python < 3.11
        import tomli as tomllib

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "nightsky" / "config.toml"


class Config:
    def __init__(self, data: dict):
        self._data = data

    @property
    def store_path(self):
        path = self._data.get("store", {}).get("path", None)
        if not path:
            return None
        return Path(path).expanduser()

    @property
    def default_dataset(self):
        return self._data.get("store", {}).get("dataset", None)

    @property
    def cache_ttl_s(self):
        value = self._data.get("cache", {}).get("ttl_s", 300)
        if value <= 0:
            raise ConfigError(f"cache.ttl_s must be positive, got {value}")
        return value

    @property
    def cache_capacity(self):
        value = self._data.get("cache", {}).get("capacity", 100)
        if value <= 0:
            raise ConfigError(f"cache.capacity must be positive, got {value}")
        return value

    @property
    def default_radius_ly(self):
        return self._data.get("query", {}).get("radius_ly", 100.0)

    @property
    def default_max_magnitude(self):
        return self._data.get("query", {}).get("max_magnitude", 6.5)

    @property
    def default_max_stars(self):
        return self._data.get("query", {}).get("max_stars", 2000)

    @property
    def default_lod(self):
        return self._data.get("query", {}).get("lod", "medium")

    @property
    def atmosphere_enabled(self):
        return self._data.get("atmosphere", {}).get("enabled", True)

    @property
    def extinction_coefficient(self):
        value = self._data.get("atmosphere", {}).get("extinction_coefficient", 0.2)
        if value < 0:
            raise ConfigError(
                f"atmosphere.extinction_coefficient must not be negative, got {value}"
            )
        return value


def load_config(path: Path | None = None) -> Config:
    explicit_path = path
    path = path or DEFAULT_CONFIG_PATH

    if not path.exists():
        if explicit_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        # Return default config if default file missing
        return Config({})

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return Config(data)
