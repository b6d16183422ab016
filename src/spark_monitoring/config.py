import logging
from typing import Any, Dict, Mapping

import orjson

from spark_monitoring.errors import UnknownProfile
from spark_monitoring.types import ConnectionProfile

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
SPARK_MONITORING_HOST = "spark.monitoring.host"
SPARK_MONITORING_PORT = "spark.monitoring.port"
SPARK_MONITORING_TIMEOUT = "spark.monitoring.timeout"
DEFAULT_TIMEOUT = 30.0

DEFAULT_PROPERTIES = {
    f"{DEFAULT_PROFILE}.{SPARK_MONITORING_HOST}": "localhost",
    f"{DEFAULT_PROFILE}.{SPARK_MONITORING_PORT}": "4040",
}


class ConfigLoader:
    def load_config(self) -> Dict[str, Any]:
        pass


class LocalFileConfigLoader(ConfigLoader):
    def __init__(self, filename="spark-monitoring.json"):
        self.filename = filename

    def load_config(self):
        with open(self.filename, "rb") as f:
            return orjson.loads(f.read())


class DictConfigLoader(ConfigLoader):
    def __init__(self, properties: Mapping[str, Any]):
        self.properties = dict(properties)

    def load_config(self):
        return dict(self.properties)


class Config:
    def __init__(self, loader):
        super().__init__()
        assert issubclass(loader.__class__, ConfigLoader)
        self.loader = loader
        self.config = None

    def ensure_config(self):
        if self.config is None:
            try:
                self.config = self.loader.load_config()
            except FileNotFoundError:
                logger.warning("Config file not found, using defaults")
                self.config = dict(DEFAULT_PROPERTIES)

    def __getitem__(self, key):
        self.ensure_config()
        return self.config[key]

    def get(self, key):
        self.ensure_config()
        return self.config.get(key)

    def properties(self) -> Dict[str, str]:
        self.ensure_config()
        return {str(k): str(v) for k, v in self.config.items()}


def group_properties(properties: Mapping[str, str]) -> Dict[str, Dict[str, str]]:
    """Split ``<prefix>.<key>`` properties into one mapping per prefix.

    Keys without a dot carry no prefix and are ignored.
    """
    grouped: Dict[str, Dict[str, str]] = {}
    for property_key, value in properties.items():
        logger.debug("propertyKey: %s", property_key)
        prefix, sep, key = property_key.partition(".")
        if not sep:
            continue
        grouped.setdefault(prefix, {})[key] = value
    return grouped


def load_profiles(properties: Mapping[str, str]) -> Dict[str, ConnectionProfile]:
    profiles = {}
    for name, props in group_properties(properties).items():
        if SPARK_MONITORING_HOST not in props or SPARK_MONITORING_PORT not in props:
            logger.warning(
                "%s will be ignored. %s and %s is mandatory.",
                name,
                SPARK_MONITORING_HOST,
                SPARK_MONITORING_PORT,
            )
            continue
        try:
            port = int(props[SPARK_MONITORING_PORT])
            timeout = float(props.get(SPARK_MONITORING_TIMEOUT, DEFAULT_TIMEOUT))
        except ValueError:
            logger.warning("%s will be ignored. Invalid port or timeout.", name)
            continue
        profiles[name] = ConnectionProfile(
            name=name,
            host=props[SPARK_MONITORING_HOST],
            port=port,
            timeout=timeout,
        )
        logger.info("Profile %s: %s:%s", name, profiles[name].host, port)
    return profiles


class Profiles:
    def __init__(self, profiles: Dict[str, ConnectionProfile]):
        self._profiles = dict(profiles)

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> "Profiles":
        return cls(load_profiles(properties))

    def lookup(self, name: str) -> ConnectionProfile:
        try:
            return self._profiles[name]
        except KeyError:
            raise UnknownProfile(f"Unknown profile '{name}'") from None
