from pathlib import Path
from typing import Dict, Any, List, Mapping, Optional, Protocol
import json
import logging

from pydantic import BaseModel, Field

from rest_resource.resource.cache import FileCache, MemoryCache
from rest_resource.resource.drivers import DecoratorDriver, DriverChain, YamlDriver
from rest_resource.resource.factory import ResourceMetadataFactory

logger = logging.getLogger(__name__)

# Top-level key of the application config holding the module options
CONFIG_KEY = 'rest'


class Config:
    """Static configuration class - no instances, only class methods"""
    _config: Dict[str, Any] = {}

    @classmethod
    def initialize(cls, config_file: str) -> Dict[str, Any]:
        """Initialize the config with values from config file"""
        cls._config = cls._load_system_config(config_file)
        return cls._config

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a configuration value by key"""
        return cls._config.get(key, default)

    @classmethod
    def _load_system_config(cls, config_file: str) -> Dict[str, Any]:
        """
        Load the configuration from a JSON file, merged over the defaults.
        If the file is not found, return the defaults.
        """
        config = cls._defaults()
        if len(config_file) > 0:
            config_path = Path(config_file)
            if config_path.exists():
                return _merge_sections(config, cls._read_config_file(config_path))
        logger.warning(f'Configuration file "{config_file}" not found. Using defaults.')
        return config

    @classmethod
    def _read_config_file(cls, config_path: Path) -> Dict[str, Any]:
        """Parse a JSON config file; an unreadable or non-object file counts as empty."""
        try:
            with open(config_path, 'r') as config_handle:
                loaded = json.load(config_handle)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading config file {config_path}: {e}")
            return {}
        if not isinstance(loaded, dict):
            logger.error(f"Config file {config_path} must hold a JSON object")
            return {}
        return loaded

    @classmethod
    def _defaults(cls) -> Dict[str, Any]:
        return {
            CONFIG_KEY: {
                'exception_map': {},
                'register_http_method_override_listener': False,
                'cache_dir': None,
                'mapping_files': [],
                'debug': False,
            }
        }


class ModuleOptions(BaseModel):
    """Options of the REST module, read from the 'rest' section of the config."""

    # dotted exception class -> dotted HttpException class
    exception_map: Dict[str, str] = Field(default_factory=dict)
    register_http_method_override_listener: bool = False
    cache_dir: Optional[str] = None
    mapping_files: List[str] = Field(default_factory=list)
    debug: bool = False

    def get_exception_map(self) -> Dict[str, str]:
        return self.exception_map

    def get_register_http_method_override_listener(self) -> bool:
        return self.register_http_method_override_listener


class ServiceContainer(Protocol):
    """Anything able to return a named service, e.g. a dict with a 'Config' entry."""

    def get(self, name: str) -> Any: ...


class ModuleOptionsFactory:
    """Builds ModuleOptions from the 'Config' service of a container."""

    def create_service(self, container: ServiceContainer) -> ModuleOptions:
        config = container.get('Config') or {}
        return ModuleOptions.model_validate(config.get(CONFIG_KEY, {}))


class ResourceMetadataFactoryFactory:
    """Builds the ResourceMetadataFactory described by the module options."""

    def create_service(self, container: ServiceContainer) -> ResourceMetadataFactory:
        options = ModuleOptionsFactory().create_service(container)
        return create_metadata_factory(options)


def create_metadata_factory(options: ModuleOptions) -> ResourceMetadataFactory:
    """Decorator driver first, then mapping files; file cache when a cache dir is set."""
    driver = DriverChain([DecoratorDriver()] + [YamlDriver(path) for path in options.mapping_files])
    cache = FileCache(options.cache_dir) if options.cache_dir else MemoryCache()
    logger.info(f"Resource metadata factory: {len(options.mapping_files)} mapping files, cache={type(cache).__name__}")
    return ResourceMetadataFactory(driver, cache=cache, debug=options.debug)


def _merge_sections(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Return base with overrides applied, merging nested sections key by key."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(merged.get(key), dict) and isinstance(value, Mapping):
            merged[key] = _merge_sections(merged[key], value)
        else:
            merged[key] = value
    return merged
