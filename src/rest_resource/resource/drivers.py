"""
Metadata drivers: where the REST options of a class come from.

Two sources are supported and can be chained:

    @resource(controller="WidgetController", hydrator="WidgetHydrator",
              associations={"owner": {"routable": True}})
    class Widget(BaseModel): ...

or a YAML mapping keyed by dotted class name:

    app.models.Widget:
      controller: WidgetController
      inputFilter: WidgetFilter
      collection:
        controller: WidgetListController
      associations:
        owner: {routable: true}
"""

import inspect
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Type, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ResourceError
from .reflection import class_name

logger = logging.getLogger(__name__)

RESOURCE_OPTIONS_ATTR = '__rest_resource__'


class CollectionOptions(BaseModel):
    """REST options for the collection representation of a resource."""
    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    controller: Optional[str] = None
    input_filter: Optional[str] = Field(default=None, alias='inputFilter')
    hydrator: Optional[str] = None


class AssociationOptions(BaseModel):
    model_config = ConfigDict(extra='forbid')

    routable: bool = True


class ResourceOptions(BaseModel):
    """REST options declared for one resource class."""
    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    controller: Optional[str] = None
    input_filter: Optional[str] = Field(default=None, alias='inputFilter')
    hydrator: Optional[str] = None
    collection: CollectionOptions = Field(default_factory=CollectionOptions)
    associations: Dict[str, AssociationOptions] = Field(default_factory=dict)


def resource(controller: Optional[str] = None,
             input_filter: Optional[str] = None,
             hydrator: Optional[str] = None,
             collection: Optional[Dict[str, Any]] = None,
             associations: Optional[Dict[str, Any]] = None):
    """Class decorator declaring a class as a REST resource."""
    options = ResourceOptions(
        controller=controller,
        input_filter=input_filter,
        hydrator=hydrator,
        collection=CollectionOptions.model_validate(collection or {}),
        associations={name: AssociationOptions.model_validate(value or {})
                      for name, value in (associations or {}).items()},
    )

    def decorator(cls):
        setattr(cls, RESOURCE_OPTIONS_ATTR, options)
        return cls

    return decorator


class Driver:
    """Base driver interface."""

    def load_options_for_class(self, cls: Type[Any]) -> Optional[ResourceOptions]:
        raise NotImplementedError

    def get_file_resources(self, cls: Type[Any]) -> List[str]:
        """Files the options of cls were read from, used for freshness checks."""
        return []


class DecoratorDriver(Driver):
    """Reads options set by the @resource decorator. Not inherited by subclasses."""

    def load_options_for_class(self, cls: Type[Any]) -> Optional[ResourceOptions]:
        return cls.__dict__.get(RESOURCE_OPTIONS_ATTR)

    def get_file_resources(self, cls: Type[Any]) -> List[str]:
        try:
            source = inspect.getsourcefile(cls)
        except TypeError:
            return []
        return [source] if source else []


class YamlDriver(Driver):
    """Reads options from a YAML mapping file, loaded on first use."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._options: Optional[Dict[str, ResourceOptions]] = None

    def _load(self) -> Dict[str, ResourceOptions]:
        if self._options is not None:
            return self._options

        try:
            with open(self.path, 'r') as mapping_handle:
                raw = yaml.safe_load(mapping_handle) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ResourceError(e, f"Cannot read resource mapping {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise ResourceError(message=f"Resource mapping {self.path} must be a mapping of class names")

        options: Dict[str, ResourceOptions] = {}
        for name, entry in raw.items():
            try:
                options[name] = ResourceOptions.model_validate(entry or {})
            except ValidationError as e:
                raise ResourceError(e, f"Invalid resource mapping for {name} in {self.path}: {e}") from e

        logger.info(f"Loaded {len(options)} resource mappings from {self.path}")
        self._options = options
        return options

    def get_all_class_names(self) -> List[str]:
        return list(self._load().keys())

    def load_options_for_class(self, cls: Type[Any]) -> Optional[ResourceOptions]:
        return self._load().get(class_name(cls))

    def get_file_resources(self, cls: Type[Any]) -> List[str]:
        return [str(self.path)]


class DriverChain(Driver):
    """Asks each driver in turn; the first one that knows the class wins."""

    def __init__(self, drivers: List[Driver]):
        self.drivers = list(drivers)

    def _find(self, cls: Type[Any]) -> Optional[Driver]:
        for driver in self.drivers:
            if driver.load_options_for_class(cls) is not None:
                return driver
        return None

    def load_options_for_class(self, cls: Type[Any]) -> Optional[ResourceOptions]:
        driver = self._find(cls)
        return driver.load_options_for_class(cls) if driver else None

    def get_file_resources(self, cls: Type[Any]) -> List[str]:
        driver = self._find(cls)
        return driver.get_file_resources(cls) if driver else []
