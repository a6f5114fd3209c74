"""
Sample domain classes used across the test suite.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel

from rest_resource.resource import ReflectionError, ResourceMetadata, resource


@resource(controller="UserController", input_filter="UserFilter", hydrator="UserHydrator",
          associations={"widgets": {"routable": True}})
@dataclass
class User:
    id: int = 0
    name: str = ""
    widgets: List["Widget"] = field(default_factory=list)


@resource(controller="WidgetController", input_filter="WidgetFilter", hydrator="WidgetHydrator",
          collection={"controller": "WidgetListController"},
          associations={"owner": {"routable": True}, "tags": {"routable": False}})
@dataclass
class Widget:
    id: int = 0
    label: str = ""
    owner: Optional[User] = None
    tags: List["Tag"] = field(default_factory=list)


@dataclass
class Tag:
    id: int = 0
    name: str = ""


class Part(BaseModel):
    id: int
    serial: str


class Gadget(BaseModel):
    id: int
    name: str
    parts: List[Part] = []


class Point:
    def __init__(self, x, y, z=0):
        self.x = x
        self.y = y
        self.z = z


class Shape(ABC):
    @abstractmethod
    def area(self) -> float: ...


class OutOfStock(Exception):
    pass


class BrokenReflectionService:
    def get_reflection_class(self, name):
        raise ReflectionError(message=f"cannot resolve {name}")


class BrokenRestoreMetadata(ResourceMetadata):
    reflection_service_factory = staticmethod(BrokenReflectionService)


class LazyClassMetadata:
    """Exposes wakeup_reflection but never binds anything."""

    def wakeup_reflection(self, reflection_service):
        pass

    def get_reflection_class(self):
        return None


class PlainClassMetadata:
    pass


class Private:
    """Only constructible through create()."""

    _token = object()

    def __init__(self, token=None):
        if token is not Private._token:
            raise RuntimeError("use Private.create()")

    @classmethod
    def create(cls):
        return cls(cls._token)
