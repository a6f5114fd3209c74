"""
REST resource package.

Resource metadata, HTTP exceptions and the FastAPI glue that renders them.
"""

__version__ = "1.0.0"

from . import exceptions
from . import resource
from . import config

__all__ = ["exceptions", "resource", "config"]
