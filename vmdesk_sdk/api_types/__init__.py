"""Wire types: the action envelope and the resource models."""

from .envelope import ActionRequest, ActionResponse
from .resource_models import *  # noqa: F401,F403
from .resource_models import __all__ as _resource_all

__all__ = ["ActionRequest", "ActionResponse", *_resource_all]
