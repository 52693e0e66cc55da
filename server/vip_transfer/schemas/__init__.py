"""Pydantic schemas for request/response validation."""

from .catalog import *  # noqa: F403
from .common import *  # noqa: F403
from .health import *  # noqa: F403
from .rates import *  # noqa: F403
from .reservation import *  # noqa: F403
