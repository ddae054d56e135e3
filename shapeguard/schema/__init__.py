"""Schema package - immutable schema nodes and their constructors."""

from .nodes import Check, Kind, ObjectMode, SchemaNode, as_node
from .builders import *  # noqa: F401,F403
from .builders import __all__ as _builder_names

__all__ = ["Check", "Kind", "ObjectMode", "SchemaNode", "as_node", *_builder_names]
