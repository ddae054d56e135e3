"""shapeguard - declarative schema validation with structured, customisable errors.

    from shapeguard import object_, string, number, email

    user = object_({"name": string().min(1), "age": number().int_().nonnegative(), "email": email()})
    result = user.safe_parse(payload)
    if not result.success:
        print(result.tree.to_dict())
"""

from .schema import (
    Kind,
    ObjectMode,
    SchemaNode,
    any_,
    array,
    base64,
    base64url,
    boolean,
    cidrv4,
    cidrv6,
    cuid,
    cuid2,
    custom,
    datetime,
    email,
    emoji,
    enum_from_values,
    extend,
    guid,
    int_,
    ipv4,
    ipv6,
    iso_date,
    iso_time,
    literal,
    loose_object,
    nanoid,
    nullable,
    number,
    object_,
    optional,
    record,
    strict_object,
    string,
    string_format,
    tuple_,
    ulid,
    union,
    unknown,
    url,
    uuid,
)
from .validation.base import MISSING, Issue, IssueCode, ParseResult
from .validation.engine import validate
from .formatting import TreeNode, format_path, prettify, treeify
from .contracts import FunctionSchema, function_schema
from .definitions import DefinitionError, load_schema, schema_from_definition
from .config import ShapeguardConfig, configure, get_config, reset_config
from .exceptions import (
    ConfigurationError,
    ImplementationError,
    ShapeguardError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # validation
    "validate",
    "MISSING",
    "Issue",
    "IssueCode",
    "ParseResult",
    # schema nodes
    "Kind",
    "ObjectMode",
    "SchemaNode",
    "object_",
    "strict_object",
    "loose_object",
    "extend",
    "record",
    "array",
    "tuple_",
    "union",
    "optional",
    "nullable",
    "enum_from_values",
    "literal",
    "string",
    "number",
    "int_",
    "boolean",
    "any_",
    "unknown",
    "custom",
    "string_format",
    # string formats
    "email",
    "uuid",
    "guid",
    "url",
    "emoji",
    "base64",
    "base64url",
    "nanoid",
    "cuid",
    "cuid2",
    "ulid",
    "datetime",
    "iso_date",
    "iso_time",
    "ipv4",
    "ipv6",
    "cidrv4",
    "cidrv6",
    # function contracts
    "FunctionSchema",
    "function_schema",
    # formatting
    "TreeNode",
    "treeify",
    "prettify",
    "format_path",
    # definitions
    "load_schema",
    "schema_from_definition",
    # configuration
    "ShapeguardConfig",
    "configure",
    "get_config",
    "reset_config",
    # exceptions
    "ShapeguardError",
    "ConfigurationError",
    "DefinitionError",
    "ValidationError",
    "ImplementationError",
]
