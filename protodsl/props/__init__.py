"""Derived field, message and extension properties."""

from .defaults import default_value as default_value
from .defaults import record_layout as record_layout
from .enums import EnumAccessors as EnumAccessors
from .enums import EnumLookupError as EnumLookupError
from .enums import build_enum_accessors as build_enum_accessors
from .errors import *
from .extensions import ExtensionRegistry as ExtensionRegistry
from .extensions import build_extension_props as build_extension_props
from .fields import derive_field_props as derive_field_props
from .fields import validate_field_number as validate_field_number
from .messages import build_message_props as build_message_props
from .types import *
from .wire import encode_tag as encode_tag
from .wire import encode_varint as encode_varint
from .wire import wire_type as wire_type
