"""Declaration language and message builder."""

from .builder import MessageBuilder as MessageBuilder
from .builder import MessageDefinition as MessageDefinition
from .builder import Schema as Schema
from .builder import build_module as build_module
from .builder import load as load
from .parser import parse as parse
