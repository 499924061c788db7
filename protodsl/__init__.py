"""protodsl - Schema derivation core for Protocol Buffers code generation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protodsl")
except PackageNotFoundError:
    __version__ = "(local)"
