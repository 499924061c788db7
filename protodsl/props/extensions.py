"""Extension properties and the shared extension registry."""

import logging
import threading
from collections.abc import Sequence
from types import MappingProxyType

from .errors import Rule, StructureError
from .fields import derive_field_props, validate_field_number
from .types import ExtendDeclaration, Extension, ExtensionProps, FieldDeclaration, Syntax

_LOG = logging.getLogger(__name__)


def build_extension_props(extends: Sequence[ExtendDeclaration]) -> ExtensionProps | None:
    """Derive the extensions one module declares.

    Returns None when the module declares no extensions, so callers can tell
    "nothing defined" apart from an empty registry.
    """
    if not extends:
        return None

    entries: dict[tuple[str, int], Extension] = {}
    name_index: dict[tuple[str, str], tuple[str, int]] = {}

    for ext in extends:
        subject = f"{ext.extendee}.{ext.name}"
        validate_field_number(ext.number, subject)

        # Only proto2 has extensions.
        props = derive_field_props(
            FieldDeclaration(ext.name, ext.number, ext.options), Syntax.PROTO2, message=ext.extendee
        )

        key = (ext.extendee, ext.number)
        if key in entries:
            raise StructureError(
                Rule.DUPLICATE_NUMBER,
                subject,
                f"extension number {ext.number} already used by "
                f"{entries[key].field_props.name}",
            )
        if (ext.extendee, ext.name) in name_index:
            raise StructureError(Rule.DUPLICATE_NAME, subject, "extension name declared twice")

        entries[key] = Extension(extendee=ext.extendee, field_props=props)
        name_index[(ext.extendee, ext.name)] = key

    _LOG.debug("Built %d extensions", len(entries))
    return ExtensionProps(
        entries=MappingProxyType(entries), name_index=MappingProxyType(name_index)
    )


class ExtensionRegistry:
    """Extensions contributed by independently built modules.

    Merging is idempotent and order-independent. Readers see an immutable
    snapshot that is replaced on every successful merge.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = ExtensionProps(
            entries=MappingProxyType({}), name_index=MappingProxyType({})
        )

    def merge(self, props: ExtensionProps | None) -> None:
        """Add a module's extensions.

        Raises:
            StructureError: if an entry conflicts with one already registered.
        """
        if props is None:
            return

        with self._lock:
            entries = dict(self._snapshot.entries)
            name_index = dict(self._snapshot.name_index)
            added = 0

            for key, ext in props.entries.items():
                name_key = (ext.extendee, ext.field_props.name)
                existing = entries.get(key)
                if existing is not None:
                    if existing != ext:
                        raise StructureError(
                            Rule.CONFLICTING_EXTENSION,
                            f"{ext.extendee}.{ext.field_props.name}",
                            f"extension number {key[1]} is already registered "
                            f"as {existing.field_props.name}",
                        )
                    continue
                if name_index.get(name_key, key) != key:
                    raise StructureError(
                        Rule.CONFLICTING_EXTENSION,
                        f"{ext.extendee}.{ext.field_props.name}",
                        f"extension name is already registered with number {name_index[name_key][1]}",
                    )
                entries[key] = ext
                name_index[name_key] = key
                added += 1

            self._snapshot = ExtensionProps(
                entries=MappingProxyType(entries), name_index=MappingProxyType(name_index)
            )

        _LOG.debug("Merged %d new extensions (%d total)", added, len(entries))

    def snapshot(self) -> ExtensionProps:
        return self._snapshot

    def get(self, extendee: str, number: int) -> Extension | None:
        return self._snapshot.entries.get((extendee, number))

    def get_by_name(self, extendee: str, name: str) -> Extension | None:
        snapshot = self._snapshot
        key = snapshot.name_index.get((extendee, name))
        return snapshot.entries[key] if key is not None else None

    def for_extendee(self, extendee: str) -> list[Extension]:
        """Extensions registered for one message, by ascending number."""
        return [
            ext
            for (target, _number), ext in sorted(self._snapshot.entries.items())
            if target == extendee
        ]

    def __len__(self) -> int:
        return len(self._snapshot.entries)
