"""Record schema descriptors and the process-wide schema registry."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from attrs import define, field

from recon_xl.errors import SchemaDefinitionError, UnknownSchemaError

logger = logging.getLogger(__name__)


def fold_header(value: str) -> str:
    """Return the case- and whitespace-insensitive form of a header."""
    return " ".join(value.split()).casefold()


def _as_tuple(value: Any) -> tuple[str, ...]:
    return tuple(value or ())


def _as_mapping(value: Any) -> dict[str, str]:
    return dict(value or {})


@define(frozen=True, kw_only=True)
class RecordSchema:
    """Describes how external files map onto one record type.

    Attributes:
        name: The name under which the schema is registered.
        keys: Canonical field names supported by the record type, in order.
        key_map: External header strings (aliases, different casing,
            synonyms) mapped to canonical keys. Several aliases may point to
            the same key.
        required_keys: Keys that must be present and non-empty for an
            incoming row to be accepted. The primary key is always included.
        primary_key: The key used to match incoming records against existing
            ones.
        date_columns: Keys whose raw values are parsed as dates.
        base_name: Name of the top-level array in structured documents.
        labels: Canonical key to human-readable header used on export. The
            order of this mapping is the export column order. When empty, all
            `keys` are exported under their canonical names.
        minimal_keys: Keys included in structured exports. When empty,
            the export uses the keys of `labels`.
    """

    name: str
    keys: tuple[str, ...] = field(converter=_as_tuple)
    key_map: dict[str, str] = field(factory=dict, converter=_as_mapping)
    required_keys: tuple[str, ...] = field(default=(), converter=_as_tuple)
    primary_key: str
    date_columns: tuple[str, ...] = field(default=(), converter=_as_tuple)
    base_name: str
    labels: dict[str, str] = field(factory=dict, converter=_as_mapping)
    minimal_keys: tuple[str, ...] = field(default=(), converter=_as_tuple)
    _folded: dict[str, str] = field(init=False, repr=False, eq=False)

    def __attrs_post_init__(self):
        if not self.keys:
            self._fail("declares no keys")
        key_set = set(self.keys)
        if len(key_set) != len(self.keys):
            self._fail("declares duplicate keys")
        if self.primary_key not in key_set:
            self._fail(
                "primary key %r is not one of its keys" % self.primary_key
            )

        for attr in ("required_keys", "date_columns", "minimal_keys"):
            unknown = [k for k in getattr(self, attr) if k not in key_set]
            if unknown:
                self._fail("%s references unknown keys %r" % (attr, unknown))
        unknown = [k for k in self.labels if k not in key_set]
        if unknown:
            self._fail("labels reference unknown keys %r" % unknown)

        if self.primary_key not in self.required_keys:
            object.__setattr__(
                self,
                "required_keys",
                (self.primary_key,) + self.required_keys,
            )
        if not self.labels:
            object.__setattr__(self, "labels", {k: k for k in self.keys})
        if not self.minimal_keys:
            object.__setattr__(self, "minimal_keys", tuple(self.labels))

        # Canonical keys first; aliases may override them, labels may not.
        folded: dict[str, str] = {}
        for key in self.keys:
            folded[fold_header(key)] = key
        for alias, target in self.key_map.items():
            if target not in key_set:
                self._fail(
                    "alias %r maps to unknown key %r" % (alias, target)
                )
            f_alias = fold_header(alias)
            previous = folded.get(f_alias)
            if (
                previous is not None
                and previous != target
                and f_alias not in (fold_header(k) for k in self.keys)
            ):
                self._fail(
                    "alias %r is ambiguous (%r and %r)"
                    % (alias, previous, target)
                )
            folded[f_alias] = target
        for label_key, label in self.labels.items():
            f_label = fold_header(label)
            if folded.setdefault(f_label, label_key) != label_key:
                self._fail(
                    "export label %r does not resolve back to %r"
                    % (label, label_key)
                )
        object.__setattr__(self, "_folded", folded)

    def _fail(self, msg: str):
        raise SchemaDefinitionError(
            "Schema %r %s" % (self.name, msg), schema_name=self.name
        )

    def resolve_header(self, header: Any) -> str | None:
        """Find the canonical key for an external header.

        The alias map is consulted first, then the header is checked against
        the canonical keys. Both lookups ignore case and repeated
        whitespace.

        Args:
            header: The header as found in the file.

        Returns:
            The canonical key or `None` if the header is not recognized.
        """
        if header is None:
            return None
        if not isinstance(header, str):
            header = str(header)
        exact = self.key_map.get(header)
        if exact is not None:
            return exact
        if not header.strip():
            return None
        return self._folded.get(fold_header(header))

    def export_keys(self) -> tuple[str, ...]:
        """Canonical keys in export column order."""
        return tuple(self.labels)

    def export_labels(self) -> list[str]:
        """The header row written at the top of spreadsheet exports."""
        return list(self.labels.values())


_registry: dict[str, RecordSchema] = {}


def register_schema(schema: RecordSchema) -> RecordSchema:
    """Add a schema to the process-wide registry.

    Raises:
        SchemaDefinitionError: if a different schema with the same name is
            already registered.
    """
    existing = _registry.get(schema.name)
    if existing is not None and existing != schema:
        raise SchemaDefinitionError(
            "A schema named %r is already registered" % schema.name,
            schema_name=schema.name,
        )
    _registry[schema.name] = schema
    logger.debug("Registered record schema %s", schema.name)
    return schema


def get_schema(name: str) -> RecordSchema:
    """Return the registered schema with the given name."""
    try:
        return _registry[name]
    except KeyError:
        raise UnknownSchemaError(name) from None


def schema_names() -> list[str]:
    """Names of all registered schemas, sorted."""
    return sorted(_registry)


def registered_schemas() -> Mapping[str, RecordSchema]:
    return dict(_registry)
