"""Dialect registry.

``DialectRegistry`` maps backend names to immutable
:class:`~dialectql.schema.dialect.DialectDescriptor` instances.  Descriptors
are registered once at start-up and shared read-only by every query for
that backend.

Usage::

    from dialectql.compile.registry import DialectRegistry

    DialectRegistry.register("legacydb", {"true_literal": "1", "false_literal": "0"})
    descriptor = DialectRegistry.get("legacydb")

Overrides are applied on top of ``base`` (another registered dialect name
or descriptor); without a base they apply on top of the defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

import structlog

from dialectql.errors import ConfigurationError
from dialectql.schema.dialect import DialectDescriptor

logger = structlog.get_logger()


class DialectRegistry:
    """Registry mapping dialect names to :class:`DialectDescriptor` instances.

    Example::

        DialectRegistry.register_descriptor(hsqldb.DESCRIPTOR)
        descriptor = DialectRegistry.get("hsqldb")
    """

    _dialects: ClassVar[dict[str, DialectDescriptor]] = {}

    @classmethod
    def register(
        cls,
        name: str,
        overrides: Mapping[str, Any] | None = None,
        base: str | DialectDescriptor | None = None,
    ) -> DialectDescriptor:
        """Build and register a descriptor from ``overrides``.

        Args:
            name: The dialect name (e.g. ``"hsqldb"``).
            overrides: Descriptor fields to set.
            base: Registered name or descriptor to start from.

        Returns:
            The registered descriptor.

        Raises:
            ConfigurationError: If ``base`` is unknown or an override key is
                not a descriptor field.
        """
        if base is None:
            start = DialectDescriptor(name=name)
        elif isinstance(base, DialectDescriptor):
            start = base
        else:
            start = cls.get(base)
        descriptor = start.evolve(name=name, **dict(overrides or {}))
        return cls.register_descriptor(descriptor)

    @classmethod
    def register_descriptor(cls, descriptor: DialectDescriptor) -> DialectDescriptor:
        """Register an already-built descriptor under its own name."""
        cls._dialects[descriptor.name] = descriptor
        logger.debug("dialect registered", dialect=descriptor.name)
        return descriptor

    @classmethod
    def get(cls, name: str) -> DialectDescriptor:
        """Return the descriptor registered for ``name``.

        Raises:
            ConfigurationError: If no dialect is registered for ``name``.
        """
        descriptor = cls._dialects.get(name)
        if descriptor is None:
            registered = sorted(cls._dialects)
            raise ConfigurationError(
                f"Unknown dialect: '{name}'. Registered dialects: {registered}."
            )
        return descriptor

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._dialects.pop(name, None)

    @classmethod
    def registered_dialects(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(cls._dialects)
