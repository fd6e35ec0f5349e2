"""Resolve ``$ref`` pointers against a document's ``components`` section.

OpenAPI documents use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition.  Rather than
deep-copying the whole document with every reference inlined, the visitor
builds a :class:`ComponentTable` once per document and resolves references
lazily, at the point where a schema, parameter, request body or path item is
actually needed.

Only references of the form ``#/components/<type>/<name>`` are registered;
anything else fails with :class:`~spectools.exceptions.InvalidReferenceError`.
A component may itself be a reference; chains are followed until a concrete
component is reached, and a chain that comes back to a reference it already
passed through raises
:class:`~spectools.exceptions.CyclicReferenceOrExcessiveSizeError`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from spectools.exceptions import CyclicReferenceOrExcessiveSizeError, InvalidReferenceError

logger = logging.getLogger(__name__)

_REF_KEY = "$ref"


def is_reference(node: Any) -> bool:
    """Return True if *node* is a Reference Object (a mapping with ``$ref``)."""
    return isinstance(node, dict) and isinstance(node.get(_REF_KEY), str)


def component_ref(group: str, name: str) -> str:
    """Build the reference string designating a component.

    RFC 6901 escaping is applied to the name (``~`` as ``~0``, ``/`` as
    ``~1``) so that the key matches what a document writes in ``$ref``.
    """
    escaped = name.replace("~", "~0").replace("/", "~1")
    return f"#/components/{group}/{escaped}"


class ComponentTable:
    """Lookup table from reference string to raw component.

    Built once at the start of a visit and read-only afterwards.

    Args:
        entries: Mapping of reference string to component.

    Example::

        table = ComponentTable.from_components(raw["components"])
        pet = table.resolve("#/components/schemas/Pet")
    """

    def __init__(self, entries: Mapping[str, Any]) -> None:
        self._entries = dict(entries)

    @classmethod
    def from_components(cls, components: Optional[Mapping[str, Any]]) -> ComponentTable:
        """Register every entry of every mapping-valued component group.

        Groups whose value is not a mapping are skipped, so unknown or
        malformed component kinds do not stop the visit.

        Args:
            components: The document's ``components`` object, or ``None``.
        """
        entries: dict[str, Any] = {}
        for group, members in (components or {}).items():
            if not isinstance(members, dict):
                logger.debug("Skipping non-mapping component group '%s'", group)
                continue
            for name, component in members.items():
                entries[component_ref(group, name)] = component
        logger.debug("Registered %d components", len(entries))
        return cls(entries)

    def __contains__(self, ref: object) -> bool:
        return ref in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, ref: str) -> Any:
        """Return the concrete component designated by *ref*.

        References to references are followed until a non-reference
        component is found.

        Raises:
            InvalidReferenceError: If a reference in the chain is not
                registered.
            CyclicReferenceOrExcessiveSizeError: If the chain revisits a
                reference.
        """
        seen: list[str] = []
        current = ref
        while True:
            if current in seen:
                chain = " -> ".join([*seen, current])
                raise CyclicReferenceOrExcessiveSizeError(
                    f"Cyclic $ref chain: {chain}", ref=current
                )
            seen.append(current)
            try:
                component = self._entries[current]
            except KeyError:
                raise InvalidReferenceError(current) from None
            if not is_reference(component):
                return component
            current = component[_REF_KEY]

    def resolve_node(self, node: Any) -> Any:
        """Return *node* itself, or its target when it is a Reference Object."""
        if is_reference(node):
            return self.resolve(node[_REF_KEY])
        return node
