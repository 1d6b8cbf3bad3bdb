"""Process-local name to schema registry."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from schemacraft.errors import MissingSchemaError
from schemacraft.nodes import DEFAULT_REF_PREFIX, SchemaNode, SchemaRef

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Write-once store of named schemas.

    A name is stored at most once; ``ensure`` returns the stored node without
    calling the builder again. Entries written inside :meth:`transaction` are
    dropped if the block raises.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, SchemaNode] = {}
        self._lock = threading.RLock()
        self._journal: list[list[str]] = []

    def ensure(self, name: str, builder: Callable[[], SchemaNode]) -> SchemaNode:
        with self._lock:
            existing = self._schemas.get(name)
            if existing is not None:
                return existing
            node = builder()
            # The builder may have registered the name itself while recursing.
            existing = self._schemas.get(name)
            if existing is not None:
                return existing
            self._store(name, node)
            return node

    def put(self, name: str, node: SchemaNode) -> SchemaNode:
        """Store ``node`` unless ``name`` is taken; return the stored node."""
        with self._lock:
            existing = self._schemas.get(name)
            if existing is not None:
                return existing
            self._store(name, node)
            return node

    def _store(self, name: str, node: SchemaNode) -> None:
        self._schemas[name] = node
        if self._journal:
            self._journal[-1].append(name)
        logger.debug("Registered schema %s", name)

    def get(self, name: str) -> SchemaNode | None:
        return self._schemas.get(name)

    def exists(self, name: str) -> bool:
        return name in self._schemas

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def names(self) -> list[str]:
        return list(self._schemas)

    def reference(self, name: str, *, inline: bool = False, requester: str | None = None) -> SchemaNode:
        """Deep copy of the stored node when ``inline``, else a ``SchemaRef``."""
        node = self._schemas.get(name)
        if node is None:
            raise MissingSchemaError(name, requester=requester)
        if inline:
            return node.clone()
        return SchemaRef(name=name)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            self._journal.append([])
            try:
                yield
            except BaseException:
                written = self._journal.pop()
                for name in written:
                    self._schemas.pop(name, None)
                if written:
                    logger.debug("Rolled back schemas: %s", ", ".join(written))
                raise
            written = self._journal.pop()
            if self._journal:
                self._journal[-1].extend(written)

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        return {name: node.to_dict(ref_prefix) for name, node in self._schemas.items()}
