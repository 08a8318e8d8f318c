"""
Reference registry mapping global identifiers to registration records.

The registry is the only shared mutable state of a build. It is written by
the identity registrar during phase 1 and read by the resolvers during
phase 2.

Design decisions:
- Instance-based (not global state): one registry per BuildContext, so
  repeated builds and tests never leak identities into each other
- Writes are serialised with a lock; phase 1 may parse files in parallel
- freeze() is the barrier between the phases: writes fail afterwards,
  reads fail before it
- A generation counter tells records written by the current build apart
  from stale records left by an earlier build on the same context
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field

from docref.exceptions import PhaseOrderError
from docref.models import RegistrationRecord

logger = logging.getLogger(__name__)


@dataclass
class ReferenceRegistry:
    """Registry of global identifiers.

    Example:
        registry = ReferenceRegistry()
        registry.begin_generation()
        registry.put(RegistrationRecord("start", "/guides/a", Path("guides/a.md")))
        registry.freeze()

        record = registry.lookup("start")
    """

    _records: dict[str, RegistrationRecord] = dataclass_field(default_factory=dict)
    _frozen: bool = False
    _generation: int = 0
    _lock: threading.Lock = dataclass_field(default_factory=threading.Lock, repr=False)

    # -------------------------------------------------------------------------
    # Phase control
    # -------------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def generation(self) -> int:
        return self._generation

    def begin_generation(self) -> int:
        """Open the registry for a new registration phase.

        Existing records are kept; they become stale and may be replaced
        silently by the new generation.

        Returns:
            The new generation number
        """
        with self._lock:
            self._frozen = False
            self._generation += 1
            logger.debug(
                "Registry generation %d started (%d existing records)",
                self._generation,
                len(self._records),
            )
            return self._generation

    def freeze(self) -> None:
        """Close the registration phase. The registry is read-only afterwards."""
        with self._lock:
            self._frozen = True
        logger.debug("Registry frozen with %d records", len(self._records))

    def _check_writable(self) -> None:
        if self._frozen:
            raise PhaseOrderError(
                "Registry is frozen: identities cannot be registered during link resolution"
            )

    # -------------------------------------------------------------------------
    # Writes (phase 1)
    # -------------------------------------------------------------------------

    def put(self, record: RegistrationRecord) -> RegistrationRecord | None:
        """Insert or overwrite the record for its identifier.

        Args:
            record: Record to store; its generation is set to the current one

        Returns:
            The record previously stored under the identifier, if any
        """
        with self._lock:
            self._check_writable()
            previous = self._records.get(record.identifier)
            self._records[record.identifier] = replace(record, generation=self._generation)
        logger.debug("Registered %s -> %s", record.identifier, record.canonical_path)
        return previous

    def remove_path(self, canonical_path: str, *, keep: str | None = None) -> list[str]:
        """Remove every record bound to a canonical path.

        Args:
            canonical_path: Path whose records should go
            keep: Identifier to leave in place

        Returns:
            Identifiers that were removed
        """
        with self._lock:
            self._check_writable()
            removed = [
                identifier
                for identifier, record in self._records.items()
                if record.canonical_path == canonical_path and identifier != keep
            ]
            for identifier in removed:
                del self._records[identifier]
        for identifier in removed:
            logger.debug("Dropped stale identifier %s for %s", identifier, canonical_path)
        return removed

    def prune_stale(self) -> list[str]:
        """Remove records not re-registered during the current generation.

        Called at the end of phase 1 so identities of deleted files stop
        resolving.

        Returns:
            Identifiers that were removed
        """
        with self._lock:
            self._check_writable()
            stale = [
                identifier
                for identifier, record in self._records.items()
                if record.generation < self._generation
            ]
            for identifier in stale:
                del self._records[identifier]
        if stale:
            logger.info("Pruned %d stale identifier(s): %s", len(stale), ", ".join(stale))
        return stale

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, identifier: str) -> RegistrationRecord | None:
        """Get a record in any phase (used by the registrar itself)."""
        return self._records.get(identifier)

    def lookup(self, identifier: str) -> RegistrationRecord | None:
        """Resolve an identifier during phase 2.

        Raises:
            PhaseOrderError: If registration has not finished yet
        """
        if not self._frozen:
            raise PhaseOrderError(
                f"Cannot resolve {identifier!r}: identity registration has not completed",
                details={"identifier": identifier},
            )
        return self._records.get(identifier)

    def all(self) -> list[RegistrationRecord]:
        """Get all records sorted by identifier."""
        return sorted(self._records.values(), key=lambda r: r.identifier)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __iter__(self) -> Iterator[RegistrationRecord]:
        return iter(self.all())
