"""
Abstract store connector interface.

Every connector implements the same surface:

    database          → handle   the one logical database we talk to
    collection(name)  → handle   a named collection inside it
    ping()            → bool     connectivity check

Connectors handle configuration, client lifetime, and connectivity.
They know nothing about ids, codecs, or query plans;
that stays in adaptors/.
"""

from abc import ABC, abstractmethod


class StoreConnector(ABC):
    """
    Minimal document-store connector.

    Subclasses must implement two members:
      database — the live database handle (created on first access)
      ping     — connectivity test

    Everything else (id mapping, upsert emulation, plans) belongs in adaptors/.
    Connectors are plumbing. Adaptors are brains.
    """

    # ── Required ──────────────────────────────────────────────

    @property
    @abstractmethod
    def database(self):
        """
        The database handle, created lazily and reused afterwards.

        Raises the driver's own error if the client can't be built.
        """
        ...

    @abstractmethod
    def ping(self) -> bool:
        """
        Test connectivity. Returns True if the store answers.

        Must not raise. Returns False on any connection-layer failure.
        """
        ...

    # ── Optional ──────────────────────────────────────────────

    def collection(self, name: str):
        """Collection handle by name."""
        return self.database[name]

    def close(self):
        """Release the client. Default: nothing to release."""

    # ── Repr ──────────────────────────────────────────────────

    def __repr__(self):
        return f"<{self.__class__.__name__}>"
