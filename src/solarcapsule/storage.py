"""Capsule storage module for Solar Capsule.

The engine only needs append-only creation and simple lookups from its store.
``MemoryStore`` keeps records in process memory; ``JsonStore`` additionally
persists them to a JSON file so the command-line tool can keep state between
runs.
"""

import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, List, Optional

from solarcapsule.logger import get_logger
from solarcapsule.matching import order_newest
from solarcapsule.models import Capsule, Reply
from solarcapsule.solar import as_utc

logger = get_logger(__name__)

CapsulePredicate = Callable[[Capsule], bool]


class StorageError(Exception):
    """Exception raised for storage-related errors."""

    pass


class CapsuleNotFoundError(StorageError):
    """Exception raised when a capsule id does not exist."""

    pass


class CapsuleStore(ABC):
    """Interface the engine expects from persistent storage."""

    @abstractmethod
    def create_capsule(self, fields: dict) -> Capsule:
        """Store a new capsule and return it with its assigned id."""

    @abstractmethod
    def get_capsule(self, capsule_id: int) -> Optional[Capsule]:
        """Look up a capsule by id."""

    @abstractmethod
    def find_capsules(
        self, predicate: CapsulePredicate, newest_first: bool = True
    ) -> List[Capsule]:
        """Return capsules matching ``predicate``, ordered by creation time."""

    @abstractmethod
    def create_reply(self, fields: dict) -> Reply:
        """Store a new reply and return it with its assigned id."""

    @abstractmethod
    def find_replies(self, capsule_id: int) -> List[Reply]:
        """Return a capsule's replies, oldest first."""

    def count_replies(self, capsule_id: int) -> int:
        """Number of replies to a capsule."""
        return len(self.find_replies(capsule_id))


class MemoryStore(CapsuleStore):
    """In-process capsule store."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._capsules: Dict[int, Capsule] = {}
        self._replies: Dict[int, Reply] = {}
        self._next_capsule_id = 1
        self._next_reply_id = 1
        self._lock = threading.Lock()

    def create_capsule(self, fields: dict) -> Capsule:
        with self._lock:
            capsule = Capsule(id=self._next_capsule_id, **fields)
            self._capsules[capsule.id] = capsule
            try:
                self._committed()
            except StorageError:
                del self._capsules[capsule.id]
                raise
            self._next_capsule_id += 1
        return capsule

    def get_capsule(self, capsule_id: int) -> Optional[Capsule]:
        return self._capsules.get(capsule_id)

    def find_capsules(
        self, predicate: CapsulePredicate, newest_first: bool = True
    ) -> List[Capsule]:
        matched = order_newest(c for c in list(self._capsules.values()) if predicate(c))
        if not newest_first:
            matched.reverse()
        return matched

    def create_reply(self, fields: dict) -> Reply:
        with self._lock:
            reply = Reply(id=self._next_reply_id, **fields)
            self._replies[reply.id] = reply
            try:
                self._committed()
            except StorageError:
                del self._replies[reply.id]
                raise
            self._next_reply_id += 1
        return reply

    def find_replies(self, capsule_id: int) -> List[Reply]:
        replies = [r for r in list(self._replies.values()) if r.capsule_id == capsule_id]
        return sorted(replies, key=lambda r: (as_utc(r.created_at), r.id))

    def _committed(self) -> None:
        """Hook run under the write lock after every successful create."""


class JsonStore(MemoryStore):
    """Capsule store persisted to a single JSON file."""

    def __init__(self, path: Path):
        """Initialize the store, loading existing records from ``path``.

        Args:
            path: JSON file holding the store.

        Raises:
            StorageError: If the file exists but cannot be read.
        """
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        """Load records from the store file."""
        if not self.path.exists():
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StorageError(f"Cannot read capsule store {self.path}: {e}")

        try:
            for item in data.get("capsules", []):
                capsule = Capsule.from_dict(item)
                self._capsules[capsule.id] = capsule
            for item in data.get("replies", []):
                reply = Reply.from_dict(item)
                self._replies[reply.id] = reply
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed record in capsule store {self.path}: {e}")

        self._next_capsule_id = max(self._capsules, default=0) + 1
        self._next_reply_id = max(self._replies, default=0) + 1
        logger.debug(
            f"Loaded {len(self._capsules)} capsule(s) and "
            f"{len(self._replies)} reply(ies) from {self.path}"
        )

    def _committed(self) -> None:
        """Write all records to the store file."""
        data = {
            "capsules": [c.to_dict() for c in self._capsules.values()],
            "replies": [r.to_dict() for r in self._replies.values()],
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write capsule store {self.path}: {e}")
