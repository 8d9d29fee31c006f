"""Recipients, recipient groups and the group registry.

Groups and the registry may be mutated from any thread while a broadcast
is iterating them. Both hand out snapshots, so a broadcast sees either the
old or the new membership of a group but never fails because of a change.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class Recipient(Protocol):
    """Protocol for message recipients."""

    name: str
    interactive: bool
    ignoring: bool
    ignoring_spam: bool
    rich_text: bool


class RecipientGroup(Protocol):
    """Protocol for named collections of recipients."""

    name: str

    def recipients(self) -> Iterable[Recipient]:
        """Return the current members of the group."""
        ...


@dataclass(eq=False)
class ChatRecipient:
    """An interactive recipient such as a connected player.

    Attributes:
        name: Display name.
        ignoring: Opted out of all ignorable messages.
        ignoring_spam: Opted out of spammy messages only.
        rich_text: Whether the recipient can display styled segments.
    """

    name: str
    ignoring: bool = False
    ignoring_spam: bool = False
    rich_text: bool = True
    interactive: bool = True


@dataclass(eq=False)
class ConsoleRecipient:
    """The server console. Never filtered, always receives plain text."""

    name: str = "CONSOLE"
    ignoring: bool = False
    ignoring_spam: bool = False
    rich_text: bool = False
    interactive: bool = False


class StaticRecipientGroup:
    """A recipient group with explicit, thread-safe membership."""

    def __init__(self, name: str, members: Iterable[Recipient] = ()) -> None:
        """Initialize the group.

        Args:
            name: Group name.
            members: Initial members.
        """
        self.name = name
        self._members: set[Recipient] = set(members)
        self._lock = threading.Lock()

    def add(self, recipient: Recipient) -> bool:
        """Add a recipient. Returns True if it was not already a member."""
        with self._lock:
            if recipient in self._members:
                return False
            self._members.add(recipient)
            return True

    def remove(self, recipient: Recipient) -> bool:
        """Remove a recipient. Returns True if it was a member."""
        with self._lock:
            if recipient not in self._members:
                return False
            self._members.remove(recipient)
            return True

    def recipients(self) -> list[Recipient]:
        """Return a snapshot of the current members."""
        with self._lock:
            return list(self._members)

    def __len__(self) -> int:
        with self._lock:
            return len(self._members)

    def __contains__(self, recipient: object) -> bool:
        with self._lock:
            return recipient in self._members

    def __repr__(self) -> str:
        return f"StaticRecipientGroup(name={self.name!r}, members={len(self)})"


class RecipientRegistry:
    """Set of recipient groups addressed by broadcasts.

    The registry is owned by a dispatch engine rather than being global, so
    several engines can run side by side in one process.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._groups: set[RecipientGroup] = set()
        self._lock = threading.Lock()

    def add_group(self, group: RecipientGroup) -> bool:
        """Register a group. Returns True if it was not registered yet."""
        with self._lock:
            if group in self._groups:
                return False
            self._groups.add(group)
        logger.debug(f"Registered recipient group {group.name}")
        return True

    def remove_group(self, group: RecipientGroup) -> bool:
        """Unregister a group. Returns True if it was registered."""
        with self._lock:
            if group not in self._groups:
                return False
            self._groups.remove(group)
        logger.debug(f"Unregistered recipient group {group.name}")
        return True

    def groups(self) -> list[RecipientGroup]:
        """Return a snapshot of the registered groups."""
        with self._lock:
            return list(self._groups)

    def recipients(self) -> Iterator[Recipient]:
        """Yield every member of every registered group once.

        A recipient present in several groups is yielded only for the first
        group it appears in. A group that fails while being read is logged
        and skipped.
        """
        seen: dict[int, Recipient] = {}
        for group in self.groups():
            try:
                members = list(group.recipients())
            except Exception as e:
                logger.warning(f"Failed to read recipient group {group.name}: {e}")
                continue

            for recipient in members:
                if id(recipient) in seen:
                    continue
                seen[id(recipient)] = recipient
                yield recipient

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)
