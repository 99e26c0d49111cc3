from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator, MutableSet
from typing import TypeVar

import structlog

log = structlog.get_logger()

T = TypeVar("T")


class OrderedSet(MutableSet[str]):
    """Insertion-ordered set of names; iteration order drives prompt rendering order."""

    def __init__(self, items: Iterable[str] = ()):
        self._items: dict[str, None] = dict.fromkeys(items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, value: str) -> None:
        self._items[value] = None

    def discard(self, value: str) -> None:
        self._items.pop(value, None)

    def update(self, values: Iterable[str]) -> None:
        for value in values:
            self._items[value] = None

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"


class SessionState:
    """What has been disclosed to one agent so far in the conversation."""

    def __init__(
        self,
        agent_name: str,
        discovered_skills: Iterable[str] = (),
        loaded_toolsets: Iterable[str] = (),
        exposed_domain_tools: Iterable[str] = (),
    ):
        self.agent_name = agent_name
        self.discovered_skills = OrderedSet(discovered_skills)
        self.loaded_toolsets = OrderedSet(loaded_toolsets)
        self.exposed_domain_tools = OrderedSet(exposed_domain_tools)
        self.lock = threading.RLock()

    def snapshot(self) -> SessionState:
        """Return a detached copy taken under the session lock."""
        with self.lock:
            return SessionState(
                self.agent_name,
                self.discovered_skills,
                self.loaded_toolsets,
                self.exposed_domain_tools,
            )

    def to_dict(self) -> dict[str, object]:
        with self.lock:
            return {
                "agent_name": self.agent_name,
                "discovered_skills": list(self.discovered_skills),
                "loaded_toolsets": list(self.loaded_toolsets),
                "exposed_domain_tools": list(self.exposed_domain_tools),
            }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SessionState):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"SessionState({self.to_dict()!r})"


class SessionStore:
    """Per-engine map of agent name to SessionState.

    ``seed`` builds the initial-skills projection for an agent; it is called on
    first access and on reset. Creation, reset and ``update`` for one agent are
    serialized on that agent's lock.
    """

    def __init__(self, seed: Callable[[str], SessionState]):
        self._seed = seed
        self._sessions: dict[str, SessionState] = {}
        self._agent_locks: dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def _agent_lock(self, agent_name: str) -> threading.RLock:
        with self._lock:
            lock = self._agent_locks.get(agent_name)
            if lock is None:
                lock = self._agent_locks[agent_name] = threading.RLock()
            return lock

    def get(self, agent_name: str) -> SessionState | None:
        return self._sessions.get(agent_name)

    def get_or_create(self, agent_name: str) -> SessionState:
        session = self._sessions.get(agent_name)
        if session is not None:
            return session
        with self._agent_lock(agent_name):
            session = self._sessions.get(agent_name)
            if session is None:
                session = self._seed(agent_name)
                self._sessions[agent_name] = session
                log.info(
                    "session.created",
                    agent=agent_name,
                    skills=list(session.discovered_skills),
                    toolsets=list(session.loaded_toolsets),
                )
            return session

    def update(self, agent_name: str, mutate: Callable[[SessionState], T]) -> T:
        """Apply ``mutate`` to the agent's current session with no reset in between."""
        with self._agent_lock(agent_name):
            return mutate(self.get_or_create(agent_name))

    def reset(self, agent_name: str) -> SessionState:
        with self._agent_lock(agent_name):
            session = self._seed(agent_name)
            self._sessions[agent_name] = session
        log.info("session.reset", agent=agent_name)
        return session

    def __contains__(self, agent_name: object) -> bool:
        return agent_name in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
