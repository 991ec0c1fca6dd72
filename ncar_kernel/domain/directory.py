"""
User directory (``ncar_kernel.domain.directory``).

Responsibility
--------------
Read-only view over the externally supplied user list, with the
``reports_to`` relation indexed for KPI rollups.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  The directory is built
once per snapshot by collaborators and handed to the KPI engines; it is
never mutated by the core.

Invariants enforced
-------------------
* User ids are unique (``DuplicateUserError``).
* The ``reports_to`` graph is acyclic (``ReportingCycleError``), checked
  at construction so recursive rollups always terminate.

Failure modes
-------------
* Dangling ``reports_to`` references (pointing at an id not in the
  directory) are tolerated: the user is treated as a root and a warning
  is logged.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ncar_kernel.domain.values import Designation, Role
from ncar_kernel.exceptions import DuplicateUserError, ReportingCycleError
from ncar_kernel.logging_config import get_logger

logger = get_logger("domain.directory")


@dataclass(frozen=True)
class User:
    """A person known to the system.

    Findings reference users by ``name`` (auditor/auditee), the reporting
    relation references them by ``id``.
    """
    id: str
    name: str
    role: Role
    dept: str
    designation: Designation
    email: str = ""
    reports_to: str | None = None


class UserDirectory:
    """
    Indexed, validated snapshot of users.

    Contract:
        Built from any iterable of ``User``; iteration preserves input order.

    Guarantees:
        - ``direct_reports`` and ``subordinates`` never loop.
        - ``chain_of_command`` ends at a root (no superior, or a dangling one).
    """

    def __init__(self, users: Iterable[User]):
        self._users: tuple[User, ...] = tuple(users)
        self._by_id: dict[str, User] = {}
        for user in self._users:
            if user.id in self._by_id:
                raise DuplicateUserError(user.id)
            self._by_id[user.id] = user

        self._reports: dict[str, list[str]] = {}
        for user in self._users:
            if user.reports_to is None:
                continue
            if user.reports_to not in self._by_id:
                logger.warning(
                    "directory_dangling_reports_to",
                    extra={"user_id": user.id, "reports_to": user.reports_to},
                )
                continue
            self._reports.setdefault(user.reports_to, []).append(user.id)

        self._check_acyclic()
        logger.debug(
            "directory_loaded",
            extra={"user_count": len(self._users)},
        )

    def _check_acyclic(self) -> None:
        # Each user has at most one superior, so following reports_to from
        # every node either reaches a root or revisits a node on the path.
        settled: set[str] = set()
        for user in self._users:
            path: list[str] = []
            on_path: set[str] = set()
            current: str | None = user.id
            while current is not None and current not in settled:
                if current in on_path:
                    start = path.index(current)
                    raise ReportingCycleError(path[start:] + [current])
                path.append(current)
                on_path.add(current)
                superior = self._by_id[current].reports_to
                current = superior if superior in self._by_id else None
            settled.update(path)

    def __iter__(self) -> Iterator[User]:
        return iter(self._users)

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._by_id

    @property
    def users(self) -> tuple[User, ...]:
        return self._users

    def get(self, user_id: str) -> User | None:
        return self._by_id.get(user_id)

    def with_designation(self, designation: Designation) -> tuple[User, ...]:
        return tuple(u for u in self._users if u.designation == designation)

    def direct_reports(self, user_id: str) -> tuple[User, ...]:
        return tuple(self._by_id[i] for i in self._reports.get(user_id, ()))

    def subordinates(self, user_id: str) -> tuple[User, ...]:
        """All users transitively reporting to ``user_id``, breadth-first."""
        result: list[User] = []
        queue = list(self._reports.get(user_id, ()))
        while queue:
            uid = queue.pop(0)
            result.append(self._by_id[uid])
            queue.extend(self._reports.get(uid, ()))
        return tuple(result)

    def chain_of_command(self, user_id: str) -> tuple[User, ...]:
        """Superiors of ``user_id``, nearest first."""
        chain: list[User] = []
        user = self._by_id.get(user_id)
        while user is not None and user.reports_to in self._by_id:
            user = self._by_id[user.reports_to]
            chain.append(user)
        return tuple(chain)
