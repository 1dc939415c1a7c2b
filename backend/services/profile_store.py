"""Read access to student profile documents.

The document store itself lives outside this service; routes only read a
few profile fields to personalize prompts.
"""

from typing import Any, Protocol


class ProfileStore(Protocol):
    async def get_student(self, uid: str) -> dict[str, Any] | None: ...


class InMemoryProfileStore:
    def __init__(self, students: dict[str, dict[str, Any]] | None = None):
        self._students = dict(students or {})

    async def get_student(self, uid: str) -> dict[str, Any] | None:
        student = self._students.get(uid)
        return dict(student) if student is not None else None

    def put_student(self, uid: str, data: dict[str, Any]) -> None:
        self._students[uid] = dict(data)
