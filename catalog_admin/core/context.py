"""Request-scoped context shared by the catalog services."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuthContext:
    """Whether an authenticated operator is present."""

    is_authenticated: bool = False
    operator: str = ""

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls(is_authenticated=False)

    @classmethod
    def operator_session(cls, operator: str = "admin") -> "AuthContext":
        return cls(is_authenticated=True, operator=operator)
