"""
Client-side session identity.

A session id is minted once per device and reused for every cart and
history call. It is not a credential: anyone presenting it can read and
write that session's cart and history.
"""

import random
import string
import time
from pathlib import Path
from typing import Optional, Union

import structlog

logger = structlog.get_logger(__name__)

_ALPHABET = string.digits + string.ascii_lowercase


def new_session_id() -> str:
    suffix = "".join(random.choice(_ALPHABET) for _ in range(9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class SessionFile:
    """Persists the session id in a local file, the way a browser keeps it in local storage."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        value = self.path.read_text(encoding="utf-8").strip()
        return value or None

    def get_or_create(self) -> str:
        session_id = self.load()
        if session_id is None:
            session_id = new_session_id()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(session_id, encoding="utf-8")
            logger.debug("session_minted", session_id=session_id)
        return session_id

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
