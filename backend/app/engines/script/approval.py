"""
Approval registry for unrestricted scripts.

Restricted scripts run under RestrictedPython and never need approval. A script
that runs unrestricted must first be approved: an administrator configuring it
approves it implicitly; anyone else leaves it pending until an administrator
approves its hash.
"""

import hashlib
import logging
import threading
from collections.abc import Iterable

_log = logging.getLogger(__name__)


class UnapprovedScriptError(PermissionError):
    """Raised when an unrestricted script has not been approved."""

    def __init__(self, script_hash: str) -> None:
        super().__init__(
            f"script not yet approved for use outside the sandbox ({script_hash})"
        )
        self.script_hash = script_hash


def hash_script(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class ScriptApproval:
    """In-memory set of approved script hashes plus the pending queue."""

    def __init__(self, approved: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._approved: set[str] = {h.lower() for h in approved}
        self._pending: dict[str, str] = {}

    def preapprove(self, text: str) -> str:
        h = hash_script(text)
        with self._lock:
            self._approved.add(h)
            self._pending.pop(h, None)
        return h

    def configuring(self, text: str, *, approver_is_admin: bool) -> None:
        """Record a script being saved or tested from a configuration form."""
        h = hash_script(text)
        with self._lock:
            if h in self._approved:
                return
            if approver_is_admin:
                self._approved.add(h)
                self._pending.pop(h, None)
                _log.info("Script %s approved by administrator", h)
                return
            if h not in self._pending:
                self._pending[h] = text
                _log.info("Script %s queued for approval", h)

    def approve(self, script_hash: str) -> bool:
        """
        Approve a pending script. Returns False if no script with this hash is
        pending, including one that is already approved.
        """
        h = script_hash.lower()
        with self._lock:
            if self._pending.pop(h, None) is None:
                return False
            self._approved.add(h)
        _log.info("Script %s approved", h)
        return True

    def pending(self) -> dict[str, str]:
        with self._lock:
            return dict(self._pending)

    def is_approved(self, text: str) -> bool:
        with self._lock:
            return hash_script(text) in self._approved

    def is_hash_approved(self, script_hash: str) -> bool:
        with self._lock:
            return script_hash.lower() in self._approved

    def check(self, text: str) -> None:
        if not self.is_approved(text):
            raise UnapprovedScriptError(hash_script(text))
