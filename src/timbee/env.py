"""Environment variables — the shell's view of ``KEY=VALUE`` settings.

Every Unix process has an environment inherited from its parent.  The
shell reads ``HOME`` to know where ``cd`` goes with no argument, and
keeps ``PWD`` and ``OLDPWD`` up to date so ``cd -`` works and child
processes see the right directory.

Key design properties:
    - **A view, not a copy.**  ``Environment`` wraps a mutable mapping.
      The real shell wraps ``os.environ`` so children spawned with
      ``execvp`` inherit every change; tests wrap a plain dict.
    - **Strings only** — both keys and values are strings.
"""

import os
from collections.abc import MutableMapping


class Environment:
    """Get/set/delete access to a backing string mapping."""

    def __init__(self, backing: MutableMapping[str, str] | None = None) -> None:
        """Create an environment over *backing* (a fresh dict if omitted).

        Args:
            backing: The mapping to read and write.  It is used as-is,
                not copied.

        """
        self._vars: MutableMapping[str, str] = {} if backing is None else backing

    @classmethod
    def from_process(cls) -> "Environment":
        """Return an environment backed by this process's ``os.environ``."""
        return cls(os.environ)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value for *key*, or *default* if not set."""
        return self._vars.get(key, default)

    def set(self, key: str, value: str) -> None:
        """Set *key* to *value* (creates or overwrites)."""
        self._vars[key] = value

    def delete(self, key: str) -> None:
        """Remove *key* from the environment.

        Raises:
            KeyError: If *key* does not exist.

        """
        del self._vars[key]
