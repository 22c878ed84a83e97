"""Invariant markers for annotest internals."""

from __future__ import annotations

from typing import NoReturn

from annotest.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The env payload is attached to the raised exception for diagnosis.
    """
    if env:
        details = ", ".join(f"{key}={value!r}" for key, value in sorted(env.items()))
        raise NeverThrown(f"{reason or 'never() reached'} ({details})", env=env)
    raise NeverThrown(reason or "never() reached")
