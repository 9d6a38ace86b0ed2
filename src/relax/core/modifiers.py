"""
Request Modifiers
=================

Per-call switches for the optional behaviour of ``Client.do`` and
``Client.get``.

Example:
    >>> client.get(url, use_cache(), use_limiter())
    >>> modifiers(use_cache(), use_cache(False))
    Modifiers(use_cache=False, use_limiter=False)
"""

from dataclasses import dataclass, replace
from typing import Callable


@dataclass(frozen=True)
class Modifiers:
    """
    Optional behaviour requested for a single call.

    Attributes:
        use_cache: Read from and populate the client cache.
        use_limiter: Wait on the client rate limiter before sending.
    """

    use_cache: bool = False
    use_limiter: bool = False


Modifier = Callable[[Modifiers], Modifiers]


def use_cache(use: bool = True) -> Modifier:
    """Request (or, with ``False``, cancel) cache use for a call."""

    def apply(m: Modifiers) -> Modifiers:
        return replace(m, use_cache=use)

    return apply


def use_limiter(use: bool = True) -> Modifier:
    """Request (or, with ``False``, cancel) rate limiting for a call."""

    def apply(m: Modifiers) -> Modifiers:
        return replace(m, use_limiter=use)

    return apply


def modifiers(*mods: Modifier) -> Modifiers:
    """
    Build the modifiers for a call.

    Modifiers are applied in order, so a later modifier overrides an
    earlier one for the same flag. With no modifiers every flag is off.
    """
    result = Modifiers()
    for mod in mods:
        result = mod(result)
    return result
