"""
Device classification from the ``User-Agent`` header — framework-agnostic.

Classification is an ordered decision table of ``(predicate, device_type)``
rules; the first matching rule wins and anything unmatched is ``desktop``.
Bot rules come first because several crawler signatures also carry
OS-like tokens (``Android``, ``iPhone``).
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

DEVICE_BOT = "bot"
DEVICE_TABLET = "tablet"
DEVICE_MOBILE = "mobile"
DEVICE_DESKTOP = "desktop"

BOT_SIGNATURES: tuple[str, ...] = (
    "bot",
    "crawler",
    "spider",
    "slurp",
    "curl",
    "wget",
    "python",
    "go-http",
)
TABLET_SIGNATURES: tuple[str, ...] = ("ipad", "tablet", "kindle")
MOBILE_SIGNATURES: tuple[str, ...] = (
    "mobile",
    "android",
    "iphone",
    "ipod",
    "windows phone",
)

Rule = tuple[Callable[[str], bool], str]


def _contains_any(signatures: Sequence[str]) -> Callable[[str], bool]:
    def predicate(lowered_ua: str) -> bool:
        return any(token in lowered_ua for token in signatures)

    return predicate


DEVICE_RULES: tuple[Rule, ...] = (
    (_contains_any(BOT_SIGNATURES), DEVICE_BOT),
    (_contains_any(TABLET_SIGNATURES), DEVICE_TABLET),
    (_contains_any(MOBILE_SIGNATURES), DEVICE_MOBILE),
)


def classify_device(
    user_agent: Optional[str], rules: Sequence[Rule] = DEVICE_RULES
) -> str:
    """Return ``bot``, ``tablet``, ``mobile`` or ``desktop`` for *user_agent*.

    Total and deterministic: ``None`` and the empty string map to
    ``desktop``.

    Args:
        user_agent: The raw ``User-Agent`` header value.
        rules: Ordered decision table; exposed for tests.
    """
    lowered = (user_agent or "").lower()
    for predicate, device_type in rules:
        if predicate(lowered):
            return device_type
    return DEVICE_DESKTOP
