"""Process-wide cache of compiled regular expressions.

Entries are keyed by pattern text and flags and never change once inserted,
so concurrent parse calls can share them freely.
"""

import re
import threading

_cache: dict[tuple[str, str, int], re.Pattern[str]] = {}
_lock = threading.Lock()


def _get(kind: str, pattern: str, flags: int) -> re.Pattern[str]:
    key = (kind, pattern, flags)
    compiled = _cache.get(key)
    if compiled is not None:
        return compiled

    with _lock:
        compiled = _cache.get(key)
        if compiled is None:
            source = rf"\b{re.escape(pattern)}\b" if kind == "wb" else pattern
            compiled = re.compile(source, flags)
            _cache[key] = compiled
    return compiled


def word_boundary_regex(keyword: str, flags: int = re.IGNORECASE) -> re.Pattern[str]:
    """Regex matching ``keyword`` as a whole word (or whole phrase)."""
    return _get("wb", keyword, flags)


def pattern_regex(pattern: str, flags: int = re.IGNORECASE) -> re.Pattern[str]:
    """Compiled form of an arbitrary pattern."""
    return _get("pat", pattern, flags)


def cache_size() -> int:
    return len(_cache)
