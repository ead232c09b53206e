"""
FDSN wildcard matching for network/station/location/channel codes.

Supported patterns:
    ``*`` or empty   matches anything
    ``BH*``, ``*Z``  one ``*``: prefix and suffix must both match
    ``BH?``          ``?`` matches exactly one character
    ``BHZ``          exact match

Patterns with more than one ``*`` are compared literally.
"""

from typing import Iterable


def match(pattern: str, candidate: str) -> bool:
    """Return True when candidate satisfies a single wildcard pattern"""
    if pattern == "*" or pattern == "":
        return True

    if pattern.count("*") == 1:
        prefix, suffix = pattern.split("*")
        return candidate.startswith(prefix) and candidate.endswith(suffix)

    if "?" in pattern and "*" not in pattern:
        if len(pattern) != len(candidate):
            return False
        return all(p == "?" or p == c for p, c in zip(pattern, candidate))

    return pattern == candidate


def match_any(patterns: Iterable[str], candidate: str) -> bool:
    """OR over a pattern list; an empty list matches everything"""
    patterns = list(patterns)
    if not patterns:
        return True
    return any(match(p, candidate) for p in patterns)


def match_location(patterns: Iterable[str], location_code: str) -> bool:
    """
    Location matching with the FDSN ``--`` convention.

    An empty stored location code is written ``--`` on the wire, so a
    ``--`` pattern selects it as well.
    """
    patterns = list(patterns)
    if match_any(patterns, location_code):
        return True
    return location_code == "" and "--" in patterns
