"""
FDSN web-service wire formats shared by the upstream client and the local
protocol server.

Modules:
    timecodec: Timestamp parsing/formatting for the text and XML formats
    wildcard: ``*`` / ``?`` code pattern matching
    text: Pipe-delimited text headers and row formatting
    stationxml: Minimal StationXML 1.1 document builder

Usage:
    from protocol.timecodec import parse_time, format_time
    from protocol.wildcard import match, match_any
"""

__all__ = [
    "timecodec",
    "wildcard",
    "text",
    "stationxml",
]
