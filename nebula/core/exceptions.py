class NebulaError(Exception):
    """Base exception for stream resolution errors."""

    def __init__(self, message: str, display_message: str = None):
        self.message = message
        self.display_message = display_message or message
        super().__init__(self.message)


class UnsupportedKind(NebulaError):
    """Raised when the requested content kind is neither movie nor series."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(
            f"Unsupported content kind: {kind}",
            "Only movie and series streams are supported.",
        )


class MalformedIdentifier(NebulaError):
    """Raised when a media id is not a tt id or has a bad season/episode suffix."""

    def __init__(self, media_id: str, reason: str = None):
        self.media_id = media_id
        super().__init__(
            f"Malformed media id {media_id!r}{f': {reason}' if reason else ''}",
            "Invalid stream ID format.",
        )


class SearchBackendError(NebulaError):
    """Raised when the torrent index cannot be searched (timeout, bad status, GraphQL errors)."""


class MetadataError(NebulaError):
    """Raised when the title/year lookup fails."""


class DebridError(NebulaError):
    """Base exception for debrid-related errors."""

    def __init__(self, debrid_name: str, message: str):
        self.debrid_name = debrid_name
        super().__init__(f"{debrid_name}: {message}")
