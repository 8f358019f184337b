"""Error kinds raised across glyphledger.

Library code raises these and never swallows them. The CLI is the only
place that turns them into exit statuses.
"""


class GlyphError(Exception):
    """Base class for every glyphledger error."""
    pass


class ConfigError(GlyphError):
    """Configuration missing, unreadable or unparseable. Fatal before any store is touched."""
    pass


class StoreError(GlyphError):
    """Open, reclaim or compact failure on a hot or cold store."""

    def __init__(self, store: str, message: str):
        super().__init__(f"{store}: {message}")
        self.store = store
        self.message = message


class ValidationError(GlyphError):
    """Receipt failed schema validation. Rejects one receipt only."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ProofError(GlyphError):
    """Merkle contract violation: empty leaves, bad index, malformed digest."""
    pass
