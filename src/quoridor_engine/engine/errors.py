from __future__ import annotations


class QuoridorError(Exception):
    """Base class for errors raised by the rules engine."""


class BoardConfigError(QuoridorError, ValueError):
    """Invalid board size, player count or seat layout."""


class WallPlacementError(QuoridorError, ValueError):
    """Wall anchor outside the anchor grid."""


class UnknownPlayerError(QuoridorError, KeyError):
    """Player is not seated on this board."""
