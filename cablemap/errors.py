"""Errors raised by map actions.

Each carries the message shown to the operator. ``MapSession`` catches
``MapActionError`` at the action boundary and reports the message instead of
letting it escape.
"""

from __future__ import annotations

from typing import Optional


class MapActionError(Exception):
    message = "Map action failed."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)

    @property
    def user_message(self) -> str:
        return str(self)


class RouteNotFound(MapActionError):
    message = "Route not found for this connection."

    def __init__(self, connection_id: int) -> None:
        super().__init__()
        self.connection_id = connection_id


class ConnectionNotFound(MapActionError):
    message = "Connection not found."

    def __init__(self, connection_id: int) -> None:
        super().__init__()
        self.connection_id = connection_id


class InvalidDistance(MapActionError):
    message = "Invalid distance."

    def __init__(self, value: object = None) -> None:
        super().__init__()
        self.value = value


class DistanceExceedsRoute(MapActionError):
    def __init__(self, route_length: float) -> None:
        super().__init__(f"Distance is greater than route distance ({route_length:.2f}m)")
        self.route_length = route_length


class ClipboardWriteFailed(MapActionError):
    message = "Failed to copy link."
