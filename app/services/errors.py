from __future__ import annotations


class RouteFinderError(Exception):
    """Base class for failures raised by the lookup clients."""


class TransportError(RouteFinderError):
    """Network failure, non-2xx status or a body we could not parse."""

    def __init__(self, service: str, detail: str) -> None:
        super().__init__(f"{service} error: {detail}")
        self.service = service
        self.detail = detail


class NoRouteError(RouteFinderError):
    """The routing service answered, but there is no path between the points."""
