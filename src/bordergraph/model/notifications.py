"""Transient messages emitted by the graph for the host to display."""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from bordergraph.model.graph import BorderGraph

BUILD_KEY = "build"
PREVIEW_LIMIT = 5


class NotificationKind(StrEnum):
    LOADING = "loading"
    SUCCESS = "success"
    INFO = "info"
    DISMISS = "dismiss"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str = ""
    description: str = ""
    key: Optional[str] = None


@dataclass(frozen=True)
class NodeInspection:
    """Click summary for one country."""
    country: str
    neighbor_count: int
    preview: Tuple[str, ...]
    overflow: int

    @classmethod
    def for_node(cls, graph: BorderGraph, node_id: str, limit: int = PREVIEW_LIMIT) -> NodeInspection:
        neighbors = graph.neighbors(node_id)
        return cls(
            country=node_id,
            neighbor_count=len(neighbors),
            preview=tuple(neighbors[:limit]),
            overflow=max(0, len(neighbors) - limit),
        )

    @property
    def title(self) -> str:
        return f"{self.country} has borders with {self.neighbor_count} countries"

    @property
    def description(self) -> str:
        text = ", ".join(self.preview)
        if self.overflow:
            text += f" and {self.overflow} more..."
        return text

    def to_notification(self) -> Notification:
        return Notification(NotificationKind.INFO, self.title, self.description, key=self.country)


def building() -> Notification:
    return Notification(NotificationKind.LOADING, "Building country network...", key=BUILD_KEY)


def loaded(countries: int, borders: int) -> Notification:
    return Notification(NotificationKind.SUCCESS, f"Loaded {countries} countries with {borders} borders")


def view_reset() -> Notification:
    return Notification(NotificationKind.INFO, "Graph view has been reset")


def dismiss(key: str) -> Notification:
    return Notification(NotificationKind.DISMISS, key=key)
