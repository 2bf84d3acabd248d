"""Toast notifications with a time-to-live, expired by elapsed time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass
class Toast:
    title: str
    body: str
    ttl_ms: float
    age_ms: float = 0.0

    @property
    def expired(self) -> bool:
        return self.age_ms >= self.ttl_ms

    def to_dict(self) -> dict:
        return {"title": self.title, "body": self.body, "remaining_ms": max(0.0, self.ttl_ms - self.age_ms)}


class NotificationCenter:
    def __init__(self, default_ttl_ms: float = 1800.0):
        self.default_ttl_ms = default_ttl_ms
        self.toasts: List[Toast] = []

    def push(self, title: str, body: str, ttl_ms: float | None = None) -> Toast:
        toast = Toast(title, body, self.default_ttl_ms if ttl_ms is None else ttl_ms)
        self.toasts.append(toast)
        return toast

    def advance(self, elapsed_ms: float) -> List[Toast]:
        """Age toasts and return the ones that expired."""
        for toast in self.toasts:
            toast.age_ms += max(0.0, elapsed_ms)
        expired = [t for t in self.toasts if t.expired]
        self.toasts = [t for t in self.toasts if not t.expired]
        return expired
