"""Calculator shipped with the sample package."""

from __future__ import annotations


class Calculator:
    def add(self, a: int, b: int) -> int:
        return a + b
