"""Calculator utility bundled with the package."""

from .calculator import Calculator

__all__ = ["Calculator"]
