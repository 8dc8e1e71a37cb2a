"""CI runner detection."""

from .github_actions import CiEnvironment, detect_ci

__all__ = ["CiEnvironment", "detect_ci"]
