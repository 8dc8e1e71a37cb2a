"""ship - release pipeline for a single NuGet package."""

__version__ = "0.1.0"
