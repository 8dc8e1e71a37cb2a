"""Services driven by pipeline targets (dotnet, GitVersion, feeds, GitHub releases)."""
