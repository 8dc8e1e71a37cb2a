"""Release notes extraction from CHANGELOG.md.

Release sections start with a `## ` heading, e.g.

    ## [1.2.0] / 2024-03-01
    ### Added
    - Feature

The caption of a section is the first word of its heading with `#`, spaces
and brackets trimmed (`1.2.0` above). Blank lines are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.pipeline.errors import StepError


@dataclass(frozen=True, slots=True)
class ChangelogSection:
    caption: str
    lines: tuple[str, ...]

    @property
    def body(self) -> str:
        return "\n".join(self.lines)


def _is_release_heading(line: str) -> bool:
    return line.startswith("## ")


def _caption(heading: str) -> str:
    words = heading.lstrip("# [").split()
    return words[0].rstrip("]") if words else ""


def parse_sections(text: str) -> list[ChangelogSection]:
    """Split changelog text into release sections, newest first."""
    content = [ln.rstrip() for ln in text.splitlines() if ln.strip()]

    sections: list[ChangelogSection] = []
    caption: str | None = None
    body: list[str] = []
    for line in content:
        if _is_release_heading(line):
            if caption is not None:
                sections.append(ChangelogSection(caption=caption, lines=tuple(body)))
            caption = _caption(line)
            body = []
        elif caption is not None:
            body.append(line)
    if caption is not None:
        sections.append(ChangelogSection(caption=caption, lines=tuple(body)))
    return sections


def extract_section_notes(text: str, tag: str | None = None) -> Result[list[str], StepError]:
    """Return the notes of the latest non-empty section, or of section `tag`."""
    sections = parse_sections(text)

    if tag is None:
        section = next((s for s in sections if s.lines), None)
        if section is None:
            return Err(StepError(kind="invalid_input", message="changelog has no release notes"))
        return Ok(list(section.lines))

    wanted = tag.lower()
    for s in sections:
        if s.caption.lower() == wanted:
            return Ok(list(s.lines))
    return Err(
        StepError(kind="invalid_input", message=f"could not find release section for '{tag}'")
    )


def read_latest_notes(path: Path) -> Result[str, StepError]:
    """Read `path` and return the latest section's notes as one string."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            StepError(kind="io_failed", message=f"failed to read changelog: {e}", hint=str(path))
        )
    except UnicodeDecodeError as e:
        return Err(
            StepError(
                kind="io_failed",
                message=f"changelog is not valid UTF-8: {e.reason}",
                hint=str(path),
            )
        )

    notes = extract_section_notes(text)
    if isinstance(notes, Err):
        return notes
    return Ok("\n".join(notes.value))
