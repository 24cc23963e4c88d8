"""Keep a managed list of installed skills in the project's CLAUDE.md."""

import re
from pathlib import Path
from typing import Iterable

from llmstxt.config import CANONICAL_DIR
from llmstxt.lockfile import LockfileEntry, read_lockfile
from llmstxt.paths import PathLike

START_MARKER = "<!-- llmstxt:start -->"
END_MARKER = "<!-- llmstxt:end -->"

SECTION_PATTERN = re.compile(
    r"\n?" + re.escape(START_MARKER) + r".*?" + re.escape(END_MARKER) + r"\n?",
    re.DOTALL,
)


def build_section(entries: Iterable[LockfileEntry]) -> str:
    entries = list(entries)
    if not entries:
        return ""

    lines = [
        START_MARKER,
        "## Installed Documentation (llmstxt)",
        "",
        "When working with these technologies, read the corresponding skill for detailed reference:",
        "",
    ]
    for entry in entries:
        lines.append(f"- {entry.name}: {CANONICAL_DIR}/{entry.slug}/SKILL.md")
    lines.append(END_MARKER)
    return "\n".join(lines)


def sync_claude_md(project_dir: PathLike):
    """Rebuild the llmstxt section of CLAUDE.md from the lockfile.

    The section is appended when missing and dropped when nothing is
    installed. A CLAUDE.md that held nothing but the section is deleted.
    """
    entries = list(read_lockfile(project_dir).entries.values())
    claude_md = Path(project_dir) / "CLAUDE.md"
    content = claude_md.read_text(encoding="utf-8") if claude_md.exists() else ""

    if not entries:
        if START_MARKER not in content:
            return
        content = SECTION_PATTERN.sub("", content, count=1)
        if START_MARKER in content:
            # unterminated section runs to end of file
            content = content[: content.index(START_MARKER)]
        content = content.strip()
    else:
        section = build_section(entries)
        if START_MARKER in content:
            start = content.index(START_MARKER)
            end = content.find(END_MARKER, start)
            tail = "" if end == -1 else content[end + len(END_MARKER):]
            content = content[:start] + section + tail
        elif content:
            separator = "\n" if content.endswith("\n") else "\n\n"
            content = content + separator + section
        else:
            content = section

    if not content:
        # nothing left but our own section
        claude_md.unlink()
        return
    if not content.endswith("\n"):
        content += "\n"
    claude_md.write_text(content, encoding="utf-8")
