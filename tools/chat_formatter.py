"""
NutriPlan AI — Chat Formatter Tool
==================================
Parses the light markup the coach replies with: `**bold**` segments and
list items starting with "- " or "* ".
"""

import re
from dataclasses import dataclass, field
from typing import List

_BOLD = re.compile(r"(\*\*.*?\*\*)")
_LIST_PREFIXES = ("- ", "* ")


@dataclass
class Segment:
    text: str
    bold: bool = False


@dataclass
class FormattedLine:
    kind: str  # "paragraph" | "list_item" | "blank"
    segments: List[Segment] = field(default_factory=list)

    @property
    def plain_text(self) -> str:
        return "".join(s.text for s in self.segments)


def _split_bold(text: str) -> List[Segment]:
    segments = []
    for part in _BOLD.split(text):
        if not part:
            continue
        if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            segments.append(Segment(part[2:-2], bold=True))
        else:
            segments.append(Segment(part))
    return segments


def parse_markup(text: str) -> List[FormattedLine]:
    lines = []
    for raw in text.split("\n"):
        stripped = raw.strip()
        if not stripped:
            lines.append(FormattedLine("blank"))
        elif stripped.startswith(_LIST_PREFIXES):
            lines.append(FormattedLine("list_item", _split_bold(stripped[2:])))
        else:
            lines.append(FormattedLine("paragraph", _split_bold(raw)))
    return lines


def _escape(text: str) -> str:
    return re.sub(r"([\\`*_#])", r"\\\1", text)


def to_markdown(text: str) -> str:
    """Render for st.markdown, escaping anything that isn't our markup."""
    out = []
    for line in parse_markup(text):
        rendered = "".join(
            f"**{_escape(s.text)}**" if s.bold else _escape(s.text)
            for s in line.segments
        )
        if line.kind == "blank":
            out.append("")
        elif line.kind == "list_item":
            out.append(f"- {rendered}")
        else:
            out.append(f"{rendered}  ")
    return "\n".join(out)
