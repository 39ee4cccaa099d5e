"""Markdown export of a chat snapshot."""

import json
from pathlib import Path
from typing import List, Optional

from .models import PartKind, Role, Snapshot, duration_key


def format_duration(ms: Optional[int]) -> str:
    """Render a duration as ``Thought for N.Ns`` (or a placeholder)."""
    if ms is None:
        return "Thought"
    return f"Thought for {ms / 1000:.1f}s"


def export_markdown(
    snapshot: Snapshot, ai_name: str = "Assistant", output_path: Optional[Path] = None
) -> str:
    """Export a snapshot to markdown.

    Args:
        snapshot: Conversation to export
        ai_name: Heading used for assistant messages
        output_path: Optional path to write the markdown file

    Returns:
        Markdown content as string
    """
    lines: List[str] = [f"# Chat with {ai_name}\n", "---\n"]

    for message in snapshot.transcript:
        speaker = "You" if message.role is Role.USER else ai_name
        lines.append(f"## {speaker}\n")

        for index, part in enumerate(message.parts):
            if part.kind is PartKind.TEXT:
                lines.append(f"{part.content}\n")
            elif part.kind is PartKind.REASONING:
                ms = snapshot.durations.get(duration_key(message.id, index))
                lines.append(f"<details><summary>{format_duration(ms)}</summary>\n")
                lines.append(f"{part.content}\n")
                lines.append("</details>\n")
            elif part.kind is PartKind.TOOL_CALL:
                lines.append(f"**Tool call:** `{part.name}`")
                if part.args:
                    for key, value in part.args.items():
                        lines.append(f"- `{key}`: {value}")
                lines.append("")
            elif part.kind is PartKind.TOOL_RESULT:
                lines.append("**Tool result:**")
                lines.append(f"```\n{_render_output(part.output)}\n```\n")

    markdown = "\n".join(lines)

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(markdown, encoding="utf-8")

    return markdown


def _render_output(output) -> str:
    if isinstance(output, str):
        return output
    try:
        return json.dumps(output, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(output)
