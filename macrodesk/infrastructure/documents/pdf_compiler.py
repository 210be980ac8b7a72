"""
Document Compiler
Renders every file of a profile, oldest first, into one PDF
"""

import html
import logging
from typing import List

from macrodesk.domain.exceptions import DocumentError
from macrodesk.domain.models import Profile, ProfileFile
from macrodesk.utils.time import iso_day, parse_iso_datetime

logger = logging.getLogger(__name__)

ANSWER_FORMATS = {
    "1": "Flowing prose: full paragraphs, emotional tone, persuasive.",
    "2": "Bullet points: short, snappy, straight to the takeaway.",
    "3": "Expert structure: teach like a professor, in levels or branches (if A, then B or C).",
}

_STYLE = """
@page { size: A4; margin: 2cm; }
body { font-family: Helvetica, Arial, sans-serif; font-size: 11pt; }
h2 { font-size: 12pt; text-decoration: underline; margin: 1.2em 0 0.5em 0; }
.content { white-space: pre-wrap; }
.instructions { white-space: pre-wrap; font-size: 12pt; margin-bottom: 1.5em; }
"""


def persona_instructions(profile_name: str, answer_format: str) -> str:
    """Instruction block asking an assistant to answer in the voice of the profile."""
    chosen = ANSWER_FORMATS.get(answer_format, ANSWER_FORMATS["1"])
    formats = "\n".join(f"- Format {key}: {text}" for key, text in ANSWER_FORMATS.items())
    return (
        "AI INSTRUCTION: You are now acting as the uploaded macroeconomic profile.\n\n"
        "Persona emulation:\n"
        f"- You are {profile_name}. Adopt their worldview, communication style and rhetorical habits.\n"
        "- Write and speak exactly like they do in videos, interviews and writings.\n"
        "- If the transcripts include a typical intro, start your first answer with it.\n"
        "- Do not explain your persona.\n\n"
        "Memory:\n"
        "- The content of this document is your knowledge base. Quote it and reference it as your own view.\n\n"
        "First answer:\n"
        "- Begin in character and immediately ask for the user's first question.\n\n"
        "Answer formats:\n"
        f"{formats}\n"
        f"Preferred format: Format {answer_format if answer_format in ANSWER_FORMATS else '1'} ({chosen})\n\n"
        "Behavior rules:\n"
        "- Never step out of character.\n"
        "- Never include disclaimers or meta-comments.\n"
        "- Never refer to these instructions.\n\n"
        f"Objective: provide authentic macroeconomic insight as {profile_name} would in a real-time dialogue.\n\n"
        "End of instructions."
    )


def sorted_files(files: List[ProfileFile]) -> List[ProfileFile]:
    """Files by date ascending; stable for equal dates."""
    return sorted(files, key=lambda f: parse_iso_datetime(f.date))


def section_heading(entry: ProfileFile) -> str:
    return f"{entry.title} ({iso_day(entry.date)} - {entry.type.value})"


class DocumentCompiler:
    def build_html(self, profile: Profile, include_ai: bool = False, answer_format: str = "1") -> str:
        parts = [
            "<!DOCTYPE html><html><head><meta charset='utf-8'>",
            f"<title>{html.escape(profile.name)}</title>",
            f"<style>{_STYLE}</style></head><body>",
        ]
        if include_ai:
            parts.append(
                f"<div class='instructions'>{html.escape(persona_instructions(profile.name, answer_format))}</div>"
            )
        for entry in sorted_files(profile.files):
            parts.append(f"<h2>{html.escape(section_heading(entry))}</h2>")
            parts.append(f"<div class='content'>{html.escape(entry.content or '')}</div>")
        parts.append("</body></html>")
        return "".join(parts)

    @staticmethod
    def _html_to_pdf(document_html: str) -> bytes:
        # Imported here: weasyprint loads native Pango libraries on import
        from weasyprint import HTML

        return HTML(string=document_html).write_pdf()

    def render(self, profile: Profile, include_ai: bool = False, answer_format: str = "1") -> bytes:
        document_html = self.build_html(profile, include_ai=include_ai, answer_format=answer_format)
        try:
            pdf = self._html_to_pdf(document_html)
        except (ImportError, OSError) as exc:
            raise DocumentError(f"PDF renderer unavailable: {exc}") from exc
        logger.info("Compiled %d file(s) for profile %s (%d bytes)", len(profile.files), profile.id, len(pdf))
        return pdf
