import io
import os
import logging
from typing import List, Tuple

from bs4 import BeautifulSoup
from docx import Document

DEFAULT_TITLE = "Funding Request"


def html_to_blocks(html: str) -> List[Tuple[str, str]]:
    """
    Flatten a generated document into ("heading" | "paragraph" | "bullet", text) blocks.
    Works for both locally synthesized and remotely generated HTML.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    blocks: List[Tuple[str, str]] = []
    for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6", "p", "li"]):
        text = " ".join(tag.get_text(" ", strip=True).split())
        if not text:
            continue
        if tag.name.startswith("h"):
            blocks.append(("heading", text))
        elif tag.name == "li":
            blocks.append(("bullet", text))
        else:
            blocks.append(("paragraph", text))

    # Plain-text or unstructured responses: keep the text as one paragraph.
    if not blocks:
        text = soup.get_text("\n", strip=True)
        if text:
            blocks.append(("paragraph", text))
    return blocks


def document_to_text(html: str) -> str:
    """Copy-paste friendly version of the document."""
    lines: List[str] = []
    for kind, text in html_to_blocks(html):
        if kind == "heading":
            if lines:
                lines.append("")
            lines.append(text)
        elif kind == "bullet":
            lines.append(f"- {text}")
        else:
            lines.append(text)
    return "\n".join(lines).strip()


def build_docx(document_html: str, title: str = DEFAULT_TITLE, alignment_html: str = ""):
    doc = Document()
    doc.add_heading(title, level=1)

    for kind, text in html_to_blocks(document_html):
        if kind == "heading":
            doc.add_heading(text, level=2)
        elif kind == "bullet":
            doc.add_paragraph(text, style="List Bullet")
        else:
            doc.add_paragraph(text)

    notes = html_to_blocks(alignment_html)
    if notes:
        doc.add_heading("How this aligns with the funder", level=2)
        for _, text in notes:
            doc.add_paragraph(text, style="List Bullet")
    return doc


def generate_docx(document_html: str, output_path: str, title: str = DEFAULT_TITLE,
                  alignment_html: str = "") -> str:
    """Write the funding request (and optional alignment notes) to a .docx file."""
    doc = build_docx(document_html, title=title, alignment_html=alignment_html)
    folder = os.path.dirname(output_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    doc.save(output_path)
    logging.info(f"Funding request saved at: {output_path}")
    return output_path


def docx_bytes(document_html: str, title: str = DEFAULT_TITLE, alignment_html: str = "") -> bytes:
    buf = io.BytesIO()
    build_docx(document_html, title=title, alignment_html=alignment_html).save(buf)
    return buf.getvalue()
