from docx import Document

from utils.document_generator import document_to_text, docx_bytes, generate_docx, html_to_blocks

SAMPLE_HTML = (
    "<h4>Introduction</h4><p>We are writing to request funding.</p>"
    "<h4>Budget Summary</h4><p>We are requesting £50,000 &amp; more.</p>"
)
ALIGNMENT_HTML = "<ul><li><strong>Priority match:</strong> Young people.</li><li>Tip.</li></ul>"


def test_generate_docx_creates_file(tmp_path):
    file_path = tmp_path / "out" / "funding_request.docx"

    generate_docx(SAMPLE_HTML, str(file_path), alignment_html=ALIGNMENT_HTML)

    assert file_path.exists()
    assert file_path.stat().st_size > 0
    paragraphs = [p.text for p in Document(str(file_path)).paragraphs]
    assert paragraphs[0] == "Funding Request"
    assert "Introduction" in paragraphs
    assert "We are requesting £50,000 & more." in paragraphs
    assert "How this aligns with the funder" in paragraphs
    assert "Priority match: Young people." in paragraphs


def test_docx_bytes_is_a_zip():
    assert docx_bytes(SAMPLE_HTML).startswith(b"PK")


def test_html_to_blocks():
    blocks = html_to_blocks(SAMPLE_HTML + ALIGNMENT_HTML)
    assert blocks[0] == ("heading", "Introduction")
    assert blocks[1] == ("paragraph", "We are writing to request funding.")
    assert blocks[-1] == ("bullet", "Tip.")


def test_plain_text_becomes_one_paragraph():
    assert html_to_blocks("Just some text") == [("paragraph", "Just some text")]
    assert html_to_blocks("") == []


def test_document_to_text():
    text = document_to_text(SAMPLE_HTML + ALIGNMENT_HTML)
    assert text == (
        "Introduction\nWe are writing to request funding.\n\n"
        "Budget Summary\nWe are requesting £50,000 & more.\n"
        "- Priority match: Young people.\n- Tip."
    )
