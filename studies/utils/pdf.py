from io import BytesIO
from typing import Iterable

from django.template.loader import get_template
from xhtml2pdf import pisa
from PyPDF2 import PdfReader, PdfWriter


def render_html_to_pdf_bytes(template_name: str, context: dict) -> bytes:
    """
    Renderiza un template HTML a PDF (bytes) usando xhtml2pdf (pisa).
    """
    html = get_template(template_name).render(context)
    src = BytesIO(html.encode("utf-8"))
    out = BytesIO()
    result = pisa.CreatePDF(src, dest=out, encoding="utf-8")
    if result.err:
        raise ValueError(f"xhtml2pdf no pudo renderizar {template_name}")
    return out.getvalue()


def cover_page_pdf_bytes(study) -> bytes:
    return render_html_to_pdf_bytes(
        "pdf/study_cover.html",
        {
            "study": study,
            "author_name": study.author.profile.full_name or study.author.email,
            "category": study.category,
        },
    )


def merge_pdf_streams(streams: Iterable[bytes]) -> bytes:
    """
    Fusiona varios PDFs (en bytes) en un solo PDF (bytes).
    """
    writer = PdfWriter()
    for pdf_bytes in streams:
        if not pdf_bytes:
            continue
        reader = PdfReader(BytesIO(pdf_bytes))
        for page in reader.pages:
            writer.add_page(page)
    out = BytesIO()
    writer.write(out)
    return out.getvalue()
