"""
Document text loading with fallback strategies for PDFs.
"""
import logging
from pathlib import Path

import fitz  # PyMuPDF
import pdfminer.high_level

from huridocs_intake.core.errors import UnsupportedDocumentError
from huridocs_intake.core.models import SourceDocument

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = ('.md', '.txt', '.csv')
PDF_SUFFIXES = ('.pdf',)
SUPPORTED_SUFFIXES = TEXT_SUFFIXES + PDF_SUFFIXES


def document_type_for(path: Path) -> str:
    """Document type label as used by the import registry."""
    suffix = path.suffix.lower()
    if suffix == '.md':
        return 'huridocs'
    if suffix == '.pdf':
        return 'pdf'
    if suffix in ('.csv', '.xlsx', '.xls'):
        return 'spreadsheet'
    return 'document'


class DocumentLoader:
    """Reads documents from disk into SourceDocument instances."""

    def __init__(self):
        self.pdf_strategies = [self._extract_with_pdfminer, self._extract_with_pymupdf]

    def load(self, path: Path) -> SourceDocument:
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in TEXT_SUFFIXES:
            content = path.read_text(encoding='utf-8', errors='replace')
        elif suffix in PDF_SUFFIXES:
            content = self.extract_pdf(path)
        else:
            raise UnsupportedDocumentError(f"No text extraction for {path.name}")

        return SourceDocument(title=path.stem, type=document_type_for(path), content=content)

    def extract_pdf(self, pdf_path: Path) -> str:
        """Extract text from PDF using fallback strategies."""
        logger.info(f"Extracting text from {pdf_path.name}")

        for i, strategy in enumerate(self.pdf_strategies):
            try:
                text = strategy(pdf_path)
                if text and text.strip():
                    logger.info(f"Successfully extracted {len(text)} chars using strategy {i+1}")
                    return text
                else:
                    logger.warning(f"Strategy {i+1} returned empty text")
            except Exception as e:
                logger.warning(f"Strategy {i+1} failed: {e}")
                continue

        logger.error(f"All extraction strategies failed for {pdf_path.name}")
        return ""

    def _extract_with_pdfminer(self, pdf_path: Path) -> str:
        return pdfminer.high_level.extract_text(str(pdf_path))

    def _extract_with_pymupdf(self, pdf_path: Path) -> str:
        with fitz.open(str(pdf_path)) as doc:
            return "".join(page.get_text() for page in doc)
