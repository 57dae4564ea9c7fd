"""
Rule-based HURIDOCS format detection and field extraction.
"""
import re
import logging
from typing import Dict, List, Optional, Sequence, Set

from huridocs_intake.core.models import DetectedDocument, DocumentFormat
from huridocs_intake.processing.field_catalog import (
    CATALOG, HEADER_CHECK_ORDER, MIN_FIELD_MATCHES, FormatSignature
)

logger = logging.getLogger(__name__)

# | 101 | Label | Value
FIELD_ROW_PATTERN = re.compile(r'\|\s*(\d{3,4})\s*\|\s*([^|]+)\|\s*([^|]+)')
# Any table cell holding only a field number
FIELD_NUMBER_PATTERN = re.compile(r'\|\s*(\d{3,4})\s*(?=\|)')


class FormatDetector:
    """Classifies document text into a HURIDOCS record format.

    Stateless; one instance can be shared between requests.
    """

    def __init__(self, catalog: Sequence[FormatSignature] = CATALOG,
                 header_order: Sequence[FormatSignature] = HEADER_CHECK_ORDER,
                 min_matches: int = MIN_FIELD_MATCHES):
        self.catalog = tuple(catalog)
        self.header_order = tuple(header_order)
        self.min_matches = min_matches

    def detect(self, content: str) -> Optional[DetectedDocument]:
        """Detect the HURIDOCS format of ``content``.

        Returns None when the text has neither a known header nor any
        field rows. Never raises.
        """
        try:
            return self._detect(content or '')
        except Exception as e:
            logger.error(f"HURIDOCS format detection failed: {e}")
            return None

    def _detect(self, content: str) -> Optional[DetectedDocument]:
        fields = self.extract_fields(content)

        header_format = self.match_header(content)
        if header_format is not None:
            logger.info(f"HURIDOCS header detected: {header_format.value} ({len(fields)} fields)")
            return DetectedDocument(format=header_format, fields=fields, raw_content=content)

        if not fields:
            logger.debug("No HURIDOCS field rows found")
            return None

        seen = self.field_numbers(content)
        doc_format = self.classify(seen)
        logger.info(f"Detected format {doc_format.value} from {len(fields)} fields")
        return DetectedDocument(format=doc_format, fields=fields, raw_content=content)

    def match_header(self, content: str) -> Optional[DocumentFormat]:
        for signature in self.header_order:
            if signature.header_matches(content):
                return signature.format
        return None

    @staticmethod
    def extract_fields(content: str) -> Dict[str, str]:
        """Collect ``field number -> value`` from pipe table rows; later rows win."""
        fields = {}
        for line in content.splitlines():
            match = FIELD_ROW_PATTERN.search(line)
            if match:
                fields[match.group(1)] = match.group(3).strip()
        return fields

    @staticmethod
    def field_numbers(content: str) -> Set[int]:
        return {int(m.group(1)) for m in FIELD_NUMBER_PATTERN.finditer(content)}

    def classify(self, seen_numbers: Set[int]) -> DocumentFormat:
        """Pick the best-scoring format; ties go to the earlier catalog entry."""
        scores = [(signature.format, signature.score(seen_numbers)) for signature in self.catalog]
        best = max((score for _, score in scores), default=0)
        if best < self.min_matches:
            return DocumentFormat.UNKNOWN

        tied: List[DocumentFormat] = [fmt for fmt, score in scores if score == best]
        if len(tied) > 1:
            logger.warning(
                f"Ambiguous HURIDOCS format, {best} matches each for "
                f"{', '.join(fmt.value for fmt in tied)}; choosing {tied[0].value}"
            )
        return tied[0]


_default_detector = FormatDetector()


def detect(content: str) -> Optional[DetectedDocument]:
    """Detect with the default catalog."""
    return _default_detector.detect(content)
