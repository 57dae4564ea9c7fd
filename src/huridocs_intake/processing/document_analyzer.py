"""
HURIDOCS-aware document analysis through a text-generation backend.
"""
import asyncio
import logging
from typing import Any, Mapping, Optional, Tuple, Union

from huridocs_intake.core.api_client import TextGenerator
from huridocs_intake.core.config import Settings
from huridocs_intake.core.errors import AnalysisError, UpstreamError, UpstreamTimeout
from huridocs_intake.core.models import AnalysisResult, DetectedDocument, SourceDocument
from huridocs_intake.processing.format_detector import FormatDetector
from huridocs_intake.processing.prompt_manager import PromptManager
from huridocs_intake.processing.response_parser import parse_analysis

logger = logging.getLogger(__name__)

AnalyzableDocument = Union[DetectedDocument, SourceDocument, Mapping[str, Any], str]


class DocumentAnalyzer:
    """Builds the analysis prompt, calls the backend once and parses the reply.

    Failures never reach the caller: they are logged and turned into
    ``AnalysisResult.empty()`` whose ``status`` is ``degraded``.
    """

    def __init__(self, client: TextGenerator, detector: Optional[FormatDetector] = None,
                 prompts: Optional[PromptManager] = None, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or Settings()
        self.detector = detector or FormatDetector()
        self.pm = prompts or PromptManager(self.settings.content_limit)

    async def analyze(self, document: AnalyzableDocument) -> AnalysisResult:
        """Analyze a detected HURIDOCS document or a plain document."""
        try:
            return await self._analyze(self._coerce(document))
        except AnalysisError as e:
            logger.error(f"Document analysis degraded ({type(e).__name__}): {e}")
        except Exception as e:
            logger.exception(f"Unexpected error during document analysis: {e}")
        return AnalysisResult.empty()

    async def analyze_with_detection(self, document: AnalyzableDocument) -> AnalysisResult:
        """Run format detection first and use the HURIDOCS prompt when a format is found."""
        result, _ = await self.analyze_document(document)
        return result

    async def analyze_document(self, document: AnalyzableDocument,
                               detect: bool = True) -> Tuple[AnalysisResult, Optional[DetectedDocument]]:
        """Analyze a document and also return what detection found (None when skipped or nothing matched).

        A detected known format is analyzed with the HURIDOCS prompt, everything
        else with the generic prompt keeping title and type.
        """
        try:
            source = self._coerce(document)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot analyze document: {e}")
            return AnalysisResult.empty(), None

        detected = source if isinstance(source, DetectedDocument) else None
        if isinstance(source, SourceDocument) and detect:
            detected = self.detector.detect(source.content)
            if detected is not None and detected.is_known_format:
                logger.info(f"HURIDOCS format detected: {detected.format.value}")
                return await self.analyze(detected), detected
        return await self.analyze(source), detected

    @staticmethod
    def _coerce(document: AnalyzableDocument) -> Union[DetectedDocument, SourceDocument]:
        if isinstance(document, (DetectedDocument, SourceDocument)):
            return document
        if isinstance(document, str):
            return SourceDocument(content=document)
        if isinstance(document, Mapping):
            return SourceDocument.model_validate(dict(document))
        raise TypeError(f"Unsupported document type: {type(document).__name__}")

    def build_request(self, document: Union[DetectedDocument, SourceDocument]):
        """Return ``(prompt, max_tokens)`` for the document."""
        if isinstance(document, DetectedDocument) and document.is_known_format:
            prompt = self.pm.get(
                'huridocs',
                format=document.format.value,
                fields=document.fields,
                content=document.raw_content,
            )
            return prompt, self.settings.huridocs_max_tokens

        if isinstance(document, DetectedDocument):
            prompt = self.pm.get('generic', content=document.raw_content)
        else:
            prompt = self.pm.get('generic', content=document.content,
                                 title=document.title, type=document.type)
        return prompt, self.settings.generic_max_tokens

    async def _analyze(self, document: Union[DetectedDocument, SourceDocument]) -> AnalysisResult:
        prompt, max_tokens = self.build_request(document)
        response = await self._generate(prompt, max_tokens)
        return parse_analysis(response)

    async def _generate(self, prompt: str, max_tokens: int) -> str:
        try:
            return await asyncio.wait_for(
                self.client.generate(prompt, model=self.settings.model, max_tokens=max_tokens,
                                     validate=parse_analysis),
                timeout=self.settings.request_timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeout(f"No response within {self.settings.request_timeout}s") from e
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(str(e) or type(e).__name__) from e
