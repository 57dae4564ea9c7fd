"""
Reads the analysis JSON out of a free-text model reply.
"""
import re
import json
import logging

from pydantic import ValidationError

from huridocs_intake.core.errors import ResponseParseError
from huridocs_intake.core.models import AnalysisResult

logger = logging.getLogger(__name__)

FENCED_JSON_PATTERN = re.compile(r'```json\s*\n(.*?)\n\s*```', re.DOTALL)
BRACED_PATTERN = re.compile(r'\{.*\}', re.DOTALL)


def extract_json_text(response: str) -> str:
    """Return the fenced ```json block, else the outermost brace span."""
    match = FENCED_JSON_PATTERN.search(response)
    if match:
        return match.group(1)
    match = BRACED_PATTERN.search(response)
    if match:
        return match.group(0)
    raise ResponseParseError("No JSON object found in model response", response)


def parse_analysis(response: str) -> AnalysisResult:
    """Parse a model reply into an AnalysisResult, raising ResponseParseError on failure."""
    if not response or not response.strip():
        raise ResponseParseError("Empty model response", response or '')

    json_text = extract_json_text(response)
    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Malformed JSON in model response: {e}", response) from e

    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}", response)

    # status is ours to set, not the model's
    data.pop('status', None)
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(f"Model response does not match analysis shape: {e.error_count()} errors", response) from e
