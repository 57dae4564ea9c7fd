"""
Pydantic models for detected documents and analysis results.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class DocumentFormat(str, Enum):
    EVENT = 'event'
    ACT = 'act'
    PARTICIPATION = 'participation'
    UNKNOWN = 'unknown'


class Sentiment(str, Enum):
    POSITIVE = 'positive'
    NEGATIVE = 'negative'
    NEUTRAL = 'neutral'


class AnalysisStatus(str, Enum):
    OK = 'ok'
    DEGRADED = 'degraded'


# German sentiment words are accepted as well
_SENTIMENT_SYNONYMS = {
    'positive': Sentiment.POSITIVE,
    'positiv': Sentiment.POSITIVE,
    'negative': Sentiment.NEGATIVE,
    'negativ': Sentiment.NEGATIVE,
    'neutral': Sentiment.NEUTRAL,
}


def _list_field(wire_name: str, *aliases: str):
    return Field(
        default_factory=list,
        serialization_alias=wire_name,
        validation_alias=AliasChoices(wire_name, *aliases),
    )


class SourceDocument(BaseModel):
    """A plain document as handed over by the extraction layer."""
    title: Optional[str] = None
    type: Optional[str] = None
    content: str = ''


class DetectedDocument(BaseModel):
    """Result of HURIDOCS format detection over one document text."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format: DocumentFormat
    fields: Dict[str, str] = Field(default_factory=dict)
    raw_content: str = Field(default='', alias='rawContent')

    @property
    def is_known_format(self) -> bool:
        return self.format is not DocumentFormat.UNKNOWN


class LegalBasis(BaseModel):
    reference: str = ''
    description: str = ''


class Contradiction(BaseModel):
    statement1: str = ''
    statement2: str = ''
    explanation: str = ''


class AnalysisResult(BaseModel):
    """Structured analysis of a human-rights document.

    Every list is always present. ``status`` tells callers whether the
    values came from the model (``ok``) or are the empty fallback
    (``degraded``).
    """
    model_config = ConfigDict(populate_by_name=True)

    involved_parties: List[str] = _list_field('involvedParties', 'involved_parties', 'beteiligte_parteien')
    legal_bases: List[LegalBasis] = _list_field('legalBases', 'legal_bases', 'rechtliche_grundlagen')
    key_facts: List[str] = _list_field('keyFacts', 'key_facts', 'zentrale_fakten')
    human_rights_implications: List[str] = _list_field(
        'humanRightsImplications', 'human_rights_implications', 'menschenrechtliche_implikationen'
    )
    connections: List[str] = _list_field('connections', 'verbindungen')
    timeline: List[str] = _list_field('timeline', 'zeitliche_abfolge')
    keywords: List[str] = _list_field('keywords', 'schlüsselwörter', 'schluesselwoerter')
    sentiment: Sentiment = Sentiment.NEUTRAL
    suggested_actions: List[str] = _list_field('suggestedActions', 'suggested_actions')
    contradictions: List[Contradiction] = _list_field('contradictions')
    status: AnalysisStatus = AnalysisStatus.OK

    @field_validator('sentiment', mode='before')
    @classmethod
    def normalize_sentiment(cls, value):
        if isinstance(value, Sentiment):
            return value
        if isinstance(value, str):
            return _SENTIMENT_SYNONYMS.get(value.strip().lower(), Sentiment.NEUTRAL)
        return Sentiment.NEUTRAL

    @classmethod
    def empty(cls) -> 'AnalysisResult':
        """All-empty neutral result returned when analysis could not be completed."""
        return cls(status=AnalysisStatus.DEGRADED)

    def to_wire(self) -> dict:
        """camelCase JSON shape used by API consumers."""
        return self.model_dump(mode='json', by_alias=True)
