"""
HURIDOCS field numbers and literal header markers per record format.
"""
from dataclasses import dataclass
from typing import FrozenSet, Tuple

from huridocs_intake.core.models import DocumentFormat

MIN_FIELD_MATCHES = 3


@dataclass(frozen=True)
class FormatSignature:
    format: DocumentFormat
    fields: FrozenSet[int]
    # Any one title must be present together with every required substring
    titles: Tuple[str, ...]
    required: Tuple[str, ...]

    def header_matches(self, content: str) -> bool:
        return (any(title in content for title in self.titles)
                and all(token in content for token in self.required))

    def score(self, seen_numbers) -> int:
        return len(self.fields.intersection(seen_numbers))


EVENT = FormatSignature(
    format=DocumentFormat.EVENT,
    fields=frozenset({101, 102, 108, 111, 112, 113, 114, 115, 116, 150}),
    titles=('Ereignisformat',),
    required=('101', '102', '115'),
)

ACT = FormatSignature(
    format=DocumentFormat.ACT,
    fields=frozenset({501, 502, 503, 504, 505, 506, 507, 508}),
    titles=('Akt-Standardformat',),
    required=('501', '502'),
)

PARTICIPATION = FormatSignature(
    format=DocumentFormat.PARTICIPATION,
    fields=frozenset({2401, 2402, 2403, 2404, 2408, 2409, 2412, 2422, 2450}),
    titles=('HURIDOCS Beteiligungsformat', 'Dokumentation der Beteiligung nach HURIDOCS'),
    required=('2401', '2402', 'Beteiligung-Datensatznummer'),
)

# Declaration order doubles as tie-break priority when scoring
CATALOG: Tuple[FormatSignature, ...] = (EVENT, ACT, PARTICIPATION)

# Literal headers are checked most specific first
HEADER_CHECK_ORDER: Tuple[FormatSignature, ...] = (PARTICIPATION, EVENT, ACT)
