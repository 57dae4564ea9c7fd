"""
Prompt management for HURIDOCS-aware and generic document analysis.
"""
from typing import Dict

TRUNCATION_MARKER = '...(gekürzt)'

HURIDOCS_ROLE = "Du bist ein Menschenrechtsexperte mit Spezialisierung auf HURIDOCS-Dokumentationsstandards."
GENERIC_ROLE = "Du bist ein Experte für die Analyse von Dokumenten im Menschenrechtskontext."

FORMAT_LABELS = {
    'event': 'Ereignis',
    'act': 'Akt',
    'participation': 'Beteiligung',
}

RESPONSE_SHAPE = """{
  "involvedParties": ["Partei 1", "Partei 2", ...],
  "legalBases": [
    { "reference": "Gesetz/Konvention", "description": "Relevanz/Anwendung" },
    ...
  ],
  "keyFacts": ["Fakt 1", "Fakt 2", ...],
  "humanRightsImplications": ["Implikation 1", "Implikation 2", ...],
  "connections": ["Verbindung 1", "Verbindung 2", ...],
  "timeline": ["Ereignis 1 (Datum)", "Ereignis 2 (Datum)", ...],
  "keywords": ["Schlüsselwort 1", "Schlüsselwort 2", ...],
  "sentiment": "positive"|"negative"|"neutral",
  "suggestedActions": ["Vorgeschlagene Maßnahme 1", "Vorgeschlagene Maßnahme 2", ...],
  "contradictions": [
    { "statement1": "Aussage 1", "statement2": "Aussage 2", "explanation": "Erklärung des Widerspruchs" },
    ...
  ]
}"""


class PromptManager:
    """Manages prompts for the analysis paths."""

    def __init__(self, content_limit: int = 5000):
        self.content_limit = content_limit
        self.prompts = {
            'huridocs': self._huridocs_prompt,
            'generic': self._generic_prompt,
        }

    def get(self, prompt_type: str, **kwargs) -> str:
        """Get a prompt with interpolated variables."""
        if prompt_type not in self.prompts:
            raise ValueError(f"Unknown prompt type: {prompt_type}")
        return self.prompts[prompt_type](**kwargs)

    def _huridocs_prompt(self, format: str, fields: Dict[str, str], content: str) -> str:
        label = FORMAT_LABELS.get(format, format)
        field_lines = '\n'.join(f"{key}: {value}" for key, value in fields.items())
        return f"""{HURIDOCS_ROLE}

Analysiere das folgende Dokument im HURIDOCS-{label}-Format für Menschenrechtsdokumentation:

INHALT:
{content[:self.content_limit]}

EXTRAHIERTE FELDER:
{field_lines}

Führe eine umfassende Analyse des Dokuments durch und extrahiere folgende Informationen:

1. Beteiligte Parteien: Alle Personen, Organisationen, Institutionen oder Gruppen, die im Dokument erwähnt werden
2. Rechtliche Grundlagen: Gesetze, Konventionen, Abkommen oder Normen, die im Kontext relevant sind
3. Zentrale Fakten: Die wichtigsten faktischen Informationen des Falls/Ereignisses
4. Menschenrechtliche Implikationen: Wie sich der Fall auf Menschenrechte auswirkt, welche Rechte betroffen sind
5. Verbindungen: Mögliche Verbindungen zu anderen Fällen oder übergeordneten Themen
6. Zeitliche Abfolge: Chronologie der Ereignisse
7. Schlüsselwörter: Relevante Begriffe für die Kategorisierung
8. Widersprüche: Mögliche Unstimmigkeiten oder unklare Sachverhalte im Dokument
9. Empfohlene Maßnahmen: Vorschläge für Folgemaßnahmen basierend auf dem Dokument

Antworte im folgenden JSON-Format:
{RESPONSE_SHAPE}
"""

    def _generic_prompt(self, content: str, title: str = None, type: str = None) -> str:
        body = content[:self.content_limit]
        if len(content) > self.content_limit:
            body = f"{body} {TRUNCATION_MARKER}"
        return f"""{GENERIC_ROLE}

Analysiere das folgende Dokument aus einem Menschenrechtskontext:

TITEL: {title or 'Unbekannt'}
TYP: {type or 'Unbekannt'}
INHALT:
{body}

Analysiere folgende Aspekte:
1. Beteiligte Parteien
2. Rechtliche Grundlagen
3. Zentrale Fakten
4. Menschenrechtliche Implikationen
5. Verbindungen zu anderen Themen/Fällen
6. Zeitliche Abfolge (falls vorhanden)
7. Schlüsselwörter für die Kategorisierung

Antworte im folgenden JSON-Format:
{RESPONSE_SHAPE}
"""
