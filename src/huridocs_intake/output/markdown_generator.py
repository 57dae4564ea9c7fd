"""
Markdown report generation with YAML frontmatter.
"""
import yaml
import logging
from typing import List, Optional

from huridocs_intake.core.models import AnalysisResult, AnalysisStatus, DetectedDocument, SourceDocument

logger = logging.getLogger(__name__)


class MarkdownGenerator:
    """Generates analysis reports as markdown."""

    @staticmethod
    def deduplicate_list(items: List[str], similarity_threshold: float = 0.8) -> List[str]:
        """Remove duplicate items based on similarity."""
        if not items:
            return []

        unique_items = []
        for item in items:
            item = item.strip()
            if not item:
                continue

            is_duplicate = False
            for existing in unique_items:
                if item.lower() == existing.lower():
                    is_duplicate = True
                    break
                # Check for substantial word overlap
                words1 = set(item.lower().split())
                words2 = set(existing.lower().split())
                if len(words1) > 0 and len(words2) > 0:
                    overlap = len(words1 & words2) / len(words1 | words2)
                    if overlap > similarity_threshold:
                        is_duplicate = True
                        break

            if not is_duplicate:
                unique_items.append(item)

        return unique_items

    @staticmethod
    def _bullets(heading: str, items: List[str]) -> Optional[str]:
        if not items:
            return None
        newline = chr(10)
        return f"## {heading}{newline}{newline}" + newline.join(f"- {item}" for item in items)

    def generate_markdown(self, result: AnalysisResult, source: SourceDocument,
                          detected: Optional[DetectedDocument] = None) -> str:
        """Render an analysis result as a markdown report."""
        title = source.title or 'Unbenanntes Dokument'
        frontmatter_data = {
            'title': title,
            'document_type': source.type or 'document',
            'huridocs_format': detected.format.value if detected else None,
            'status': result.status.value,
            'sentiment': result.sentiment.value,
            'keywords': self.deduplicate_list(result.keywords),
        }
        fm_yaml = yaml.safe_dump(frontmatter_data, allow_unicode=True, default_flow_style=False, sort_keys=False)

        sections = [
            self._bullets('Beteiligte Parteien', self.deduplicate_list(result.involved_parties)),
            self._bullets('Rechtliche Grundlagen', [
                f"**{basis.reference}**: {basis.description}" if basis.description else basis.reference
                for basis in result.legal_bases
            ]),
            self._bullets('Zentrale Fakten', self.deduplicate_list(result.key_facts)),
            self._bullets('Menschenrechtliche Implikationen', self.deduplicate_list(result.human_rights_implications)),
            self._bullets('Verbindungen', self.deduplicate_list(result.connections)),
            # Chronology keeps its order and repeats
            self._bullets('Zeitliche Abfolge', result.timeline),
            self._bullets('Empfohlene Maßnahmen', self.deduplicate_list(result.suggested_actions)),
            self._bullets('Widersprüche', [
                f"{c.statement1} / {c.statement2}: {c.explanation}" for c in result.contradictions
            ]),
        ]

        if detected and detected.fields:
            rows = '\n'.join(f"| {key} | {value} |" for key, value in detected.fields.items())
            sections.append(f"## HURIDOCS-Felder\n\n| Feld | Wert |\n|---|---|\n{rows}")

        if result.status is AnalysisStatus.DEGRADED:
            sections.insert(0, "> Die Analyse konnte nicht durchgeführt werden.")

        content_text = '\n\n'.join(s for s in sections if s)

        return f"""---
{fm_yaml}---

# {title}

{content_text}
"""
