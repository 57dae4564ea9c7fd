"""Tests for markdown report rendering."""

import yaml

from huridocs_intake.core.models import (
    AnalysisResult, Contradiction, DetectedDocument, DocumentFormat, LegalBasis, Sentiment, SourceDocument
)
from huridocs_intake.output.markdown_generator import MarkdownGenerator


def split_frontmatter(markdown):
    _, fm, body = markdown.split("---\n", 2)
    return yaml.safe_load(fm), body


class TestDeduplicateList:
    def test_case_insensitive_duplicates(self):
        assert MarkdownGenerator.deduplicate_list(["Polizei", "polizei", " "]) == ["Polizei"]

    def test_high_word_overlap_is_duplicate(self):
        items = ["Räumung des Camps am Montag", "Räumung des Camps am Montag früh", "Anzeige erstattet"]
        assert MarkdownGenerator.deduplicate_list(items, similarity_threshold=0.7) == [
            "Räumung des Camps am Montag", "Anzeige erstattet"
        ]

    def test_empty(self):
        assert MarkdownGenerator.deduplicate_list([]) == []


class TestGenerateMarkdown:
    def test_full_report(self):
        result = AnalysisResult(
            involved_parties=["Polizeidirektion Nord"],
            legal_bases=[LegalBasis(reference="Art. 8 GG", description="Versammlungsfreiheit")],
            key_facts=["Camp geräumt"],
            timeline=["2023-03-02 Räumung", "2023-03-02 Räumung"],
            keywords=["Protest", "protest"],
            sentiment=Sentiment.NEGATIVE,
            contradictions=[Contradiction(statement1="friedlich", statement2="gewaltsam", explanation="Zeugen")],
        )
        source = SourceDocument(title="Vorfall Hannover", type="huridocs", content="...")
        detected = DetectedDocument(format=DocumentFormat.EVENT, fields={"101": "ERG-1"}, raw_content="...")

        markdown = MarkdownGenerator().generate_markdown(result, source, detected)
        fm, body = split_frontmatter(markdown)

        assert fm == {
            "title": "Vorfall Hannover",
            "document_type": "huridocs",
            "huridocs_format": "event",
            "status": "ok",
            "sentiment": "negative",
            "keywords": ["Protest"],
        }
        assert "# Vorfall Hannover" in body
        assert "- Polizeidirektion Nord" in body
        assert "- **Art. 8 GG**: Versammlungsfreiheit" in body
        assert body.count("- 2023-03-02 Räumung") == 2
        assert "- friedlich / gewaltsam: Zeugen" in body
        assert "| 101 | ERG-1 |" in body
        assert "## Verbindungen" not in body

    def test_degraded_report(self):
        markdown = MarkdownGenerator().generate_markdown(AnalysisResult.empty(), SourceDocument(content="x"))
        fm, body = split_frontmatter(markdown)

        assert fm["status"] == "degraded"
        assert fm["huridocs_format"] is None
        assert fm["title"] == "Unbenanntes Dokument"
        assert "Die Analyse konnte nicht durchgeführt werden." in body
