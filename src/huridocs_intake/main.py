#!/usr/bin/env python3
"""
Human Rights Intelligence - document intake command line.
Detects HURIDOCS record formats, imports document folders and produces
AI-assisted analysis reports for human-rights documentation.
"""
import sys
import json
import asyncio
import argparse
import logging
from pathlib import Path

from tqdm import tqdm

from huridocs_intake.core.api_client import TextGenerationClient
from huridocs_intake.core.config import Settings
from huridocs_intake.core.errors import UnsupportedDocumentError
from huridocs_intake.core.models import AnalysisStatus
from huridocs_intake.output.markdown_generator import MarkdownGenerator
from huridocs_intake.processing.document_analyzer import DocumentAnalyzer
from huridocs_intake.processing.document_loader import DocumentLoader, SUPPORTED_SUFFIXES
from huridocs_intake.processing.format_detector import FormatDetector
from huridocs_intake.utils.file_utils import ProcessedDatabase, cleanup_cache, find_documents

logger = logging.getLogger(__name__)


class IntakeApp:
    """Wires loader, detector, analyzer and output for the CLI commands."""

    def __init__(self, args, settings: Settings, client=None):
        self.args = args
        self.settings = settings
        self.loader = DocumentLoader()
        self.detector = FormatDetector()
        self.markdown_generator = MarkdownGenerator()
        self.registry = ProcessedDatabase(settings.cache_dir / 'registry' / 'imports.json')
        # Built on first use so detect/import work without API credentials
        self._client = client

    @property
    def client(self):
        if self._client is None:
            cache_dir = None if getattr(self.args, 'nocache', False) else self.settings.cache_dir
            self._client = TextGenerationClient(
                cache_dir=cache_dir,
                model=self.settings.model,
                max_attempts=self.settings.max_attempts,
                timeout=self.settings.request_timeout,
            )
        return self._client

    def run(self) -> int:
        if self.args.cleanup_cache:
            cleanup_cache(self.settings.cache_dir, self.args.cleanup_cache)

        command = self.args.command
        if command == 'detect':
            return self.detect_files(self.args.files)
        if command == 'analyze':
            return asyncio.run(self.analyze_files(self.args.files))
        if command == 'import':
            return self.import_directory(Path(self.args.directory))
        return 0

    def detect_files(self, files) -> int:
        """Print the detection result for each file as JSON."""
        failures = 0
        for file in files:
            path = Path(file)
            try:
                source = self.loader.load(path)
            except (OSError, UnsupportedDocumentError) as e:
                logger.error(f"Cannot read {path.name}: {e}")
                failures += 1
                continue

            detected = self.detector.detect(source.content)
            payload = detected.model_dump(mode='json', by_alias=True, exclude={'raw_content'}) if detected else None
            print(json.dumps({'file': str(path), 'detected': payload}, ensure_ascii=False, indent=2))
        return 1 if failures else 0

    async def analyze_files(self, files) -> int:
        """Analyze each file and write a report per document."""
        analyzer = DocumentAnalyzer(self.client, detector=self.detector, settings=self.settings)
        out_dir = Path(self.args.output_dir) if self.args.output_dir else self.settings.output_dir
        out_dir.mkdir(parents=True, exist_ok=True)

        failures = 0
        degraded = 0
        written = set()
        for file in tqdm(files, desc='Documents'):
            path = Path(file)
            try:
                source = self.loader.load(path)
            except (OSError, UnsupportedDocumentError) as e:
                logger.error(f"Cannot read {path.name}: {e}")
                failures += 1
                continue

            result, detected = await analyzer.analyze_document(source, detect=not self.args.no_detect)

            if result.status is AnalysisStatus.DEGRADED:
                degraded += 1

            if self.args.format == 'json':
                output_file = self.report_path(out_dir, path, '.json', written)
                output_file.write_text(
                    json.dumps(result.to_wire(), ensure_ascii=False, indent=2), encoding='utf-8'
                )
            else:
                output_file = self.report_path(out_dir, path, '.md', written)
                output_file.write_text(
                    self.markdown_generator.generate_markdown(result, source, detected), encoding='utf-8'
                )
            logger.info(f"Wrote {output_file}")

        logger.info(f"Analyzed {len(files) - failures} documents ({degraded} degraded, {failures} unreadable)")
        return 1 if failures else 0

    @staticmethod
    def report_path(out_dir: Path, path: Path, extension: str, written: set) -> Path:
        """Report file for ``path``, never reusing a name already written in this run."""
        candidate = out_dir / f"{path.stem}{extension}"
        if candidate in written:
            # Same stem seen before, e.g. a.md and a.pdf
            base = f"{path.stem}_{path.suffix.lstrip('.')}" if path.suffix else path.stem
            candidate = out_dir / f"{base}{extension}"
            counter = 2
            while candidate in written:
                candidate = out_dir / f"{base}_{counter}{extension}"
                counter += 1
            logger.warning(f"Report name for {path} already used in this run, writing {candidate.name}")
        written.add(candidate)
        return candidate

    def import_directory(self, directory: Path) -> int:
        """Detect the HURIDOCS format of every document in ``directory`` and record it."""
        if self.args.clean:
            self.registry.clear()
            logger.info("Cleared import registry")

        documents = find_documents(directory, SUPPORTED_SUFFIXES)
        if not documents:
            logger.error(f"No documents found in {directory}")
            return 1
        logger.info(f"Found {len(documents)} documents")

        if self.args.dry_run:
            logger.info("Dry run mode - showing what would be imported:")
            for doc_path in documents:
                print('→', doc_path.name)
            return 0

        imported = 0
        failed = 0
        for doc_path in tqdm(documents, desc='Import'):
            key = str(doc_path)
            if not self.args.overwrite and self.registry.is_processed(key):
                continue
            try:
                source = self.loader.load(doc_path)
            except (OSError, UnsupportedDocumentError) as e:
                logger.error(f"Failed to import {doc_path.name}: {e}")
                self.registry.mark(key, 'error', title=doc_path.stem, error=str(e))
                failed += 1
                continue

            detected = self.detector.detect(source.content)
            self.registry.mark(
                key, 'success',
                title=source.title,
                documentType=source.type,
                isHuridocsFormat=detected is not None,
                format=detected.format.value if detected else 'unknown',
                fieldsCount=len(detected.fields) if detected else 0,
            )
            imported += 1

        logger.info(f"Import finished: imported {imported}, failed {failed}")
        return 1 if failed else 0


def create_argument_parser():
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(description='HURIDOCS document intake and analysis')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--env-file', type=Path, help='Load settings from this .env file')
    parser.add_argument('--cleanup-cache', type=int, metavar='DAYS',
                        help='Remove cache files older than N days')

    subparsers = parser.add_subparsers(dest='command', required=True)

    detect = subparsers.add_parser('detect', help='Detect HURIDOCS formats')
    detect.add_argument('files', nargs='+', help='Documents to inspect')

    analyze = subparsers.add_parser('analyze', help='Analyze documents with the language model')
    analyze.add_argument('files', nargs='+', help='Documents to analyze')
    analyze.add_argument('--output-dir', help='Directory for reports')
    analyze.add_argument('--format', choices=('markdown', 'json'), default='markdown', help='Report format')
    analyze.add_argument('--nocache', action='store_true', help='Disable API caching')
    analyze.add_argument('--no-detect', action='store_true', help='Skip HURIDOCS format detection')

    imp = subparsers.add_parser('import', help='Import a folder of documents into the registry')
    imp.add_argument('directory', help='Folder to scan')
    imp.add_argument('--overwrite', action='store_true', help='Re-import already registered files')
    imp.add_argument('--dry-run', action='store_true', help='Show what would be imported')
    imp.add_argument('--clean', action='store_true', help='Clear the registry first')

    return parser


def main(argv=None):
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(levelname)s %(message)s')

    try:
        settings = Settings.from_env(args.env_file)
        app = IntakeApp(args, settings)
        sys.exit(app.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
