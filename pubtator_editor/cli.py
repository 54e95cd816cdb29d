#!/usr/bin/env python3
"""
PubTator Editor CLI Interface
Terminal editor for PubTator files: highlighted documents, annotation editing and export
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pubtator_editor.core.colors import get_entity_color, get_pattern_match_style, get_potential_match_style
from pubtator_editor.core.config import EditorConfig, default_config
from pubtator_editor.core.errors import PubTatorError
from pubtator_editor.core.fileio import read_pubtator_file, save_export
from pubtator_editor.core.models import Annotation, SegmentKind
from pubtator_editor.core.segmenter import get_text_selection_info
from pubtator_editor.core.store import AnnotationManager

console = Console()

HELP_TEXT = """
[bold]Available Commands:[/bold]
  /help                                  - Show this help
  /load <file>                           - Load a PubTator file
  /list                                  - List loaded documents
  /show                                  - Show the current document
  /next, /prev                           - Move between documents
  /goto <id>                             - Jump to a document by ID
  /find <text>                           - Search document IDs
  /search [regex]                        - Highlight a regex (no argument clears it)
  /add <start> <end> <type> [norm_id]    - Annotate an exact range
  /select <start> <end> <type> [norm_id] - Annotate a selection (whitespace is trimmed)
  /edit <uid> <start> <end> <type> [norm_id] - Replace an annotation
  /delete <uid>                          - Delete an annotation
  /types                                 - Show known entity types
  /newtype <name>                        - Register a new entity type
  /new [title]                           - Create an empty document
  /title <text>, /abstract <text>        - Edit the current document's text
  /save [file]                           - Export all documents
  /exit                                  - Exit the program
"""


class PubTatorCLI:
    """Command-line interface for the annotation editor"""

    def __init__(self, config: Optional[EditorConfig] = None):
        self.config = config or default_config
        self.manager = AnnotationManager(config=self.config)
        self.regex_pattern = ""

    def load_file(self, file_path: str) -> bool:
        """Load a PubTator file, reporting recoverable line errors"""
        try:
            content, filename = read_pubtator_file(file_path)
        except UnicodeDecodeError:
            console.print(f"❌ Could not read {escape(file_path)}: file is not UTF-8 text", style="red")
            return False
        except OSError as e:
            console.print(f"❌ Could not read {escape(file_path)}: {escape(str(e))}", style="red")
            return False

        result = self.manager.load_content(content, filename)
        console.print(f"✅ Loaded {len(result.documents)} documents from {filename}", style="green")

        if result.errors:
            console.print(f"⚠️  {len(result.errors)} lines were skipped", style="yellow")
            for issue in result.errors[:10]:
                console.print(f"[dim]  {escape(str(issue))}[/dim]")
        return True

    def render_document(self) -> Text:
        """Current document text with annotation, potential and pattern highlights"""
        potential_style = get_potential_match_style()['style']
        pattern_style = get_pattern_match_style()['style']

        rendered = Text()
        for segment in self.manager.segments(self.regex_pattern):
            if segment.kind == SegmentKind.ANNOTATION:
                rendered.append(segment.text, style=get_entity_color(segment.entity_type).highlight)
            elif segment.kind == SegmentKind.POTENTIAL:
                rendered.append(segment.text, style=potential_style)
            elif segment.kind == SegmentKind.PATTERN:
                rendered.append(segment.text, style=pattern_style)
            else:
                rendered.append(segment.text)
        return rendered

    def show_document(self):
        if not self.manager.documents:
            console.print("No documents loaded.", style="yellow")
            return

        doc = self.manager.current_doc
        title = (f"📄 Document {self.manager.current_doc_index + 1} of "
                 f"{len(self.manager.documents)}: {escape(doc.id)}")
        if self.regex_pattern:
            title += f"  (regex: {escape(self.regex_pattern)})"

        console.print(Panel(self.render_document() if doc.combined_text else Text("No content available"),
                            title=title, border_style="cyan"))

        if doc.annotations:
            table = Table(title="🔬 Annotations")
            table.add_column("UID", style="dim")
            table.add_column("Start", justify="right")
            table.add_column("End", justify="right")
            table.add_column("Text", overflow="fold")
            table.add_column("Type")
            table.add_column("Normalized ID", style="yellow")

            for anno in doc.annotations:
                table.add_row(
                    str(anno.uid),
                    str(anno.start),
                    str(anno.end),
                    Text(anno.text),
                    Text(anno.type, style=get_entity_color(anno.type).highlight),
                    Text(anno.normalized_id or "")
                )
            console.print(table)
        else:
            console.print("[dim]No annotations in this document[/dim]")

    def list_documents(self):
        table = Table(title="📚 Documents")
        table.add_column("#", justify="right", style="dim")
        table.add_column("ID", style="cyan")
        table.add_column("Title", overflow="fold")
        table.add_column("Annotations", justify="right", style="green")

        for i, doc in enumerate(self.manager.documents):
            marker = "▶ " if i == self.manager.current_doc_index else ""
            table.add_row(f"{marker}{i + 1}", Text(doc.id), Text(doc.title), str(len(doc.annotations)))

        console.print(table)

    def show_types(self):
        table = Table(title="🏷️  Entity Types")
        table.add_column("Type")
        for entity_type in self.manager.registry.sorted_types():
            table.add_row(Text(entity_type, style=get_entity_color(entity_type).highlight))
        console.print(table)

    def save(self, target: Optional[str] = None) -> Optional[Path]:
        """Export all documents, falling back to the download directory"""
        content = self.manager.export_content()
        try:
            path = save_export(content, target=target, filename=self.manager.filename,
                               fallback_dir=self.config.fallback_dir)
        except OSError as e:
            console.print(f"❌ Could not save documents: {escape(str(e))}", style="red")
            return None
        console.print(f"✅ Saved {len(self.manager.documents)} documents to {escape(str(path))}", style="green")
        return path

    def _annotation_from_args(self, args, trim_selection: bool = False) -> Annotation:
        if len(args) < 3:
            raise ValueError("expected <start> <end> <type> [normalized_id]")

        start, end = int(args[0]), int(args[1])
        entity_type = args[2]
        normalized_id = args[3] if len(args) > 3 else None
        combined_text = self.manager.current_doc.combined_text

        if trim_selection:
            selection = get_text_selection_info(combined_text, start, end)
            if selection is None:
                raise ValueError(f"selection [{start}, {end}) is empty")
            start, end = selection.start, selection.end

        if not 0 <= start < end <= len(combined_text):
            raise ValueError(f"range [{start}, {end}) is outside the document text (length {len(combined_text)})")

        return Annotation(
            id=self.manager.current_doc.id,
            start=start,
            end=end,
            text=combined_text[start:end],
            type=entity_type,
            normalized_id=normalized_id
        )

    def interactive_mode(self):
        """Run interactive editing mode"""
        console.print(Panel(
            "[bold cyan]PubTator Editor Interactive Mode[/bold cyan]\n"
            "Use commands to navigate and annotate documents:\n"
            "  /help - Show commands\n"
            "  /load <file> - Load a PubTator file\n"
            "  /save [file] - Export annotations\n"
            "  /exit - Exit",
            title="🧬 PubTator Annotation Editor",
            border_style="cyan"
        ))

        while True:
            try:
                command = console.input("\n[bold cyan]pubtator>[/bold cyan] ")

                if command.startswith("/"):
                    self._handle_command(command)
                elif command.strip():
                    console.print("Commands start with '/'. Type /help for a list.", style="yellow")

            except (KeyboardInterrupt, EOFError):
                console.print("\n👋 Goodbye!", style="yellow")
                break

    def _handle_command(self, command: str):
        """Handle editor commands"""
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""
        args = rest.split()

        try:
            if cmd == "/exit":
                console.print("👋 Goodbye!", style="yellow")
                sys.exit(0)

            elif cmd == "/help":
                console.print(Panel(HELP_TEXT, title="Help", border_style="green"))

            elif cmd == "/load" and rest:
                if Path(rest).exists():
                    if self.load_file(rest):
                        self.show_document()
                else:
                    console.print(f"File not found: {escape(rest)}", style="red")

            elif cmd == "/list":
                self.list_documents()

            elif cmd == "/show":
                self.show_document()

            elif cmd == "/next":
                self.manager.next_document()
                self.show_document()

            elif cmd == "/prev":
                self.manager.previous_document()
                self.show_document()

            elif cmd == "/goto" and rest:
                self.manager.navigate_to_document_by_id(rest)
                self.show_document()

            elif cmd == "/find":
                matches = self.manager.search_document_ids(rest)
                if matches:
                    console.print(", ".join(matches[:20]))
                else:
                    console.print(f"No document IDs contain '{escape(rest)}'", style="yellow")

            elif cmd == "/search":
                self.regex_pattern = rest
                self.show_document()

            elif cmd in ("/add", "/select"):
                annotation = self._annotation_from_args(args, trim_selection=(cmd == "/select"))
                stored = self.manager.add_annotation(annotation)
                console.print(f"✅ Added '{escape(stored.text)}' as {escape(stored.type)} (uid {stored.uid})", style="green")
                self.show_document()

            elif cmd == "/edit":
                if len(args) < 4:
                    raise ValueError("expected <uid> <start> <end> <type> [normalized_id]")
                annotation = self._annotation_from_args(args[1:])
                self.manager.edit_annotation_by_id(int(args[0]), annotation)
                self.show_document()

            elif cmd == "/delete" and args:
                removed = self.manager.delete_annotation_by_id(int(args[0]))
                console.print(f"🗑️  Deleted '{escape(removed.text)}' ({escape(removed.type)})", style="green")
                self.show_document()

            elif cmd == "/types":
                self.show_types()

            elif cmd == "/newtype" and rest:
                if self.manager.registry.register(rest):
                    console.print(f"✅ Registered entity type {escape(rest)}", style="green")
                else:
                    console.print(f"Entity type {escape(rest)} is already known", style="yellow")

            elif cmd == "/new":
                doc = self.manager.new_document(rest or None)
                console.print(f"✅ Created document {doc.id}", style="green")
                self.show_document()

            elif cmd in ("/title", "/abstract") and rest:
                if cmd == "/title":
                    report = self.manager.update_document_text(title=rest)
                else:
                    report = self.manager.update_document_text(abstract=rest)
                if report.relocated:
                    console.print(f"Moved {len(report.relocated)} annotations to follow the text", style="cyan")
                for anno in report.unresolved:
                    console.print(f"⚠️  Could not relocate '{escape(anno.text)}' [{anno.start}, {anno.end})",
                                  style="yellow")
                self.show_document()

            elif cmd == "/save":
                self.save(rest or None)

            else:
                console.print(f"Unknown command: {cmd}", style="red")

        except PubTatorError as e:
            console.print(f"❌ {escape(str(e))}", style="red")
        except ValueError as e:
            console.print(f"❌ Invalid arguments for {cmd}: {escape(str(e))}", style="red")


def main():
    parser = argparse.ArgumentParser(
        description="PubTator Editor - annotate biomedical titles and abstracts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  pubtator-editor --file corpus.pubtator

  # Show one document with a regex highlighted
  pubtator-editor --file corpus.pubtator --doc 12345678 --regex "p5[0-9]" --no-interactive

  # Normalize a file by re-exporting it
  pubtator-editor --file corpus.pubtator --export cleaned.pubtator
        """
    )

    parser.add_argument(
        "--file", "-f",
        help="PubTator file to load"
    )

    parser.add_argument(
        "--doc", "-d",
        help="Document ID to open"
    )

    parser.add_argument(
        "--regex", "-r",
        default="",
        help="Regex pattern to highlight"
    )

    parser.add_argument(
        "--list", "-l",
        action="store_true",
        help="List documents in the file"
    )

    parser.add_argument(
        "--export", "-e",
        help="Export documents to this file"
    )

    parser.add_argument(
        "--config", "-c",
        help="YAML configuration file"
    )

    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Exit after the requested actions"
    )

    args = parser.parse_args()

    config = EditorConfig.load_from_file(args.config) if args.config else default_config
    logging.basicConfig(
        level=config.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)]
    )

    cli = PubTatorCLI(config)
    cli.regex_pattern = args.regex

    if args.file and not cli.load_file(args.file):
        sys.exit(1)

    if args.doc:
        try:
            cli.manager.navigate_to_document_by_id(args.doc)
        except PubTatorError as e:
            console.print(f"❌ {escape(str(e))}", style="red")

    if args.list:
        cli.list_documents()

    if args.file and (args.doc or args.regex or not args.list):
        cli.show_document()

    if args.export and cli.save(args.export) is None and args.no_interactive:
        sys.exit(1)

    if not args.no_interactive:
        cli.interactive_mode()


if __name__ == "__main__":
    main()
