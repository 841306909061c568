"""CLI entry point for classdict."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from classdict import __version__
from classdict.catalog import CatalogValidationError, DictionaryCatalog, DictionarySpec
from classdict.config import ConfigError, Settings
from classdict.engine.cascade import ResolutionCascade, ResolutionResult, ResolutionStatus
from classdict.engine.disambiguate import Disambiguator
from classdict.engine.query import Query
from classdict.engine.render import render_result
from classdict.lemmatize.morpheus import MorpheusLemmatizer
from classdict.store.base import CorpusUnavailableError, EntryStore
from classdict.store.flat import FlatTextStore
from classdict.store.indexed import IndexedStore, build_index
from classdict.text.diacritics import Language

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

EXIT_NOT_FOUND = 1
EXIT_CORPUS_UNAVAILABLE = 2


def _load_catalog() -> DictionaryCatalog:
    try:
        return DictionaryCatalog.load()
    except (CatalogValidationError, FileNotFoundError) as e:
        raise click.ClickException(f"Dictionary catalog: {e}")


def _open_store(
    settings: Settings,
    language: Language,
    file_path: str | None,
    db_path: str | None,
    smart: bool,
    prefer_index: bool,
) -> tuple[EntryStore, str]:
    """Pick the entry store for a lookup and a name for the header line."""
    if db_path:
        return IndexedStore(db_path), Path(db_path).name
    if file_path:
        rules = settings.boundary_rules(language)
        return FlatTextStore(file_path, language, rules), Path(file_path).name

    spec: DictionarySpec | None = _load_catalog().for_language(language, smart_quotes=smart)
    if spec is None:
        raise click.ClickException(f"No {language.value} dictionary in the catalog")

    index_path = spec.index_path(settings.data_root)
    if prefer_index and index_path is not None and index_path.exists():
        return IndexedStore(index_path), spec.name

    rules = settings.boundary_rules(language)
    return FlatTextStore(spec.file_path(settings.data_root), language, rules), spec.name


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Settings file (YAML). Defaults to ~/.classdict/config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Log matching stages")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool):
    """classdict - Latin and Greek dictionary lookup."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = Settings.load(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("word")
@click.option(
    "--file", "-f", "file_path", type=click.Path(dir_okay=False), help="Flat-text dictionary file"
)
@click.option(
    "--db", "db_path", type=click.Path(dir_okay=False), help="Indexed dictionary (SQLite)"
)
@click.option("--smart", "-s", is_flag=True, help="Use the smart-quotes edition")
@click.option(
    "--language",
    "-l",
    type=click.Choice(["auto", "latin", "greek"]),
    default="auto",
    help="Dictionary language (auto: Greek if the word has Greek letters)",
)
@click.option(
    "--context",
    "-c",
    type=click.IntRange(min=0),
    default=0,
    help="Show LINES of context around the match instead of the entry",
)
@click.option("--exact", "-e", is_flag=True, help="Exact match (diacritics still flexible)")
@click.option("--suggest", "-S", is_flag=True, help="Suggest related entries when nothing matches")
@click.option("--direct", "-d", is_flag=True, help="Print directly (no pager)")
@click.option(
    "--multiple",
    "-m",
    type=click.IntRange(min=1),
    default=None,
    help="List up to N matching entries to choose from (indexed dictionaries)",
)
@click.option("--lemmatize", "-L", is_flag=True, help="Look up the lemma of an inflected form")
@click.option("--json", "output_json", is_flag=True, help="Output the result as JSON")
@click.pass_obj
def lookup(
    settings: Settings,
    word: str,
    file_path: str | None,
    db_path: str | None,
    smart: bool,
    language: str,
    context: int,
    exact: bool,
    suggest: bool,
    direct: bool,
    multiple: int | None,
    lemmatize: bool,
    output_json: bool,
):
    """Look up WORD and show its dictionary entry.

    Example: classdict lookup amo
             classdict lookup -e ἀγάπη
             classdict lookup -L amabam
    """
    if multiple and multiple > settings.max_results:
        logger.warning(f"--multiple {multiple} capped at max_results={settings.max_results}")
        multiple = settings.max_results

    try:
        query = Query(
            raw_word=word,
            language=None if language == "auto" else Language(language),
            exact_match=exact,
            suggest=suggest,
            multiple=multiple,
            lemmatize=lemmatize,
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="WORD")

    store, dictionary_name = _open_store(
        settings,
        query.resolved_language,
        file_path,
        db_path,
        smart,
        prefer_index=context == 0,
    )

    lemmatizer = None
    if lemmatize:
        lemmatizer = MorpheusLemmatizer(
            command=settings.lemmatizer_command,
            stemlib=settings.lemmatizer_stemlib,
            timeout=settings.lemmatizer_timeout,
        )

    cascade = ResolutionCascade(store, lemmatizer, suggestion_limit=settings.suggestion_limit)
    try:
        result = cascade.resolve(query)
        exit_code = _present(
            result, store, dictionary_name, settings, context, direct, output_json
        )
    finally:
        store.close()

    if exit_code:
        sys.exit(exit_code)


def _present(
    result: ResolutionResult,
    store: EntryStore,
    dictionary_name: str,
    settings: Settings,
    context: int,
    direct: bool,
    output_json: bool,
) -> int:
    """Show a resolution result and return the exit code."""
    if result.status is ResolutionStatus.ERROR:
        if output_json:
            click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
            return EXIT_CORPUS_UNAVAILABLE
        err_console.print(f"[red]Error: {escape(result.error_message)}[/red]")
        err_console.print(
            "[dim]Check the dictionary path (-f/--db) or the data root "
            f"({escape(str(settings.data_root))}).[/dim]"
        )
        return EXIT_CORPUS_UNAVAILABLE

    matched = result.found and not result.is_suggestion

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0 if matched else EXIT_NOT_FOUND

    if matched and len(result.candidates) > 1:
        selection = Disambiguator(console).disambiguate(result.candidates)
        if selection.cancelled:
            console.print("Selection cancelled.")
            return 0
        result.candidates = [selection.candidate]

    flat_store = store if isinstance(store, FlatTextStore) else None
    if context and flat_store is None:
        err_console.print(
            "[yellow]Context windows need a flat-text dictionary; showing the entry[/yellow]"
        )

    text = render_result(result, dictionary_name, store=flat_store, context=context)
    if direct or not settings.pager:
        click.echo(text, nl=False)
    else:
        click.echo_via_pager(text)

    return 0 if matched else EXIT_NOT_FOUND


@cli.command()
@click.option("--dictionary", "-D", "key", default=None, help="Catalog key (e.g. lewis-short)")
@click.option(
    "--file", "-f", "file_path", type=click.Path(dir_okay=False), help="Flat-text dictionary file"
)
@click.option(
    "--language",
    "-l",
    type=click.Choice(["latin", "greek"]),
    default=None,
    help="Corpus language (defaults to the catalog entry's, else latin)",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="SQLite file to write")
@click.pass_obj
def index(
    settings: Settings,
    key: str | None,
    file_path: str | None,
    language: str | None,
    output: str | None,
):
    """Build an indexed dictionary from a flat-text one.

    Example: classdict index -D lewis-short
             classdict index -f lsj.txt -l greek -o lsj.db
    """
    catalog = _load_catalog()
    spec = None
    if key:
        spec = catalog.get(key)
        if spec is None:
            raise click.BadParameter(f"Unknown dictionary: {key}", param_hint="--dictionary")
    elif not file_path:
        spec = catalog.for_language(Language(language or "latin"))
        if spec is None:
            raise click.UsageError("No dictionary given; use --dictionary or --file")

    if language:
        lang = Language(language)
    elif spec is not None:
        lang = spec.language
    else:
        lang = Language.LATIN

    source_path = Path(file_path) if file_path else spec.file_path(settings.data_root)
    if output:
        target = Path(output)
    elif spec is not None and spec.index_path(settings.data_root) is not None:
        target = spec.index_path(settings.data_root)
    else:
        raise click.UsageError("No output path; use --output")

    console.print(f"[bold blue]Indexing {source_path}...[/bold blue]")
    source = FlatTextStore(source_path, lang, settings.boundary_rules(lang))
    try:
        count = build_index(source, target)
    except CorpusUnavailableError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(EXIT_CORPUS_UNAVAILABLE)

    console.print(f"[green]✓ Indexed {count} entries into {target}[/green]")


@cli.command()
@click.pass_obj
def dictionaries(settings: Settings):
    """List known dictionaries and whether their files are installed."""
    catalog = _load_catalog()

    table = Table(title="Dictionaries")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Language")
    table.add_column("File")
    table.add_column("Index")

    for spec in catalog.dictionaries.values():
        index_path = spec.index_path(settings.data_root)
        table.add_row(
            spec.key,
            spec.name,
            spec.language.value,
            "✓" if spec.file_path(settings.data_root).exists() else "missing",
            "✓" if index_path is not None and index_path.exists() else "-",
        )

    console.print(table)
    console.print(f"[dim]Data root: {settings.data_root}[/dim]")


if __name__ == "__main__":
    cli()
