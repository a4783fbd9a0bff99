"""CLI entry point for clipblocks."""

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Optional, TextIO

from .blocks import BlockRecord
from .factory import render_blocks
from .filters import FilterError
from .grammar import serialize_blocks
from .paste import paste_handler
from .sanitize import plain_text_blocks, sanitize_text

logger = logging.getLogger(__name__)

# Registry of pipeline filters with their slugs, in pipeline order
FILTERS = {
    "ms-list-converter": ("MsListConverter", "Converts word-processor list paragraphs into lists"),
    "list-merger": ("ListMerger", "Merges adjacent lists of the same type"),
    "image-corrector": ("ImageCorrector", "Fixes broken image sources, drops tracker images"),
    "formatting-transformer": ("FormattingTransformer", "Turns presentational formatting into strong/em/del"),
    "strip-attributes": ("StripAttributes", "Removes attributes outside the whitelist"),
    "comment-remover": ("CommentRemover", "Removes HTML comments"),
    "noise-remover": ("NoiseRemover", "Removes scripts, styles and document head"),
    "unwrap-not-whitelisted": ("Unwrapper", "Unwraps elements outside the tag whitelist"),
    "blockquote-normaliser": ("BlockquoteNormaliser", "Wraps loose quote content in paragraphs"),
    "unwrap-invalid-inline": ("Unwrapper", "Unwraps inline elements holding block content"),
}

OUTPUT_FORMATS = ("json", "html", "delimited", "markdown")


def print_filter_list() -> None:
    """Print available filters."""
    print("Filters (in pipeline order):")
    for slug, (name, desc) in FILTERS.items():
        print(f"  {slug:<24} {name} - {desc}")


@dataclass
class PasteFlags:
    """Parsed clipblocks flags."""
    inline: bool = False
    disable: set[str] = field(default_factory=set)
    output_format: str = "json"
    list_filters: bool = False
    verbose: bool = False
    help: bool = False


def extract_flags(args: list[str]) -> tuple[PasteFlags, list[str]]:
    """Extract clipblocks flags from args, return (flags, remaining_args)."""
    flags = PasteFlags()
    remaining = []

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--inline":
            flags.inline = True
            i += 1
        elif arg == "--disable":
            if i + 1 < len(args):
                flags.disable.add(args[i + 1])
                i += 2
            else:
                remaining.append(arg)
                i += 1
        elif arg == "--format":
            if i + 1 < len(args):
                output_format = args[i + 1].lower()
                if output_format in OUTPUT_FORMATS:
                    flags.output_format = output_format
                i += 2
            else:
                i += 1
        elif arg == "--list-filters":
            flags.list_filters = True
            i += 1
        elif arg in ("--verbose", "-v"):
            flags.verbose = True
            i += 1
        elif arg in ("--help", "-h"):
            flags.help = True
            i += 1
        else:
            remaining.append(arg)
            i += 1

    return flags, remaining


def print_help() -> None:
    """Print clipblocks help."""
    print("clipblocks - Convert pasted HTML into content blocks")
    print()
    print("Usage: clipblocks [options] [FILE]")
    print()
    print("Reads HTML from FILE, or from standard input when FILE is omitted.")
    print()
    print("Options:")
    print("  --inline               Paste into a text field: always output inline HTML")
    print("  --disable <filter>     Skip a filter by slug (can be repeated)")
    print("  --format <format>      Block output format (default: json):")
    print("                           json      - block records as a JSON array")
    print("                           html      - blocks rendered as plain HTML")
    print("                           delimited - block-delimited markup")
    print("                           markdown  - Markdown preview")
    print("  --list-filters         List pipeline filters and their slugs")
    print("  --verbose, -v          Log processed markup to stderr")
    print("  --help, -h             Show this help")
    print()
    print("Examples:")
    print("  clipblocks clipboard.html")
    print("  pbpaste | clipblocks --format markdown")
    print("  clipblocks --inline --disable formatting-transformer snippet.html")


def format_blocks(blocks: list[BlockRecord], output_format: str) -> str:
    """Render block records in the requested output format."""
    if output_format == "html":
        return render_blocks(blocks)
    if output_format == "delimited":
        return serialize_blocks(blocks)
    if output_format == "markdown":
        import html2text

        h = html2text.HTML2Text()
        h.body_width = 0
        h.unicode_snob = True
        return h.handle(render_blocks(blocks)).strip()
    return json.dumps([block.to_dict() for block in blocks], indent=2, ensure_ascii=False)


def _read_input(path: Optional[str], stdin: TextIO) -> str:
    if path is None or path == "-":
        return stdin.read()
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def run(args: Optional[list[str]] = None, stdin: Optional[TextIO] = None) -> int:
    """Run clipblocks with the given arguments. Returns exit code."""
    if args is None:
        args = sys.argv[1:]
    if stdin is None:
        stdin = sys.stdin

    flags, paths = extract_flags(args)

    if flags.help:
        print_help()
        return 0

    if flags.list_filters:
        print_filter_list()
        return 0

    if flags.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s")

    unknown = flags.disable - set(FILTERS)
    if unknown:
        print(f"clipblocks: unknown filter(s): {', '.join(sorted(unknown))}", file=sys.stderr)
        print("Try 'clipblocks --list-filters' for available filters.", file=sys.stderr)
        return 1

    if len(paths) > 1:
        print("clipblocks: only one input file can be given", file=sys.stderr)
        return 1

    try:
        content = _read_input(paths[0] if paths else None, stdin)
    except OSError as exc:
        print(f"clipblocks: cannot read {paths[0]}: {exc.strerror}", file=sys.stderr)
        return 1

    try:
        result = paste_handler(content, inline=flags.inline, disabled=flags.disable)
    except FilterError as exc:
        logger.debug("Paste pipeline failed", exc_info=True)
        print(f"clipblocks: {exc}; falling back to plain text", file=sys.stderr)
        result = sanitize_text(content) if flags.inline else plain_text_blocks(content)

    output = result if isinstance(result, str) else format_blocks(result, flags.output_format)
    sys.stdout.write(output)
    if output and not output.endswith("\n"):
        sys.stdout.write("\n")

    return 0


def main() -> None:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
