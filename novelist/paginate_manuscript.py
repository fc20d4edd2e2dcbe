"""
Manuscript pagination tool for Novelist.

This script:
1. Reads a plain-text manuscript (paragraphs separated by blank lines)
2. Paginates it with the same controller the editor uses
3. Prints one summary line per page
4. Optionally writes the normalized export

Usage:
    python paginate_manuscript.py novel.txt [--lines 30] [--chars-per-line 80] [--export out.txt]
"""
import sys
import argparse
import logging
from pathlib import Path

# Add source directory to path
sys.path.insert(0, str(Path(__file__).parent))

from config import MAX_LINES_PER_PAGE, CHARS_PER_LINE
from editor.measurement import TextMetrics
from editor.pagination import PaginationController

logger = logging.getLogger(__name__)


def paginate(text: str, max_lines: int, chars_per_line: int) -> PaginationController:
    controller = PaginationController(
        measurer=TextMetrics(chars_per_line=chars_per_line),
        max_lines=max_lines
    )
    controller.load_text(text)
    return controller


def summarize(controller: PaginationController) -> str:
    """One line per page: marker, words and measured lines."""
    lines = []
    for page in controller.pages:
        paragraphs = page.text.split("\n\n") if page.text else []
        measured = sum(controller.measurer.wrapped_lines(p) for p in paragraphs) + max(0, len(paragraphs) - 1)
        oversized = " (oversized)" if measured > controller.max_lines else ""
        lines.append(f"{page.marker:>10}  {page.word_count:>6} words  {measured:>3} lines{oversized}")
    return "\n".join(lines)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Paginate a plain-text manuscript")
    parser.add_argument("manuscript", type=Path, help="UTF-8 text file, paragraphs separated by blank lines")
    parser.add_argument("--lines", type=int, default=MAX_LINES_PER_PAGE, help="Lines per page")
    parser.add_argument("--chars-per-line", type=int, default=CHARS_PER_LINE, help="Soft-wrap width")
    parser.add_argument("--export", type=Path, help="Write the normalized manuscript here")
    args = parser.parse_args(argv)

    try:
        text = args.manuscript.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read {args.manuscript}: {e}")
        return 1

    controller = paginate(text, args.lines, args.chars_per_line)
    print(summarize(controller))
    print(f"\n{controller.document.total_pages} pages")

    if args.export:
        args.export.write_text(controller.get_full_content(), encoding="utf-8")
        logger.info(f"Exported manuscript to {args.export}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
