"""Entry point for the flow-text CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import httpx

from flow.text.ansi import LiveTheme, preview_to_lines, segments_to_ansi
from flow.text.attachments import AttachmentClient, AttachmentError
from flow.text.paste import ImageResolver
from flow.text.patterns import PatternKind, image_index, scan
from flow.text.preview import build_preview
from flow.text.settings import EditorSettings, load_settings
from flow.text.spans import annotate
from flow.text.tags import TagIndex
from flow.text.width import truncate_to_width

logger = logging.getLogger(__name__)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


async def _fetch_resolver(settings: EditorSettings) -> ImageResolver | None:
    if not settings.task_id:
        logger.warning("--fetch-images needs a task id (--task or taskId in settings)")
        return None
    async with AttachmentClient(settings.api_base_url, settings.task_id, token=settings.api_token) as client:
        try:
            await client.list_attachments()
        except (httpx.HTTPError, AttachmentError) as e:
            logger.warning("Could not load attachments for task %s: %s", settings.task_id, e)
            return None
    return client


def _cmd_annotate(args: argparse.Namespace, settings: EditorSettings) -> int:
    theme = LiveTheme.plain() if args.plain else LiveTheme()
    sys.stdout.write(segments_to_ansi(annotate(_read_input(args.file)), theme))
    return 0


def _cmd_scan(args: argparse.Namespace, settings: EditorSettings) -> int:
    text = _read_input(args.file)
    out = [
        {
            "kind": m.kind.value,
            "start": m.start,
            "end": m.end,
            "content": m.content,
            "fullText": m.full_text,
            **({"imageIndex": image_index(m)} if m.kind is PatternKind.IMAGE else {}),
        }
        for m in scan(text)
    ]
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


def _cmd_preview(args: argparse.Namespace, settings: EditorSettings) -> int:
    text = _read_input(args.file)
    resolver = asyncio.run(_fetch_resolver(settings)) if args.fetch_images else None
    theme = LiveTheme.plain() if args.plain else LiveTheme()
    for line in preview_to_lines(build_preview(text, resolver), args.width, theme):
        print(line)
    return 0


def _cmd_suggest(args: argparse.Namespace, settings: EditorSettings) -> int:
    payload = json.loads(_read_input(args.tags))
    if isinstance(payload, dict):
        payload = payload.get("data") or []
    index = TagIndex.from_api(payload, limit=settings.max_suggestions)
    for tag in index.query(args.query.lstrip("#")):
        print(truncate_to_width(tag.hashtag, args.width))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flow-text", description="Live styling for task descriptions")
    parser.add_argument("--settings", default=None, help="Settings file (default: ~/.flow/editor.json)")
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("annotate", help="Print the text with live styling (markers visible)")
    p.add_argument("file", nargs="?", default="-", help="Input file, '-' for stdin")
    p.add_argument("--plain", action="store_true", help="No ANSI colours")
    p.set_defaults(func=_cmd_annotate)

    p = sub.add_parser("scan", help="Print pattern matches as JSON")
    p.add_argument("file", nargs="?", default="-", help="Input file, '-' for stdin")
    p.set_defaults(func=_cmd_scan)

    p = sub.add_parser("preview", help="Print the rendered view")
    p.add_argument("file", nargs="?", default="-", help="Input file, '-' for stdin")
    p.add_argument("--width", type=int, default=80)
    p.add_argument("--plain", action="store_true", help="No ANSI colours")
    p.add_argument("--fetch-images", action="store_true", help="Resolve [imgN] through the task's attachments")
    p.add_argument("--task", default=None, help="Task id (overrides settings)")
    p.add_argument("--api", default=None, help="API base URL (overrides settings)")
    p.set_defaults(func=_cmd_preview)

    p = sub.add_parser("suggest", help="Print hashtag suggestions for a query")
    p.add_argument("tags", help="Tag list JSON as returned by the API, '-' for stdin")
    p.add_argument("query", help="Text typed after #")
    p.add_argument("--width", type=int, default=40, help="Truncate suggestions to this many cells")
    p.set_defaults(func=_cmd_suggest)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings = load_settings(
        args.settings,
        task_id=getattr(args, "task", None),
        api_base_url=getattr(args, "api", None),
    )
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
