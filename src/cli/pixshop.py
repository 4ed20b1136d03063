#!/usr/bin/env python3
"""CLI for editing photos with generative AI.

Usage:
    # Localized edit around a point
    python -m cli.pixshop edit photo.png "remove the blemish" --x 120 --y 80 -o out.jpg

    # Stylistic filter / global adjustment
    python -m cli.pixshop filter photo.png "vintage film look" -o out.jpg
    python -m cli.pixshop adjust photo.png "warmer lighting" -o out.jpg

    # Free-form generation with up to 3 reference images
    python -m cli.pixshop chat "a cat wearing this hat" --ref hat.png -o out.jpg

    # Show provider configuration
    python -m cli.pixshop status
"""

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from rich.console import Console
from rich.table import Table

from models.image_generation import GenerationResult, Hotspot
from services.edit_service import PhotoEditService
from services.errors import CodecError, FallbackExhausted
from services.image_codec import decode_data_url
from services.image_generation_service import FallbackOrchestrator, build_default_orchestrator
from utils.config import load_config, setup_console_logging, validate_config

console = Console()


def _read_image(path: str) -> tuple[bytes, str | None]:
    """Read an input image and guess its MIME type from the file name."""
    file_path = Path(path)
    mime_type, _ = mimetypes.guess_type(file_path.name)
    return file_path.read_bytes(), mime_type


def _write_result(result: GenerationResult, output: Path) -> None:
    """Decode the embedded result and write it to disk."""
    mime_type, raw = decode_data_url(result.image)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(raw)
    console.print(f"[green]✓ Saved {mime_type} result to {output}[/green]")
    console.print(
        f"[dim]Provider: {result.provider} | context: {result.context} | "
        f"{result.generation_time_ms / 1000:.1f}s[/dim]"
    )


def show_status(orchestrator: FallbackOrchestrator) -> None:
    """Display provider configuration."""
    health = orchestrator.health()
    table = Table(title="Image providers")
    table.add_column("Role")
    table.add_column("Provider")
    table.add_column("Configured")
    for role in ("primary", "fallback"):
        info = health[role]
        mark = "[green]yes[/green]" if info["configured"] else "[red]no[/red]"
        table.add_row(role, info["name"], mark)
    console.print(table)


async def run_command(args: argparse.Namespace, orchestrator: FallbackOrchestrator) -> GenerationResult:
    service = PhotoEditService(orchestrator)

    if args.command == "edit":
        image, mime_type = _read_image(args.image)
        return await service.generate_edited_image(
            image, args.prompt, Hotspot(args.x, args.y), mime_hint=mime_type
        )
    if args.command == "filter":
        image, mime_type = _read_image(args.image)
        return await service.generate_filtered_image(image, args.prompt, mime_hint=mime_type)
    if args.command == "adjust":
        image, mime_type = _read_image(args.image)
        return await service.generate_adjusted_image(image, args.prompt, mime_hint=mime_type)

    references = [Path(ref).read_bytes() for ref in args.ref]
    return await service.generate_from_chat(args.prompt, references)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Edit photos with generative AI (Replicate, falling back to OpenRouter)"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    edit = subparsers.add_parser("edit", help="Localized edit around a point")
    edit.add_argument("image", help="Input image file")
    edit.add_argument("prompt", help="Description of the edit")
    edit.add_argument("--x", type=int, required=True, help="Hotspot x coordinate (pixels)")
    edit.add_argument("--y", type=int, required=True, help="Hotspot y coordinate (pixels)")

    for name, help_text in (("filter", "Apply a stylistic filter"), ("adjust", "Apply a global adjustment")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("image", help="Input image file")
        sub.add_argument("prompt", help=f"Description of the {name}")

    chat = subparsers.add_parser("chat", help="Free-form generation from a message")
    chat.add_argument("prompt", help="Chat message")
    chat.add_argument("--ref", action="append", default=[], help="Reference image (repeatable, max 3)")

    for sub in (edit, subparsers.choices["filter"], subparsers.choices["adjust"], chat):
        sub.add_argument("-o", "--output", default="pixshop_output.jpg", help="Output file")

    subparsers.add_parser("status", help="Show provider configuration")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()
    setup_console_logging(args.log_level or config["log_level"])

    for problem in validate_config(config):
        console.print(f"[yellow]⚠ {problem}[/yellow]")

    orchestrator = build_default_orchestrator(config)

    if args.command == "status":
        show_status(orchestrator)
        asyncio.run(orchestrator.close())
        return 0

    async def _run() -> GenerationResult:
        async with orchestrator:
            return await run_command(args, orchestrator)

    try:
        with console.status(f"[bold blue]Generating ({args.command})...[/bold blue]"):
            result = asyncio.run(_run())
        _write_result(result, Path(args.output))
    except FallbackExhausted as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1
    except (OSError, ValueError, CodecError) as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
