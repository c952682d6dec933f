from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from rich.console import Console

from vogue_tryon.clients.gemini import GeminiImageClient
from vogue_tryon.codec import decode_bytes, from_data_url
from vogue_tryon.config import load_config
from vogue_tryon.controller import TryOnController
from vogue_tryon.logging_utils import configure_logging


def _positive_path(value: str) -> Path:
    path = Path(value).expanduser()
    if not path.exists():
        raise argparse.ArgumentTypeError(f"Path not found: {path}")
    return path


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render a person wearing an outfit with Gemini, then apply optional edits."
    )
    parser.add_argument("--person", required=True, type=_positive_path, help="Photo of the person.")
    parser.add_argument("--outfit", required=True, type=_positive_path, help="Photo of the garment.")
    parser.add_argument(
        "--instruction",
        default="",
        help="Optional extra guidance appended to the try-on request.",
    )
    parser.add_argument(
        "--edit",
        action="append",
        default=[],
        help="Follow-up edit instruction applied to the latest result. Repeatable.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("output") / "vogue-ai-try-on.png",
        help="Where to write the final image.",
    )
    parser.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Optional path to a .env file containing GEMINI_API_KEY.",
    )
    return parser.parse_args()


async def _run(args: argparse.Namespace, console: Console) -> int:
    config = load_config(args.dotenv)
    configure_logging(config.log_level, console=console)

    async with GeminiImageClient(config.gemini) as client:
        controller = TryOnController(client)
        controller.select_person_image(args.person)
        controller.select_outfit_image(args.outfit)
        controller.set_instruction(args.instruction)

        with console.status("Thinking..."):
            await controller.run_try_on()
        if controller.state.error_message:
            console.print(f"[red]Try-on failed:[/red] {controller.state.error_message}")
            return 1

        for instruction in args.edit:
            controller.set_instruction(instruction)
            with console.status(f"Editing: {instruction}"):
                await controller.run_edit()
            if controller.state.error_message:
                console.print(f"[red]Edit failed:[/red] {controller.state.error_message}")
                return 1

    result = controller.state.result
    if result is None:
        console.print("[yellow]No image was produced.[/yellow]")
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(decode_bytes(from_data_url(result.image_url)))
    if result.caption_text:
        console.print(f"[dim]{result.caption_text}[/dim]")
    console.print(f"[green]Output saved to[/green] {args.output}")
    return 0


def main() -> None:
    args = parse_args()
    console = Console()
    raise SystemExit(asyncio.run(_run(args, console)))


if __name__ == "__main__":
    main()
