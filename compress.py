import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from warnings import simplefilter

simplefilter("ignore")

from rich import print
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.prompt import IntPrompt, Prompt

import batch
from job import OUTPUT_DIR_NAME, Job, ResizeMode, clamp
from scan import OutputIsSource, PathNotFound, find_images

logger = logging.getLogger("compress")
modes = [m.value for m in ResizeMode]

parser = ArgumentParser(description="Resize and convert every image in a folder.")
parser.add_argument("-s", "--source", type=Path, default=None)
parser.add_argument("-o", "--output", type=Path, default=None)
parser.add_argument("-w", "--width", type=int, default=None)
parser.add_argument("-H", "--height", type=int, default=None)
parser.add_argument("-r", "--rmode", type=str, default="Pad", help=", ".join(modes))
parser.add_argument("-q", "--quality", type=int, default=75)
parser.add_argument("-f", "--format", type=str, default=None)
parser.add_argument("-j", "--workers", type=int, default=None)
parser.add_argument("-n", "--no_input", action="store_true")
parser.add_argument("-v", "--verbose", action="store_true")
parser.add_argument("--strict", action="store_true")


def ask(args):
    """Return the options with anything missing filled in from prompts."""
    options = dict(vars(args))

    while not options["source"]:
        source = Prompt.ask("Source folder").strip()
        options["source"] = Path(source) if source else None

    if not options["output"]:
        default = options["source"] / OUTPUT_DIR_NAME
        output = Prompt.ask(
            f"Output folder [dim]({default})[/]", default="", show_default=False
        )
        options["output"] = Path(output.strip()) if output.strip() else None

    if options["width"] is None:
        options["width"] = IntPrompt.ask(
            "Max width [dim](Enter to skip)[/]", default=None, show_default=False
        )

    if options["height"] is None:
        options["height"] = IntPrompt.ask(
            "Max height [dim](Enter to skip)[/]", default=None, show_default=False
        )

    while not 1 <= options["quality"] <= 100:
        options["quality"] = IntPrompt.ask("Quality (1-100)", default=75)

    if options["format"] is None:
        format = Prompt.ask(
            "Format [dim](Enter to keep original)[/]", default="", show_default=False
        )
        options["format"] = format.strip() or None

    return options


def build(options):
    if not 1 <= options["quality"] <= 100:
        quality = clamp(options["quality"])
        logger.warning(f'Quality {options["quality"]} out of range, using {quality}')
        options = {**options, "quality": quality}

    return Job.create(
        source=options["source"],
        output=options["output"],
        width=options["width"],
        height=options["height"],
        mode=options["rmode"],
        quality=options["quality"],
        format=options["format"],
        workers=options["workers"],
    )


def main(argv=None):
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )

    interactive = not args.no_input and sys.stdin.isatty()
    options = ask(args) if interactive else dict(vars(args))

    if not options["source"]:
        parser.error("the following arguments are required: -s/--source")

    job = build(options)

    try:
        files = find_images(job.source, exclude=job.output)
    except (PathNotFound, OutputIsSource) as e:
        logger.error(e)
        return 1

    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        disable=not files,
    )

    try:
        with progress as p:
            task = p.add_task("Compressing", total=len(files))
            summary = batch.run(job, advance=lambda _: p.advance(task), files=files)
    except OSError as e:
        logger.error(f'Could not create "{job.output}": {e}')
        return 1

    if not files:
        return 0

    print(
        f"[bold]Compression completed[/]: [green]{summary.succeeded} succeeded[/], "
        f'[red]{summary.failed} failed[/] → "{job.output}"'
    )

    return summary.exit_code(args.strict)


if __name__ == "__main__":
    sys.exit(main())
