"""CLI entry point for image extractor."""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from . import __version__
from .config import DEFAULT_SOCKET, ExtractionConfig, ExtractionRequest
from .errors import ImageExtractorError
from .extractor import check_request, extract_image

console = Console(stderr=True, markup=False, highlight=False, soft_wrap=True)


def setup_logging(level: str) -> None:
    """Configure process-wide logging once at startup."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


@click.command()
@click.version_option(__version__, "-V", "--version", prog_name="image-extract")
@click.argument("image")
@click.option(
    "--download-path",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Where the image contents should be saved on the filesystem",
)
@click.option(
    "--content-path",
    "-c",
    default="/",
    show_default=True,
    help="Where in the container filesystem the content to extract is",
)
@click.option(
    "--write-to-stdout",
    "-w",
    is_flag=True,
    help="Write to stdout instead of the filesystem (not implemented)",
)
@click.option(
    "--username",
    "-u",
    default="",
    envvar="IMAGE_EXTRACT_USERNAME",
    help="Username used for signing into a private registry",
)
@click.option(
    "--password",
    "-p",
    default="",
    envvar="IMAGE_EXTRACT_PASSWORD",
    help=(
        "Password used for signing into a private registry. Prefer the "
        "IMAGE_EXTRACT_PASSWORD environment variable over typing it here"
    ),
)
@click.option(
    "--force-pull",
    "-f",
    is_flag=True,
    help="Force a pull even if the image is present locally",
)
@click.option(
    "--socket",
    "-s",
    default=DEFAULT_SOCKET,
    show_default=True,
    help="Container runtime socket to use",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="What level of logs to output",
)
def main(
    image: str,
    download_path: Path,
    content_path: str,
    write_to_stdout: bool,
    username: str,
    password: str,
    force_pull: bool,
    socket: str,
    log_level: str,
) -> None:
    """
    Copy content out of a container image without running it.

    IMAGE is pulled if needed, a stopped container is created from it, the
    content path is copied into the download path and the container is
    removed again.
    """
    try:
        config = ExtractionConfig(
            image=image,
            request=ExtractionRequest(
                source_path=content_path,
                destination_path=download_path,
                username=username,
                password=password,
                force_pull=force_pull,
                to_stdout=write_to_stdout,
            ),
            socket=socket,
            log_level=log_level,
        )
        check_request(config.request)
        setup_logging(config.log_level)

        result = extract_image(config.image, config.request, config.socket)

    except ValidationError as e:
        console.print(f"❌ Configuration error: {e}")
        sys.exit(1)

    except ImageExtractorError as e:
        console.print(f"❌ {e}")
        sys.exit(1)

    except KeyboardInterrupt:
        console.print("\n⚠️ Extraction interrupted by user")
        sys.exit(1)

    if result.cleanup_error:
        console.print(
            f"⚠️ Container {result.container_id} could not be removed: "
            f"{result.cleanup_error}"
        )
    click.echo(f"📁 Content saved to: {result.destination}", err=True)


if __name__ == "__main__":
    main()
