"""CLI entry point for notionedit."""

from pathlib import Path
from typing import Optional

import click

from notionedit import __version__
from notionedit.config.loader import DEFAULT_CONFIG_PATH, load_config
from notionedit.models.config import Config
from notionedit.utils.ids import normalize_block_id
from notionedit.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def load_cli_config(
    config_path: Path,
    token: Optional[str] = None,
    max_retries: Optional[int] = None,
) -> Config:
    """
    Load configuration, applying command-line overrides.

    Args:
        config_path: Path to the YAML config file
        token: --token value, if given
        max_retries: --max-retries value, if given

    Returns:
        Validated Config instance

    Raises:
        click.ClickException: If config is missing, has invalid permissions, or validation fails
    """
    overrides = {
        "notion": {"token": token},
        "editor": {"max_retries": max_retries},
    }
    try:
        config = load_config(config_path, overrides=overrides)
        logger.info("config_loaded", path=str(config_path))
        return config
    except FileNotFoundError as e:
        logger.error("config_not_found", path=str(config_path))
        raise click.ClickException(str(e))
    except PermissionError as e:
        logger.error("config_permission_error", path=str(config_path))
        raise click.ClickException(str(e))
    except Exception as e:
        logger.error("config_validation_error", error=str(e))
        raise click.ClickException(f"Configuration validation failed:\n{e}")


@click.group()
@click.version_option(version=__version__, prog_name="notionedit")
def cli():
    """notionedit: Edit a single Notion block from the terminal."""
    configure_logging()


@cli.command()
@click.argument("block_id")
@click.option("--page-id", default=None, help="Parent page id (used for logging only)")
@click.option("--token", default=None, help="Notion integration token (overrides config)")
@click.option("--max-retries", type=click.IntRange(0, 10), default=None, help="Automatic retries per save")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to config file",
)
def edit(block_id: str, page_id: Optional[str], token: Optional[str], max_retries: Optional[int], config_path: Path):
    """
    Open a block in the editor.

    BLOCK_ID may be a 32-character id (with or without dashes) or a Notion
    URL pointing at the block.

    Examples:
        notionedit edit 0123456789abcdef0123456789abcdef
        notionedit edit "https://www.notion.so/My-Page-0123...#4567..."
    """
    try:
        block_id = normalize_block_id(block_id)
        if page_id:
            page_id = normalize_block_id(page_id)
    except ValueError as e:
        logger.error("block_id_parse_error", error=str(e))
        raise click.BadParameter(str(e))

    logger.info("edit_command_started", block_id=block_id, page_id=page_id)
    config = load_cli_config(config_path, token=token, max_retries=max_retries)

    from notionedit.services.notion_client import NotionClient
    from notionedit.tui.app import NotionEditApp

    client = NotionClient(config=config.notion)
    logger.info("notion_client_initialized", base_url=client.base_url)

    app = NotionEditApp(block_id=block_id, store=client, config=config, page_id=page_id)
    saved = app.run()

    if saved:
        click.echo(f"Saved block {block_id}")
    logger.info("edit_command_completed", block_id=block_id, saved=bool(saved))


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
