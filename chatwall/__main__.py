"""Main entry point for the chatwall application."""

import logging

import click


@click.command()
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode and write debug logs to chatwall.log'
)
@click.option(
    '--storage-key',
    default=None,
    help='Name of the stored conversation to open'
)
@click.option(
    '--model',
    default=None,
    help='Gemini model ID to use'
)
@click.option(
    '--no-welcome',
    is_flag=True,
    help='Do not greet empty conversations'
)
def main(debug: bool, storage_key: str, model: str, no_welcome: bool) -> None:
    """Launch the chatwall TUI chat."""
    import os
    import sys

    if debug:
        os.environ['TEXTUAL_DEBUG'] = '1'
        from .core.config_paths import ConfigPaths

        logging.basicConfig(
            filename=ConfigPaths.get_log_file(),
            level=logging.DEBUG,
            format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        )

    try:
        from .app import ChatWallApp
        from .config.chat_config import load_chat_config

        config = load_chat_config().with_overrides(
            storage_key=storage_key,
            model=model,
            welcome_enabled=False if no_welcome else None,
        )
        app = ChatWallApp(config=config)
        app.run()

    except KeyboardInterrupt:
        click.echo("\nExiting...")
        sys.exit(0)
    except Exception as e:
        if debug:
            raise
        else:
            click.echo(click.style(f"Error: {e}", fg='red'))
            sys.exit(1)


if __name__ == "__main__":
    main()
