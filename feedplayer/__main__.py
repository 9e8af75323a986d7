"""Main entry point for the feedplayer package."""

from feedplayer.cli import cli

if __name__ == "__main__":
    cli()
