"""Entry point for ``python -m squashlink``."""

from squashlink.cli.typer_app import app

if __name__ == "__main__":
    app()
