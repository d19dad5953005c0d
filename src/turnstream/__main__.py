"""Entry point for ``python -m turnstream``."""

from turnstream.cli import app

if __name__ == "__main__":
    app()
