"""Entry point for running prlabeler as a module.

Allows running the application with:
    python -m prlabeler

This delegates to the Typer CLI app.
"""

from prlabeler.cli import app

if __name__ == "__main__":
    app()
