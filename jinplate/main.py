# jinplate/main.py
"""Main entry point for the jinplate CLI application."""

from jinplate.cli.interface import main_cli


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli(prog_name="jinplate")

if __name__ == '__main__':
    entrypoint()
