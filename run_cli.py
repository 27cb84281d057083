import sys

import typer

import cli.cli

if __name__ == "__main__":
    # Default to the interactive chat when no command is given
    if len(sys.argv) == 1:
        sys.argv = ["run_cli.py", "chat"]
    typer_app: typer.Typer = cli.cli.app
    typer_app()
