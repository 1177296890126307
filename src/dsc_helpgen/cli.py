"""
CLI tool to scaffold comment-based help for PowerShell DSC resources.

This module provides a Click-based command line interface that:
- Resolves a resource (module path, schema path, directory or installed name).
- Generates one ``<# ... #>`` help block per lifecycle function.
- Prints the blocks, writes them to a file, or injects them into a copy of
  the module in the output directory.
- Cleans the output directory.

The heavy lifting is done by the generator and tools modules.
"""

import sys
from pathlib import Path
from typing import Dict, List

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from . import __version__
from .config import load_config
from .errors import DscHelpError
from .files import read_source
from .generator import generate_comment_help
from .messages import get_messages
from .tools import insert_comment_help_to_source

load_dotenv()


# --- File I/O Helpers ---
def read_file(filepath: str) -> str:
    """
    Read the contents of a module file, honouring its byte order mark.

    Parameters
    ----------
    filepath : str
        Path to the file to read.

    Returns
    -------
    str
        The file contents.
    """
    try:
        return read_source(filepath)
    except (OSError, UnicodeDecodeError) as e:
        raise IOError(f"Failed to read file {filepath}: {e}") from e


def write_output_file(output_dir: Path, filename: str, content: str) -> Path:
    """
    Write content to a file inside an output directory, ensuring the directory exists.

    Parameters
    ----------
    output_dir : pathlib.Path
        Directory where the output file will be written.
    filename : str
        The filename to write inside output_dir.
    content : str
        The content to write to the file.

    Returns
    -------
    pathlib.Path
        The full path to the written file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path: Path = output_dir / filename
    try:
        with output_path.open("w", encoding="utf-8") as f:
            f.write(content)
        return output_path
    except OSError as e:
        raise IOError(f"Failed to write file {output_path}: {e}") from e


# --- Console Helpers ---
def print_blocks(console: Console, blocks: Dict[str, str]) -> None:
    """Print each block under a heading naming its function."""
    for name, text in blocks.items():
        console.print(f"\n[bold cyan]{name}[/]")
        console.print(text, markup=False, highlight=False, end="")


def print_warnings(console: Console, warnings: List[str]) -> None:
    for warning in warnings:
        console.print(f"[yellow]Warning: {escape(warning)}[/]")


def prompt_confirmation(console: Console, question: str = "Do you want to proceed?") -> bool:
    """
    Prompt the user for confirmation using a yes/no dialog.

    Parameters
    ----------
    console : rich.console.Console
        Console object to use for prompting.
    question : str
        The question to ask.

    Returns
    -------
    bool
        True if the user confirmed, False otherwise.
    """
    console.print("")
    return Confirm.ask(question, console=console)


# --- CLI Entry Point ---
@click.group()
@click.version_option(version=__version__, prog_name="dsc-helpgen")
def main() -> None:
    """Scaffold comment-based help for PowerShell DSC resources."""


@main.command()
@click.argument("identifier")
@click.option(
    "--function",
    "-f",
    "functions",
    multiple=True,
    help="Function to document (repeatable). Defaults to the "
    "Get/Test/Set-TargetResource triad.",
)
@click.option(
    "--mode",
    type=click.Choice(["print", "file", "inject"], case_sensitive=False),
    default="print",
    help=(
        "Output mode. 'print' (Default) shows the blocks. "
        "'file' writes them to <name>.help.txt. "
        "'inject' writes a copy of the module with the blocks inserted."
    ),
)
@click.option("--output-dir", default=None, help="Directory to save output files.")
@click.option("--culture", default=None, help="Culture of the message table, e.g. en-US.")
def generate(identifier: str, functions: tuple, mode: str, output_dir: str, culture: str) -> None:
    """
    Generate comment-based help for the resource IDENTIFIER.

    IDENTIFIER is a path to the .psm1 module, to the .schema.mof schema, to
    a directory holding both, or the name of an installed resource.

    EXAMPLE USAGE:

    dsc-helpgen generate ./DSCResources/Widget/Widget.psm1 --mode inject
    """
    console = Console()
    config = load_config()
    messages = get_messages(culture) if culture else None
    mode = mode.lower()

    console.print(
        f"📝 [bold green]dsc-helpgen[/]: Checking [cyan]{escape(identifier)}[/]"
        f" in [yellow]{mode.upper()}[/] mode"
    )

    # --- 1. Generate ---
    try:
        result = generate_comment_help(
            identifier,
            function_names=list(functions) or None,
            messages=messages,
        )
    except DscHelpError as e:
        console.print(f"[bold red]Error generating help: {escape(str(e))}[/]")
        sys.exit(1)

    print_warnings(console, result.warnings)

    if mode == "print":
        print_blocks(console, result.blocks)
        return

    # --- 2. Write output ---
    output_dir_path = Path(output_dir or config["output_dir"])
    module_path = Path(result.files.module_path)
    try:
        if mode == "file":
            content = "\n".join(
                f"# {name}\n{text}" for name, text in result.blocks.items()
            )
            output_path = write_output_file(
                output_dir_path, f"{module_path.stem}.help.txt", content
            )
        else:
            source = read_file(str(module_path))
            documented = insert_comment_help_to_source(source, result.blocks)
            output_path = write_output_file(
                output_dir_path, f"{module_path.stem}.doc.psm1", documented
            )
    except IOError as e:
        console.print(f"[bold red]Error writing output file: {escape(str(e))}[/]")
        sys.exit(1)

    console.print("\n✅ Successfully generated comment-based help!")
    console.print(f"   Output saved to: [bold yellow]{output_path}[/]")


@main.command()
@click.option("--output-dir", default=None, help="Directory to clean.")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def clean(output_dir: str, yes: bool) -> None:
    """Delete the files generated in the output directory."""
    console = Console()
    directory = Path(output_dir or load_config()["output_dir"])

    if not directory.is_dir():
        console.print(f"[yellow]Directory {directory} not found.[/]")
        return

    files = sorted(p for p in directory.iterdir() if p.is_file())
    if not files:
        console.print(f"[yellow]Directory {directory} is already empty.[/]")
        return

    console.print(f"Found {len(files)} file(s) in [cyan]{directory}[/].")
    if not yes and not prompt_confirmation(console, "Delete them?"):
        console.print("[yellow]Aborted by user.[/]")
        return

    for path in files:
        path.unlink()
    console.print(f"[green]Successfully deleted {len(files)} file(s).[/]")


if __name__ == "__main__":
    main()
