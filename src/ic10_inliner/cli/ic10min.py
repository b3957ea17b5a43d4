"""
ic10min - IC10 Inliner Command-Line Interface
=============================================

This module implements the command-line interface of the IC10 inliner.
It minifies a source file and writes the result beside it, with `.min`
inserted in front of the extension.

Usage Examples
--------------
Basic minification:
    $ ic10min airlock.ic10              # writes airlock.min.ic10

Only some sections (plus the sections they require):
    $ ic10min airlock.ic10 -s main -s alarms

Keep HASH()/STR() calls and comments:
    $ ic10min airlock.ic10 -m -c

Environment:
    IC10_INLINER_MARKER, IC10_INLINER_EXT_LENGTH, IC10_INLINER_PAUSE
    (see ic10_inliner.config.InlinerConfig.from_env)
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click

from ic10_inliner import __version__
from ic10_inliner.assembler import Assembler, AssemblyOptions
from ic10_inliner.cli.errors import ExitCode, handle_cli_exception
from ic10_inliner.config import InlinerConfig

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def echo_diagnostics(warnings: list[str], errors: list[str]) -> None:
    """Print warnings and errors, one per line."""
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)
    for error in errors:
        click.echo(f"Error: {error}", err=True)


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-c", "--comments",
    is_flag=True,
    help="Keep trailing comments in the output",
)
@click.option(
    "-s", "--sections",
    multiple=True,
    help="Only assemble this section and the sections it requires (can be repeated)",
)
@click.option(
    "-m", "--keep-macros",
    is_flag=True,
    help="Do not expand HASH(\"...\") and STR(\"...\") macros",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: input name with .min before the extension)",
)
@click.option(
    "--pause/--no-pause",
    default=None,
    help="Wait for Enter after reporting warnings or errors",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="ic10min")
def main(
    input_file: Path,
    comments: bool,
    sections: tuple[str, ...],
    keep_macros: bool,
    output: Optional[Path],
    pause: Optional[bool],
    verbose: bool,
) -> None:
    """
    Minify an IC10 program for Stationeers.

    INPUT_FILE is the IC10 source file to assemble.

    Directives, labels, aliases, constants and comments are resolved into
    plain instructions, and the result is written beside the input.

    \b
    Examples:
        ic10min airlock.ic10             # Outputs airlock.min.ic10
        ic10min airlock.ic10 -s main     # Only 'main' and its requirements
        ic10min airlock.ic10 -o out.txt  # Specify output file
    """
    setup_logging(verbose)

    config = InlinerConfig.from_env()
    if pause is not None:
        config.pause_on_problems = pause

    options = AssemblyOptions(
        include_sections=list(sections),
        keep_macros=keep_macros,
        include_comments=comments,
    )
    asm = Assembler(options=options, config=config)

    try:
        result = asm.assemble_file(input_file)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")

    parse_result = asm.get_parse_result()
    problems = bool(result.warnings or result.errors)

    if parse_result is not None and not parse_result.valid:
        click.echo(f"Failed to parse file {input_file}")
        echo_diagnostics(parse_result.warnings, parse_result.errors)
        exit_code = ExitCode.BUILD_ERROR

    elif not result.valid:
        click.echo(f"Failed to assemble {input_file}")
        echo_diagnostics(result.warnings, result.errors)
        exit_code = ExitCode.BUILD_ERROR

    else:
        output_file = output if output is not None else asm.output_path_for(input_file)
        try:
            asm.write_output(output_file)
        except Exception as e:
            handle_cli_exception(e, verbose=verbose, error_type="Output")

        click.echo(f"Assembled {input_file.name} => {output_file.name}")
        click.echo(
            f"{plural(len(result.final_sections), 'section')} totalling "
            f"{plural(len(result.output_lines), 'line')}"
        )
        echo_diagnostics(result.warnings, [])
        exit_code = ExitCode.SUCCESS

    if problems and config.pause_on_problems:
        click.pause("Press Enter to continue")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
