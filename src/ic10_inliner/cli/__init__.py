"""
IC10 Inliner Command-Line Interface
===================================

This package provides the command-line tool of the IC10 inliner:

- **ic10min**: minify an IC10 source file into `<name>.min<ext>`

The tool is a Click-based CLI application with help output and consistent
exit codes (see `ic10_inliner.cli.errors.ExitCode`).
"""

__all__ = ["ic10min"]
