"""
IC10 Inliner - Configuration
============================

Tool-wide settings that are not part of a single assembly run: how output
files are named, which program sizes trigger advisory warnings, and whether
the command-line driver waits for a keypress after reporting problems.

Configuration can come from:
- Default values (defined here)
- Environment variables (see `InlinerConfig.from_env`)
- Command-line options (which override both)

Per-run options (section filter, macro and comment handling) live in
`ic10_inliner.assembler.codegen.AssemblyOptions`.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os


# Program sizes at which a one-time advisory warning is emitted.
# The base game executes at most 128 lines; the More Lines of Code mod
# raises that to 512.
DEFAULT_SIZE_WARNINGS: tuple[tuple[int, str], ...] = (
    (129, "Exceeded vanilla IC10 LoC cap"),
    (512, "Exceeded modded More Lines of Code LoC cap"),
)


@dataclass
class InlinerConfig:
    """
    Configuration for the IC10 inliner.

    Attributes:
        output_marker: Text inserted before the extension of the output file
        extension_length: Number of trailing characters (dot included) that
            form the extension. None uses the real suffix of the path; 4
            reproduces the classic "name.ext" convention for 3-letter
            extensions.
        size_warnings: (line count, message) pairs; the message is emitted
            once when the output reaches exactly that many lines
        pause_on_problems: Wait for Enter after printing warnings or errors
    """

    output_marker: str = ".min"
    extension_length: Optional[int] = None
    size_warnings: tuple[tuple[int, str], ...] = field(
        default_factory=lambda: DEFAULT_SIZE_WARNINGS
    )
    pause_on_problems: bool = False

    @classmethod
    def from_env(cls) -> "InlinerConfig":
        """
        Create InlinerConfig from environment variables.

        Environment variables (all optional):
            IC10_INLINER_MARKER: Output marker (e.g. ".min", ".packed")
            IC10_INLINER_EXT_LENGTH: Extension length including the dot
            IC10_INLINER_PAUSE: "1"/"true"/"yes" to pause after problems

        Returns:
            InlinerConfig with values from environment variables
        """
        config = cls()

        if marker := os.environ.get("IC10_INLINER_MARKER"):
            config.output_marker = marker

        if ext_length := os.environ.get("IC10_INLINER_EXT_LENGTH"):
            try:
                value = int(ext_length)
            except ValueError:
                value = -1
            if value >= 0:
                config.extension_length = value

        if pause := os.environ.get("IC10_INLINER_PAUSE"):
            config.pause_on_problems = pause.strip().lower() in ("1", "true", "yes", "on")

        return config

    def output_path_for(self, source: str | Path) -> Path:
        """
        Derive the output path for a source file.

        The marker is inserted in front of the extension:
            program.ic10 -> program.min.ic10

        Args:
            source: Path of the source file

        Returns:
            Path beside the source file
        """
        source = Path(source)
        name = source.name

        if self.extension_length is None:
            suffix = source.suffix
        elif 0 < self.extension_length <= len(name):
            suffix = name[-self.extension_length:]
        else:
            suffix = ""

        stem = name[: len(name) - len(suffix)]
        return source.with_name(f"{stem}{self.output_marker}{suffix}")
