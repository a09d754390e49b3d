from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from ..errors import NoTablesError, SelectionError
from .preferences import PathPreferences

"""Interactive selection of the source / target files and the target table.

Both selectors accept a preset value (from the command line). A preset is
validated once and fails with SelectionError; interactive answers are
re-prompted until valid or until max_attempts is used up.
"""

__all__ = [
    "PathSelector",
    "TableChooser",
    "validate_path",
]

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], str]
OutputFunc = Callable[[str], None]


def validate_path(raw: str, allowed_extensions: Sequence[str]) -> Path:
    """Return the path if it exists and has an allowed extension (case-insensitive)."""
    value = raw.strip().strip('"').strip("'")
    if not value:
        raise SelectionError("no path given")
    path = Path(value).expanduser()
    allowed = [ext.lower() for ext in allowed_extensions]
    if not path.is_file() or not any(path.name.lower().endswith(ext) for ext in allowed):
        raise SelectionError(
            f"File not found or invalid format: {value} (allowed: {', '.join(allowed_extensions)})"
        )
    return path


class PathSelector:
    def __init__(
        self,
        preferences: PathPreferences | None = None,
        input_func: InputFunc | None = None,
        output: OutputFunc = print,
        max_attempts: int = 3,
    ) -> None:
        self.preferences = preferences or PathPreferences()
        self.input_func = input_func or input
        self.output = output
        self.max_attempts = max_attempts

    def select_path(self, kind: str, allowed_extensions: Sequence[str], preset: str | None = None) -> str:
        """Select an existing file of ``kind`` (a logical key, e.g. "source").

        The remembered path for ``kind`` is offered as the default answer.
        """
        if preset is not None:
            path = validate_path(preset, allowed_extensions)
            self.preferences.remember(kind, str(path))
            return str(path)

        remembered = self.preferences.get(kind)
        prompt = f"Select your {kind} file ({', '.join(allowed_extensions)})"
        if remembered:
            prompt += f" [{remembered}]"
        prompt += ": "

        last_error: SelectionError | None = None
        for _ in range(self.max_attempts):
            try:
                answer = self.input_func(prompt)
            except EOFError as e:
                raise SelectionError(f"no {kind} file selected (input closed)") from e
            if not answer.strip() and remembered:
                answer = remembered
            try:
                path = validate_path(answer, allowed_extensions)
            except SelectionError as e:
                self.output(str(e))
                last_error = e
                continue
            self.preferences.remember(kind, str(path))
            return str(path)
        raise SelectionError(f"no valid {kind} file after {self.max_attempts} attempts") from last_error


class TableChooser:
    def __init__(self, input_func: InputFunc | None = None, output: OutputFunc = print, max_attempts: int = 3) -> None:
        self.input_func = input_func or input
        self.output = output
        self.max_attempts = max_attempts

    def choose_table(self, candidates: Sequence[str], preset: str | None = None) -> str:
        """Pick one of ``candidates`` by list number or by name."""
        if not candidates:
            raise NoTablesError("No tables found in the database.")
        if preset is not None:
            if preset in candidates:
                return preset
            raise SelectionError(f"table not found: {preset} (available: {', '.join(candidates)})")

        self.output("Select the table to insert data:")
        for number, name in enumerate(candidates, start=1):
            self.output(f"  {number}) {name}")
        for _ in range(self.max_attempts):
            try:
                answer = self.input_func("Table: ").strip()
            except EOFError as e:
                raise SelectionError("no table selected (input closed)") from e
            if answer.isdigit() and 1 <= int(answer) <= len(candidates):
                return candidates[int(answer) - 1]
            if answer in candidates:
                return answer
            self.output(f"Invalid choice: {answer!r}")
        raise SelectionError(f"no valid table chosen after {self.max_attempts} attempts")
