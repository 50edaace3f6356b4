from __future__ import annotations

from pathlib import Path

import pytest

from roster_import.cli import main as cli_main
from roster_import.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL

"""Exit codes: 0 all files succeeded (or none), 2 any partial/failed file, 1 fatal startup error."""


def test_exit_code_constants():
    assert (EXIT_SUCCESS_ALL, EXIT_FATAL, EXIT_PARTIAL_FAILURE) == (0, 1, 2)


@pytest.mark.parametrize(
    "files, expected",
    [
        ({}, 0),
        ({"ok.csv": "Email,Phone\na@x.io,1\n"}, 0),
        ({"ok.csv": "Email,Phone\na@x.io,1\n", "bad.csv": "Email,Phone\nnope,1\n"}, 2),
        ({"mixed.csv": "Email,Phone\na@x.io,1\nnope,1\n"}, 2),
        ({"only_header.csv": "Email,Phone\n"}, 2),
    ],
)
def test_exit_codes_by_outcome(write_config, write_csv, files: dict[str, str], expected: int):
    for name, text in files.items():
        write_csv(name, text)
    assert cli_main([]) == expected


def test_exit_code_fatal_on_bad_config(write_config: Path):
    write_config.write_text("source_directory: ./data\n", encoding="utf-8")
    assert cli_main([]) == EXIT_FATAL
