"""Lemmatization through the Morpheus morphological analyzer.

The analyzer is an external process (``cruncher``) that reads one word per
line on stdin and prints analyses on stdout. Only a narrow, versioned
reading of that output is relied on; see parse_cruncher_output.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from classdict.text.diacritics import Language

logger = logging.getLogger(__name__)

# Bump when the parsing rules in parse_cruncher_output change
OUTPUT_CONTRACT = "morpheus-cruncher/1"


class LemmatizerError(Exception):
    """Raised when analyzer output does not fit the expected contract."""


class Lemmatizer(Protocol):
    """Converts an inflected form into its dictionary lemma.

    Implementations return None when no usable lemma is available.
    """

    def lemmatize(self, word: str, language: Language) -> str | None:
        ...


def parse_cruncher_output(output: str) -> str:
    """Extract the lemma from cruncher output (contract morpheus-cruncher/1).

    The first non-empty line echoes the input word; the second is the
    first analysis, e.g. ``<NL>V amo,amo  imperf ind act 1st sg</NL>``.
    The lemma is the first whitespace token of its second comma-separated
    field, with markup tags and trailing homonym numbers removed.

    Args:
        output: Raw stdout of the analyzer

    Returns:
        Lemma string

    Raises:
        LemmatizerError: If the output has no analysis in that shape
    """
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if len(lines) < 2:
        raise LemmatizerError("no analysis line in analyzer output")

    fields = lines[1].split(",")
    if len(fields) < 2:
        raise LemmatizerError(f"unexpected analysis line: {lines[1]!r}")

    tokens = re.sub(r"<[^>]*>", " ", fields[1]).split()
    if not tokens:
        raise LemmatizerError(f"empty lemma field: {lines[1]!r}")

    lemma = re.sub(r"#?\d+$", "", tokens[0])
    if not lemma:
        raise LemmatizerError(f"empty lemma field: {lines[1]!r}")
    return lemma


@dataclass
class MorpheusLemmatizer:
    """Lemmatizer backed by a local Morpheus installation.

    Latin words are analyzed with ``-L``; Greek words are passed to the
    analyzer in the script they were typed in. No timeout is applied
    unless one is configured.
    """

    command: str = "cruncher"
    stemlib: Path | None = None
    timeout: float | None = None

    def build_command(self, language: Language) -> list[str]:
        cmd = [self.command]
        if language is Language.LATIN:
            cmd.append("-L")
        return cmd

    def lemmatize(self, word: str, language: Language) -> str | None:
        """Run the analyzer on word.

        Returns:
            The lemma, or None if the analyzer failed or found nothing
        """
        env = dict(os.environ)
        if self.stemlib:
            env["MORPHLIB"] = str(self.stemlib)

        cmd = self.build_command(language)
        try:
            proc = subprocess.run(
                cmd,
                input=word + "\n",
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
                env=env,
            )
        except FileNotFoundError:
            logger.warning(f"Lemmatizer '{self.command}' not found; using '{word}' as typed")
            return None
        except subprocess.TimeoutExpired:
            logger.warning(f"Lemmatizer timed out after {self.timeout}s on '{word}'")
            return None
        except subprocess.CalledProcessError as e:
            logger.warning(f"Lemmatizer exited with {e.returncode} on '{word}': {e.stderr.strip()}")
            return None
        except OSError as e:
            logger.warning(f"Lemmatizer could not run: {e}")
            return None

        try:
            lemma = parse_cruncher_output(proc.stdout)
        except LemmatizerError as e:
            logger.warning(f"No lemma for '{word}' ({OUTPUT_CONTRACT}): {e}")
            return None

        logger.debug(f"Lemmatized '{word}' -> '{lemma}'")
        return lemma
