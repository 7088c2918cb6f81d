"""Run the describe-class rule over spec files."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from . import config, config_manager
from .describe_class import DescribeClass
from .errors import ParseError
from .language import Language
from .models import Offense
from .parser import RubyParser

logger = logging.getLogger(__name__)


@dataclass
class LintReport:
    files: List[str] = field(default_factory=list)
    offenses: List[Offense] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.offenses and not self.errors


class Linter:
    """Parse spec files and evaluate ``RSpec/DescribeClass`` on each."""

    def __init__(self, cfg: Optional[Dict[str, Any]] = None, parser: Optional[RubyParser] = None):
        self.config = cfg if cfg is not None else config_manager.load_config()
        self.parser = parser or RubyParser()
        self.rule = DescribeClass(
            config_manager.rule_config(self.config),
            language=Language.from_config(config_manager.language_config(self.config)),
        )
        self.include, self.exclude = config_manager.file_patterns(self.config)

    def lint_source(self, source: str, path: Optional[str] = None) -> List[Offense]:
        root = self.parser.parse(source, path=path)
        return self.rule.investigate(root, path=path)

    def lint_file(self, file_path: Path) -> List[Offense]:
        source = file_path.read_text(encoding="utf-8", errors="replace")
        return self.lint_source(source, path=str(file_path))

    def discover(self, paths: Iterable[Path]) -> List[Path]:
        """Expand directories into spec files; explicit files are kept as given."""
        found: List[Path] = []
        for path in paths:
            if path.is_file():
                found.append(path)
                continue
            if not path.is_dir():
                logger.warning("No such file or directory: %s", path)
                continue
            for candidate in sorted(path.rglob("*.rb")):
                rel = candidate.relative_to(path)
                if any(part in config.SKIP_DIRS for part in rel.parts[:-1]):
                    continue
                if self._included(rel.as_posix()):
                    found.append(candidate)
        return found

    def _included(self, rel_path: str) -> bool:
        if any(_glob_match(rel_path, pattern) for pattern in self.exclude):
            return False
        return any(_glob_match(rel_path, pattern) for pattern in self.include)

    def lint_paths(self, paths: Iterable[Path]) -> LintReport:
        report = LintReport()
        for file_path in self.discover(paths):
            report.files.append(str(file_path))
            try:
                offenses = self.lint_file(file_path)
            except ParseError as exc:
                logger.warning("Failed to parse %s", exc)
                report.errors.append(exc)
                continue
            logger.debug("%s: %d offense(s)", file_path, len(offenses))
            report.offenses.extend(offenses)
        return report


def _glob_match(rel_path: str, pattern: str) -> bool:
    # "**/" also matches files at the root of the scanned directory
    if pattern.startswith("**/") and fnmatch.fnmatch(rel_path, pattern[3:]):
        return True
    return fnmatch.fnmatch(rel_path, pattern)
