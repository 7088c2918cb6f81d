"""Configuration paths and defaults for rspec-lint."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("RSPEC_LINT_HOME", str(Path.home() / ".rspec-lint"))).expanduser()
GLOBAL_CONFIG_FILE = BASE_DIR / "config.toml"
PROJECT_CONFIG_NAME = ".rspec-lint.toml"

DEFAULT_INCLUDE = ["**/*_spec.rb"]
DEFAULT_EXCLUDE = ["vendor/**"]

SKIP_DIRS = {
    ".git", "node_modules", "vendor", "tmp", "log", "coverage",
    ".bundle", ".rspec-lint",
}
