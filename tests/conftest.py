"""Pytest configuration and fixtures for rspec-lint tests."""

import shutil
import tempfile
import textwrap
from pathlib import Path
from typing import Callable, Generator, List, Optional, Tuple

import pytest

from rspec_lint.describe_class import DescribeClass
from rspec_lint.models import Offense
from rspec_lint.parser import RubyParser


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path_factory, monkeypatch):
    """Keep the developer's own config files out of the tests.

    Points the global config at an empty directory and runs every test from
    a scratch working directory so project config discovery finds nothing.
    """
    home = tmp_path_factory.mktemp("rspec_lint_home")
    monkeypatch.setattr("rspec_lint.config.BASE_DIR", home)
    monkeypatch.setattr("rspec_lint.config.GLOBAL_CONFIG_FILE", home / "config.toml")
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture(scope="session")
def ruby_parser() -> RubyParser:
    return RubyParser()


@pytest.fixture
def sample_specs_path() -> Path:
    """Get path to the sample spec project."""
    return Path(__file__).parent / "fixtures" / "sample_specs"


@pytest.fixture
def inspect_source(ruby_parser: RubyParser) -> Callable[..., Tuple[List[Offense], str]]:
    """Run DescribeClass over a Ruby snippet; returns ``(offenses, source)``."""

    def _inspect(source: str, config: Optional[dict] = None):
        source = textwrap.dedent(source)
        rule = DescribeClass(config)
        return rule.investigate(ruby_parser.parse(source)), source

    return _inspect


@pytest.fixture
def sample_spec_source() -> str:
    """Sample spec file for parser and scope tests."""
    return '''require 'spec_helper'

RSpec.describe Calculator do
  describe '#add' do
    it 'adds two numbers' do
      expect(subject.add(1, 2)).to eq(3)
    end
  end

  context 'with negative numbers' do
    it { expect(subject.add(-1, -2)).to eq(-3) }
  end
end

describe 'bad describe', type: :unit do
end
'''
