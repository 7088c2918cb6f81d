"""rspec-lint: static checks for RSpec spec files."""

__version__ = "0.1.0"
