"""Tests for the RSpec/DescribeClass rule."""

import pytest

from rspec_lint.describe_class import MSG, RULE_NAME, DescribeClass, is_string_constant
from rspec_lint.models import Node


def assert_single_offense(offenses, source, text, line=1):
    assert len(offenses) == 1
    offense = offenses[0]
    assert offense.location.text(source) == text
    assert offense.line == line
    assert offense.message == MSG
    assert offense.rule == RULE_NAME


class TestDescribeClass:
    """Top-level describe checks with the default configuration."""

    def test_checks_first_line_describe(self, inspect_source):
        offenses, source = inspect_source('''
            describe "bad describe" do
            end
        ''')
        assert_single_offense(offenses, source, '"bad describe"', line=2)
        assert offenses[0].column == 9

    def test_supports_rspec_describe(self, inspect_source):
        offenses, _ = inspect_source('''
            RSpec.describe Foo do
            end
        ''')
        assert offenses == []

    def test_supports_cbase_rspec_describe(self, inspect_source):
        offenses, _ = inspect_source('''
            ::RSpec.describe Foo do
            end
        ''')
        assert offenses == []

    def test_checks_describe_after_require(self, inspect_source):
        offenses, source = inspect_source('''
            require 'spec_helper'
            describe "bad describe" do
            end
        ''')
        assert_single_offense(offenses, source, '"bad describe"', line=3)

    def test_highlights_only_first_argument(self, inspect_source):
        offenses, source = inspect_source('''
            describe "bad describe", "blah blah" do
            end
        ''')
        assert_single_offense(offenses, source, '"bad describe"', line=2)

    def test_ignores_nested_describe(self, inspect_source):
        offenses, _ = inspect_source('''
            describe Some::Class do
              describe "bad describe" do
              end
            end
        ''')
        assert offenses == []

    def test_ignores_deeply_nested_describe(self, inspect_source):
        offenses, _ = inspect_source('''
            RSpec.describe Some::Class do
              context 'when ready' do
                before { setup }

                describe "bad describe" do
                end
              end
            end
        ''')
        assert offenses == []

    def test_ignores_empty_describe(self, inspect_source):
        offenses, _ = inspect_source('''
            RSpec.describe do
            end

            describe do
            end
        ''')
        assert offenses == []

    def test_single_line_describe(self, inspect_source):
        offenses, _ = inspect_source("describe Some::Class")
        assert offenses == []

    def test_blockless_string_describe_is_checked(self, inspect_source):
        offenses, source = inspect_source("describe 'bad describe'")
        assert_single_offense(offenses, source, "'bad describe'")

    def test_ignores_top_level_context(self, inspect_source):
        offenses, _ = inspect_source('''
            context 'when logged in' do
            end
        ''')
        assert offenses == []

    def test_ignores_describe_with_unrelated_receiver(self, inspect_source):
        offenses, _ = inspect_source('''
            Foo.describe 'thing' do
            end
        ''')
        assert offenses == []

    def test_flags_variable_first_argument(self, inspect_source):
        offenses, source = inspect_source('''
            describe subject_class do
            end
        ''')
        assert_single_offense(offenses, source, "subject_class", line=2)

    def test_checks_describe_inside_module(self, inspect_source):
        offenses, source = inspect_source('''
            module Billing
              describe 'invoices' do
              end
            end
        ''')
        assert_single_offense(offenses, source, "'invoices'", line=3)

    def test_reports_every_top_level_group_in_order(self, inspect_source):
        offenses, source = inspect_source('''
            describe 'first' do
              describe 'nested' do
              end
            end

            describe Valid do
            end

            describe 'second' do
            end
        ''')
        assert [o.location.text(source) for o in offenses] == ["'first'", "'second'"]
        assert offenses[0].line < offenses[1].line

    def test_groups_inside_configure_block_are_checked(self, inspect_source):
        offenses, source = inspect_source('''
            RSpec.configure do |config|
              describe 'configured' do
              end
            end
        ''')
        assert_single_offense(offenses, source, "'configured'", line=3)


class TestStringArguments:
    """When the first argument is a String literal."""

    @pytest.mark.parametrize("described", [
        "'Thing'",
        "'Some::Thing'",
        "'VERSION'",
        "'Some::VERSION'",
        "'::Some::VERSION'",
    ])
    def test_constant_like_strings_are_accepted(self, inspect_source, described):
        offenses, _ = inspect_source(f'''
            describe {described} do
              subject {{ Object.const_get(self.class.description) }}
            end
        ''')
        assert offenses == []

    @pytest.mark.parametrize("described", [
        "'activeRecord'",
        "'2Thing'",
        "''",
        "'bad describe'",
        "'Some::'",
        "'Some:::Thing'",
    ])
    def test_other_strings_are_flagged(self, inspect_source, described):
        offenses, source = inspect_source(f'''
            describe {described} do
              subject {{ Object.const_get(self.class.description) }}
            end
        ''')
        assert_single_offense(offenses, source, described, line=2)

    def test_interpolated_string_is_flagged(self, inspect_source):
        offenses, source = inspect_source('''
            describe "#{klass}" do
            end
        ''')
        assert_single_offense(offenses, source, '"#{klass}"', line=2)

    def test_escaped_newline_after_constant_is_accepted(self, inspect_source):
        offenses, _ = inspect_source(r'''
            describe "Some::Thing\n" do
            end
        ''')
        assert offenses == []

    def test_escaped_newline_after_sentence_is_flagged(self, inspect_source):
        offenses, source = inspect_source(r'''
            describe "bad describe\n" do
            end
        ''')
        assert_single_offense(offenses, source, r'"bad describe\n"', line=2)

    def test_is_string_constant(self):
        assert is_string_constant(Node("str", value="Some::Thing"))
        assert not is_string_constant(Node("str", value="bad describe"))
        assert not is_string_constant(Node("sym", value="Thing"))
        assert not is_string_constant(None)

    def test_is_string_constant_anchors_at_lines(self):
        assert is_string_constant(Node("str", value="Some::Thing\n"))
        assert is_string_constant(Node("str", value="notes\nSome::Thing"))
        assert not is_string_constant(Node("str", value="Some::Thing notes\n"))
        assert not is_string_constant(Node("str", value="Café"))


class TestSharedGroups:
    """Groups inside shared examples and contexts are never top-level."""

    def test_shared_examples(self, inspect_source):
        offenses, _ = inspect_source('''
            shared_examples 'Common::Interface' do
              describe '#public_interface' do
                it 'conforms to interface' do
                  # ...
                end
              end
            end
        ''')
        assert offenses == []

    def test_rspec_shared_context(self, inspect_source):
        offenses, _ = inspect_source('''
            RSpec.shared_context 'Common::Interface' do
              describe '#public_interface' do
                it 'conforms to interface' do
                  # ...
                end
              end
            end
        ''')
        assert offenses == []

    def test_unnamed_shared_context(self, inspect_source):
        offenses, _ = inspect_source('''
            shared_context do
              describe '#public_interface' do
                it 'conforms to interface' do
                  # ...
                end
              end
            end
        ''')
        assert offenses == []

    def test_nested_inside_shared_examples_for(self, inspect_source):
        offenses, _ = inspect_source('''
            shared_examples_for 'a collection' do
              context 'when empty' do
                describe 'size' do
                end
              end
            end
        ''')
        assert offenses == []


class TestIgnoredMetadata:
    """Metadata based suppression."""

    CONFIG = {
        "IgnoredMetadata": {
            "type": ["feature", "request"],
            "foo": ["bar"],
        }
    }

    def test_empty_table_flags_metadata(self, inspect_source):
        offenses, source = inspect_source('''
            describe 'my new feature', type: :feature do
            end
        ''', {"IgnoredMetadata": {}})
        assert_single_offense(offenses, source, "'my new feature'", line=2)

    @pytest.mark.parametrize("call", [
        "describe 'my new system test', type: :feature do",
        "describe 'my new system test', type: :request do",
        "describe 'my new system test', foo: :bar do",
        "RSpec.describe 'my new feature', type: :feature do",
        "describe 'my new feature', :test, :type => :model, :foo => :bar do",
        "describe('my new feature', { type: :request }) do",
        'describe "my new system test", "type": :feature do',
        'describe "my new system test", "foo": :"bar" do',
    ])
    def test_configured_metadata_is_ignored(self, inspect_source, call):
        offenses, _ = inspect_source(f'''
            {call}
            end
        ''', self.CONFIG)
        assert offenses == []

    @pytest.mark.parametrize("call", [
        "describe 'my new feature', 'type' => 'feature' do",
        "describe 'my new feature', \"type\" => :feature do",
        "describe 'my new feature', foo: :feature do",
        "describe 'my new feature', type: :unit do",
        "describe 'my new feature', foo: :request do",
        "describe 'my new feature', blah, type: :wow do",
        "describe 'my new feature', blah, type: feature do",
        "describe 'my new feature', blah, type: 'fea' + 'ture' do",
    ])
    def test_unmatched_metadata_is_flagged(self, inspect_source, call):
        offenses, source = inspect_source(f'''
            {call}
            end
        ''', self.CONFIG)
        assert_single_offense(offenses, source, "'my new feature'", line=2)

    def test_default_table_ignores_request_specs(self, inspect_source):
        offenses, _ = inspect_source('''
            describe 'users endpoint', type: :request do
            end

            describe 'users controller', type: :controller do
            end
        ''')
        assert offenses == []

    def test_default_table_flags_feature_specs(self, inspect_source):
        offenses, source = inspect_source('''
            describe 'sign in', type: :feature do
            end
        ''')
        assert_single_offense(offenses, source, "'sign in'", line=2)

    def test_malformed_table_is_treated_as_empty(self, inspect_source, caplog):
        offenses, source = inspect_source('''
            describe 'users endpoint', type: :request do
            end
        ''', {"IgnoredMetadata": "type"})
        assert_single_offense(offenses, source, "'users endpoint'", line=2)
        assert "IgnoredMetadata" in caplog.text

    def test_table_built_from_rule_config(self):
        rule = DescribeClass(self.CONFIG)
        assert rule.ignored_metadata.allows("type", "feature")
        assert not rule.ignored_metadata.allows("type", "unit")
