"""
Tests for the YAML configuration loader.

These tests verify conversion of raw configuration into the data model and
the validation errors reported for malformed input.
"""
import pytest

from filtergen.config_loader import load_config, parse_actions, parse_config, parse_filters
from filtergen.error_handling import ConfigurationError
from filtergen.models import Category, MatchFilters


class TestLoadConfig:
    """Tests for loading configuration files."""

    def test_load_valid_config(self, config_file):
        config = load_config(config_file)

        assert config.version == 'v1alpha1'
        assert list(config.consts) == ['friends', 'spammers']
        assert config.consts['friends'].values == ['alice@example.com', 'bob@example.com']
        assert len(config.rules) == 2

        first = config.rules[0]
        assert first.filters.match.from_ == ['boss@example.com']
        assert first.filters.consts.from_ == ['friends']
        assert first.actions.mark_important is True
        assert first.actions.labels == ['work']

        second = config.rules[1]
        assert second.filters.match.subject == ['build failed', 'deploy']
        assert second.actions.archive is True
        assert second.actions.category == 'updates'
        assert second.actions.labels == ['ci', 'alerts']

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, write_config):
        path = write_config("rules: [\n  - filters: {from: [a\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_empty_file(self, write_config):
        path = write_config("")
        with pytest.raises(ConfigurationError, match="empty"):
            load_config(path)

    def test_yaml_document_example(self, write_config):
        path = write_config(
            "consts:\n"
            "  spammers:\n"
            "    values: [spam@example.com, \"Bulk Sender\"]\n"
            "rules:\n"
            "  - filters:\n"
            "      consts:\n"
            "        from: [spammers]\n"
            "    actions:\n"
            "      delete: true\n"
        )
        config = load_config(path)
        assert config.version is None
        assert config.rules[0].filters.consts == MatchFilters(from_=['spammers'])
        assert config.rules[0].actions.delete is True


class TestParseConfig:
    """Tests for structural validation."""

    def test_minimal(self):
        config = parse_config({'rules': []})
        assert config.rules == []
        assert config.consts == {}

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigurationError, match="expected a mapping"):
            parse_config(['not', 'a', 'mapping'])

    def test_unknown_top_level_key(self):
        with pytest.raises(ConfigurationError, match="unknown key"):
            parse_config({'rules': [], 'filters': []})

    def test_unsupported_version(self):
        with pytest.raises(ConfigurationError, match="unsupported version 'v2'"):
            parse_config({'version': 'v2', 'rules': []})

    def test_rules_must_be_list(self):
        with pytest.raises(ConfigurationError, match="rules: expected a list"):
            parse_config({'rules': {'filters': {}}})

    def test_error_path_names_rule(self):
        data = {'rules': [
            {'filters': {'from': ['a']}, 'actions': {'archive': True}},
            {'filters': {'from': ['a']}, 'actions': {'archive': 'yes please'}},
        ]}
        with pytest.raises(ConfigurationError, match=r"rules\[1\]\.actions\.archive"):
            parse_config(data)

    def test_const_values_validated(self):
        with pytest.raises(ConfigurationError, match=r"consts\.bad\.values\[1\]"):
            parse_config({'consts': {'bad': {'values': ['ok', 42]}}, 'rules': []})

    def test_const_unknown_key(self):
        with pytest.raises(ConfigurationError, match=r"consts\.bad"):
            parse_config({'consts': {'bad': {'value': ['x']}}, 'rules': []})

    def test_const_order_preserved(self):
        config = parse_config({'consts': {'z': {'values': ['1']}, 'a': {'values': ['2']}}})
        assert list(config.consts) == ['z', 'a']


class TestParseFilters:
    """Tests for the filters section."""

    def test_scalar_is_single_pattern(self):
        filters = parse_filters({'to': 'me@example.com'}, 'f')
        assert filters.match.to == ['me@example.com']

    def test_has_and_consts(self):
        filters = parse_filters({'has': ['urgent'], 'consts': {'has': ['words']}}, 'f')
        assert filters.match.has == ['urgent']
        assert filters.consts.has == ['words']

    def test_unknown_condition(self):
        with pytest.raises(ConfigurationError, match="unknown key.*not"):
            parse_filters({'not': {'from': ['x']}}, 'f')

    def test_unknown_const_condition(self):
        with pytest.raises(ConfigurationError, match=r"f\.consts"):
            parse_filters({'consts': {'cc': ['x']}}, 'f')

    def test_empty_pattern_rejected(self):
        with pytest.raises(ConfigurationError, match="cannot be empty"):
            parse_filters({'subject': ['ok', '']}, 'f')

    def test_missing_section_is_empty(self):
        filters = parse_filters(None, 'f')
        assert filters.match.is_empty()
        assert filters.consts.is_empty()


class TestParseActions:
    """Tests for the actions section."""

    def test_flags(self):
        actions = parse_actions({'markRead': True, 'markImportant': True}, 'a')
        assert actions.mark_read is True
        assert actions.mark_important is True
        assert actions.archive is False
        assert actions.delete is False

    def test_null_flag_is_false(self):
        assert parse_actions({'archive': None}, 'a').archive is False

    def test_non_boolean_flag(self):
        with pytest.raises(ConfigurationError, match="expected true or false"):
            parse_actions({'delete': 'true'}, 'a')

    def test_category_passed_through_unvalidated(self):
        # Unknown categories are reported by the generator with the rule index
        assert parse_actions({'category': 'spam'}, 'a').category == 'spam'
        assert Category.parse(parse_actions({'category': 'forums'}, 'a').category) is Category.FORUMS

    def test_category_type(self):
        with pytest.raises(ConfigurationError, match="category"):
            parse_actions({'category': ['updates']}, 'a')

    def test_single_label(self):
        assert parse_actions({'labels': 'work'}, 'a').labels == ['work']

    def test_unknown_action(self):
        with pytest.raises(ConfigurationError, match="unknown key.*star"):
            parse_actions({'star': True}, 'a')
