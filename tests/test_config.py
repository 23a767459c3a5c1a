"""
Configuration Test Suite

Tests for SchemaGuardConfig: defaults, YAML/JSON files, vocabularies
and the constraint helpers built from them.
"""

import json
import logging

import pytest
import yaml

from schemaguard.config import SchemaGuardConfig
from schemaguard.core.constraints import EnumConstraint
from schemaguard.core.errors import SchemaDefinitionError
from schemaguard.logging_setup import configure_logging


@pytest.fixture
def config_dir(tmp_path):
    path = tmp_path / ".schemaguard"
    path.mkdir()
    return path


class TestDefaults:
    """Behavior without a config file"""

    def test_defaults_when_missing(self, tmp_path):
        config = SchemaGuardConfig(tmp_path)
        assert not config.exists()
        loaded = config.load()
        assert loaded["schema_limits"]["min_screening_steps"] == 3
        assert config.config_file.name == "config.yaml"

    def test_vocabulary(self):
        config = SchemaGuardConfig.from_dict()
        assert config.vocabulary("review_statuses") == ("completed", "failed", "pending")

    def test_enum_from_vocabulary(self):
        node = SchemaGuardConfig.from_dict().enum("priority_levels", "Priority")
        assert isinstance(node, EnumConstraint)
        assert node.values == ("low", "medium", "high", "urgent")
        assert node.description == "Priority"

    def test_score_range_and_limits(self):
        config = SchemaGuardConfig.from_dict()
        assert config.score_range("risk_score") == (1, 10)
        assert config.limit("min_reasoning_steps") == 2
        assert config.max_value_length == 80

    def test_get_returns_copy(self):
        """Callers cannot mutate loaded settings"""
        config = SchemaGuardConfig.from_dict()
        config.get("vocabularies")["review_statuses"].append("archived")
        assert "archived" not in config.vocabulary("review_statuses")

    def test_from_dict_overrides(self):
        config = SchemaGuardConfig.from_dict({"formatter": {"max_value_length": 20}})
        assert config.max_value_length == 20
        assert config.limit("min_strengths") == 1


class TestFiles:
    """Loading and saving config files"""

    def test_yaml_overrides_merge(self, tmp_path, config_dir):
        (config_dir / "config.yaml").write_text(yaml.dump({
            "vocabularies": {"priority_levels": ["p1", "p2"]},
            "schema_limits": {"min_screening_steps": 5},
        }))
        config = SchemaGuardConfig(tmp_path)
        assert config.exists()
        assert config.vocabulary("priority_levels") == ("p1", "p2")
        assert config.vocabulary("email_types")[0] == "application_received"
        assert config.limit("min_screening_steps") == 5
        assert config.limit("min_strengths") == 1

    def test_json_file(self, tmp_path, config_dir):
        (config_dir / "config.json").write_text(json.dumps({"formatter": {"max_value_length": 40}}))
        config = SchemaGuardConfig(tmp_path)
        assert config.config_file.name == "config.json"
        assert config.max_value_length == 40

    def test_empty_yaml_gives_defaults(self, tmp_path, config_dir):
        (config_dir / "config.yaml").write_text("")
        assert SchemaGuardConfig(tmp_path).limit("min_reasoning_steps") == 2

    def test_non_mapping_file_rejected(self, tmp_path, config_dir):
        (config_dir / "config.yaml").write_text("- a\n- b\n")
        with pytest.raises(SchemaDefinitionError, match="mapping"):
            SchemaGuardConfig(tmp_path).load()

    def test_init_writes_yaml(self, tmp_path):
        config = SchemaGuardConfig(tmp_path)
        config.init({"scoring": {"risk_score": {"min": 0, "max": 5}}})
        assert config.exists()
        saved = yaml.safe_load(config.config_file.read_text())
        assert saved["scoring"]["risk_score"] == {"min": 0, "max": 5}
        assert SchemaGuardConfig(tmp_path).score_range("risk_score") == (0, 5)

    def test_save_invalidates_cache(self, tmp_path):
        config = SchemaGuardConfig(tmp_path)
        assert config.limit("min_strengths") == 1
        config.init({"schema_limits": {"min_strengths": 2}})
        assert config.limit("min_strengths") == 2


class TestErrors:
    """Misconfiguration surfaces as SchemaDefinitionError"""

    def test_unknown_vocabulary(self):
        with pytest.raises(SchemaDefinitionError, match="Unknown vocabulary 'colors'"):
            SchemaGuardConfig.from_dict().vocabulary("colors")

    def test_malformed_vocabulary(self):
        config = SchemaGuardConfig.from_dict({"vocabularies": {"bad": ["ok", 3]}})
        with pytest.raises(SchemaDefinitionError, match="non-empty strings"):
            config.vocabulary("bad")

    def test_duplicate_vocabulary_values(self):
        config = SchemaGuardConfig.from_dict({"vocabularies": {"dup": ["a", "a"]}})
        with pytest.raises(SchemaDefinitionError, match="Duplicate"):
            config.enum("dup")

    def test_unknown_limit(self):
        with pytest.raises(SchemaDefinitionError):
            SchemaGuardConfig.from_dict().limit("nope")

    def test_bad_score_range(self):
        config = SchemaGuardConfig.from_dict({"scoring": {"fit_score": {"min": 0}}})
        with pytest.raises(SchemaDefinitionError, match="'min' and 'max'"):
            config.score_range("fit_score")


class TestLogging:
    """Log routing"""

    @pytest.fixture
    def restore_logger(self):
        logger = logging.getLogger("schemaguard")
        handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
        yield
        logger.handlers = handlers
        logger.setLevel(level)
        logger.propagate = propagate

    def test_split_streams(self, restore_logger, capsys):
        """Info goes to stdout, warnings to stderr"""
        logger = configure_logging()
        logging.getLogger("schemaguard.core.dispatch").info("dispatched op")
        logging.getLogger("schemaguard.core.dispatch").warning("unknown op")
        captured = capsys.readouterr()
        assert "dispatched op" in captured.out
        assert "unknown op" not in captured.out
        assert "unknown op" in captured.err
        assert len(logger.handlers) == 2
