"""Tests for configuration loading.

Tests cover:
- Defaults without a file
- YAML file loading
- Environment variable overrides
- Validation integration
- Error handling and messages
"""

from pathlib import Path

import pytest

from scopedb import ScopedDB
from scopedb.config import ScopeDBConfig, StoreConfig, apply_env_overrides, load_config
from scopedb.errors import ConfigurationError, ErrorCode
from scopedb.store import JsonFileKeyPathStore, MemoryKeyPathStore, create_store


class TestDefaults:
    def test_defaults_without_file(self):
        config = load_config(environ={})
        assert config.store.backend == "memory"
        assert config.identity.cookie_name == "uuid"
        assert config.identity.fallback == "ghost-uuid"
        assert config.defaults.namespace == "db"
        assert config.logging.level == "INFO"
        assert config.logging.json_format is False


class TestYAMLLoading:
    def test_example_config_loads(self):
        example = Path(__file__).parents[2] / "config" / "scopedb.example.yaml"
        config = load_config(str(example), environ={})
        assert config.store.backend == "json"
        assert config.store.path == "data/scopedb.json"
        assert config.logging.json_format is False

    def test_load_valid_yaml(self, tmp_path):
        config_file = tmp_path / "scopedb.yaml"
        config_file.write_text(
            """
store:
  backend: json
  path: /tmp/state.json
identity:
  fallback: anonymous
logging:
  level: debug
  json: true
"""
        )
        config = load_config(str(config_file), environ={})
        assert config.store.backend == "json"
        assert config.store.path == "/tmp/state.json"
        assert config.identity.fallback == "anonymous"
        assert config.logging.level == "DEBUG"
        assert config.logging.json_format is True

    def test_load_empty_yaml(self, tmp_path):
        config_file = tmp_path / "scopedb.yaml"
        config_file.write_text("")
        assert load_config(str(config_file), environ={}) == ScopeDBConfig()

    def test_invalid_yaml_syntax(self, tmp_path):
        config_file = tmp_path / "scopedb.yaml"
        config_file.write_text("store:\n  backend: json\n    path: x\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(config_file), environ={})
        assert "Invalid YAML syntax" in str(exc_info.value)
        assert exc_info.value.code is ErrorCode.E801_INVALID_CONFIG_FILE

    def test_file_not_found(self):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config("/nonexistent/scopedb.yaml", environ={})

    def test_unsupported_format(self, tmp_path):
        config_file = tmp_path / "scopedb.json"
        config_file.write_text("{}")
        with pytest.raises(ConfigurationError, match="Unsupported configuration file format"):
            load_config(str(config_file), environ={})

    def test_top_level_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "scopedb.yaml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(str(config_file), environ={})


class TestValidation:
    def test_json_backend_requires_path(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(environ={"SCOPEDB_STORE__BACKEND": "json"})
        assert exc_info.value.code is ErrorCode.E803_CONFIG_VALIDATION_FAILED

    def test_unknown_keys_rejected(self, tmp_path):
        config_file = tmp_path / "scopedb.yaml"
        config_file.write_text("storage:\n  backend: memory\n")
        with pytest.raises(ConfigurationError):
            load_config(str(config_file), environ={})

    def test_fallback_cannot_contain_dots(self):
        with pytest.raises(ConfigurationError):
            load_config(environ={"SCOPEDB_IDENTITY__FALLBACK": "a.b"})


class TestEnvOverrides:
    def test_nested_overrides(self):
        config = load_config(
            environ={
                "SCOPEDB_STORE__BACKEND": "json",
                "SCOPEDB_STORE__PATH": "/data/s.json",
                "SCOPEDB_STORE__RECOVER_CORRUPT": "true",
                "SCOPEDB_DEFAULTS__NAMESPACE": "app",
                "UNRELATED": "ignored",
            }
        )
        assert config.store.backend == "json"
        assert config.store.path == "/data/s.json"
        assert config.store.recover_corrupt is True
        assert config.defaults.namespace == "app"

    def test_env_overrides_file(self, tmp_path):
        config_file = tmp_path / "scopedb.yaml"
        config_file.write_text("defaults:\n  namespace: fromfile\n")
        config = load_config(str(config_file), environ={"SCOPEDB_DEFAULTS__NAMESPACE": "fromenv"})
        assert config.defaults.namespace == "fromenv"

    def test_env_override_disabled(self):
        config = load_config(env_override=False)
        assert config == ScopeDBConfig()

    def test_reads_os_environ(self, isolate_environment, monkeypatch):
        monkeypatch.setenv("SCOPEDB_IDENTITY__COOKIE_NAME", "sid")
        assert load_config().identity.cookie_name == "sid"

    def test_refuses_to_overwrite_scalar(self):
        with pytest.raises(ConfigurationError, match="not a mapping"):
            apply_env_overrides({"store": "memory"}, {"SCOPEDB_STORE__BACKEND": "json"})

    def test_ignores_empty_key(self):
        assert apply_env_overrides({}, {"SCOPEDB_": "x", "SCOPEDB____": "y"}) == {}


class TestStoreFactory:
    def test_memory_backend(self):
        assert isinstance(create_store(StoreConfig()), MemoryKeyPathStore)

    def test_json_backend(self, json_path):
        store = create_store(StoreConfig(backend="json", path=json_path))
        assert isinstance(store, JsonFileKeyPathStore)
        assert store.filepath == json_path

    def test_from_config_wires_everything(self, json_path):
        config = load_config(
            environ={
                "SCOPEDB_STORE__BACKEND": "json",
                "SCOPEDB_STORE__PATH": json_path,
                "SCOPEDB_IDENTITY__COOKIE_NAME": "sid",
                "SCOPEDB_IDENTITY__FALLBACK": "nobody",
                "SCOPEDB_DEFAULTS__NAMESPACE": "app",
            }
        )
        db = ScopedDB.from_config(config, cookies={"sid": "u-1"})
        assert db.resolve(db.default_namespace, "k") == "app.user.u-1.k"

        anonymous = ScopedDB.from_config(config)
        assert anonymous.resolve("app", "k") == "app.user.nobody.k"
