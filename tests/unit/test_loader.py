"""Unit tests for script definition loading."""

import pytest

from exthooks.hooks import LifecycleEvent, Script, ScriptConfigError, ScriptHandler
from exthooks.scripts import bind_scripts, load_scripts, parse_scripts, script_from_mapping

HOOKS_YAML = """\
extension-before-install:
  - name: check-disk
    description: Refuse installs on a full disk
    script: ./check-disk.sh
    timeout: 500ms
    environment:
      MIN_FREE_MB: 200
  - name: notify
    script: echo installing
    enabled: false

extension-after-install:
  name: announce
  script: echo done
"""


class TestScriptFromMapping:
    """Tests for script_from_mapping."""

    def test_full_definition(self):
        script = script_from_mapping(
            {
                "name": "lint",
                "description": "Lint the extension",
                "script": "make lint",
                "enabled": True,
                "timeout": "2m",
                "environment": {"STRICT": 1},
                "working_dir": "/tmp",
            }
        )

        assert script == Script(
            name="lint",
            description="Lint the extension",
            script="make lint",
            enabled=True,
            timeout=120.0,
            environment={"STRICT": "1"},
            working_dir="/tmp",
        )

    def test_default_timeout_applied(self):
        script = script_from_mapping({"name": "a", "script": "true"}, default_timeout=7)

        assert script.timeout == 7.0

    def test_explicit_zero_timeout_means_no_limit(self):
        script = script_from_mapping({"name": "a", "script": "true", "timeout": 0})

        assert script.timeout == 0.0

    @pytest.mark.parametrize(
        "data,message",
        [
            ({"script": "true"}, "name cannot be empty"),
            ({"name": "  ", "script": "true"}, "name cannot be empty"),
            ({"name": "a"}, "has no command"),
            ({"name": "a", "script": "true", "timeout": -1}, "invalid timeout"),
            ({"name": "a", "script": "true", "timeout": "soon"}, "invalid timeout"),
            ({"name": "a", "script": "true", "environment": ["X=1"]}, "environment must be a mapping"),
            ({"name": "a", "script": "true", "enabled": "yes"}, "enabled must be true or false"),
        ],
    )
    def test_invalid_definitions(self, data, message):
        with pytest.raises(ScriptConfigError, match=message):
            script_from_mapping(data)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            script_from_mapping({})

    @pytest.mark.posix
    def test_warns_on_non_executable_script_file(self, tmp_path, log_records):
        hook = tmp_path / "check.sh"
        hook.write_text("#!/bin/sh\nexit 0\n")
        hook.chmod(0o644)

        script_from_mapping(
            {"name": "check", "script": "./check.sh --fast", "working_dir": str(tmp_path)}
        )

        warnings = [r for r in log_records if "not executable" in r]
        assert len(warnings) == 1
        assert str(hook) in warnings[0]

    @pytest.mark.posix
    def test_no_warning_for_executable_or_path_commands(self, tmp_path, log_records):
        hook = tmp_path / "check.sh"
        hook.write_text("#!/bin/sh\nexit 0\n")
        hook.chmod(0o755)

        script_from_mapping({"name": "a", "script": str(hook)})
        script_from_mapping({"name": "b", "script": "echo hi"})

        assert not [r for r in log_records if "not executable" in r]


class TestLoadScripts:
    """Tests for load_scripts and bind_scripts."""

    def test_load_yaml_file(self, tmp_path):
        hooks_file = tmp_path / "hooks.yaml"
        hooks_file.write_text(HOOKS_YAML)

        scripts = load_scripts(hooks_file)

        before = scripts["extension-before-install"]
        assert [s.name for s in before] == ["check-disk", "notify"]
        assert before[0].timeout == 0.5
        assert before[0].environment == {"MIN_FREE_MB": "200"}
        assert before[1].enabled is False
        assert [s.name for s in scripts["extension-after-install"]] == ["announce"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ScriptConfigError, match="Cannot read hooks file"):
            load_scripts(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        hooks_file = tmp_path / "hooks.yaml"
        hooks_file.write_text("extension-before-install: [unclosed\n")

        with pytest.raises(ScriptConfigError, match="Invalid YAML"):
            load_scripts(hooks_file)

    def test_empty_file(self, tmp_path):
        hooks_file = tmp_path / "hooks.yaml"
        hooks_file.write_text("")

        assert load_scripts(hooks_file) == {}

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ScriptConfigError):
            parse_scripts(["not", "a", "mapping"])

    def test_bind_registers_in_file_order(self, registry, tmp_path):
        hooks_file = tmp_path / "hooks.yaml"
        hooks_file.write_text(HOOKS_YAML)

        count = bind_scripts(registry, load_scripts(hooks_file))

        assert count == 3
        handlers = registry.snapshot(LifecycleEvent.BEFORE_INSTALL)
        assert all(isinstance(h, ScriptHandler) for h in handlers)
        assert [h.name for h in handlers] == ["check-disk", "notify"]
