from __future__ import annotations

from pathlib import Path

from luxcli.domain.environment import (
    EnvBinding,
    EnvResolution,
    InvocationConfig,
    persist_env,
    resolve_env,
    resolve_env_var,
)


def test_explicit_value_is_set() -> None:
    environ: dict[str, str] = {}
    value = resolve_env_var("NODE_ENV", "production", "development", environ)
    assert value == "production"
    assert environ == {"NODE_ENV": "production"}


def test_existing_value_is_left_untouched() -> None:
    environ = {"NODE_ENV": "test"}
    value = resolve_env_var("NODE_ENV", None, "development", environ)
    assert value == "test"
    assert environ == {"NODE_ENV": "test"}


def test_default_is_established_when_nothing_is_set() -> None:
    environ: dict[str, str] = {}
    value = resolve_env_var("NODE_ENV", None, "development", environ)
    assert value == "development"
    assert environ == {"NODE_ENV": "development"}


def test_explicit_value_overrides_existing_value() -> None:
    environ = {"NODE_ENV": "test"}
    assert resolve_env_var("NODE_ENV", "production", "development", environ) == "production"
    assert environ["NODE_ENV"] == "production"


def test_empty_explicit_value_counts_as_absent() -> None:
    assert resolve_env("", "test", "development") == ("test", False)
    assert resolve_env("", None, "development") == ("development", True)


def test_empty_existing_value_falls_back_to_default() -> None:
    environ = {"NODE_ENV": ""}
    assert resolve_env(None, "", "development") == ("development", True)
    assert resolve_env_var("NODE_ENV", None, "development", environ) == "development"
    assert environ == {"NODE_ENV": "development"}


def test_integer_values_are_stringified() -> None:
    assert resolve_env(5000, None, "4000") == ("5000", True)
    assert resolve_env(None, None, 4000) == ("4000", True)


def test_persist_env_only_writes_pending_entries() -> None:
    environ = {"PORT": "8080"}
    written = persist_env(
        [
            EnvResolution(key="PORT", value="8080", persist=False),
            EnvResolution(key="NODE_ENV", value="development", persist=True),
        ],
        environ,
    )
    assert written == ["NODE_ENV"]
    assert environ == {"PORT": "8080", "NODE_ENV": "development"}


def test_binding_without_option_always_sets_default() -> None:
    binding = EnvBinding("NODE_REPL", "true")
    resolution = binding.resolve({}, {"NODE_REPL": "false"})
    assert resolution == EnvResolution(key="NODE_REPL", value="true", persist=True)


def test_binding_prefers_project_default_over_builtin() -> None:
    binding = EnvBinding("NODE_ENV", "development", option="environment")
    resolution = binding.resolve({"environment": None}, {}, {"NODE_ENV": "staging"})
    assert resolution.value == "staging"
    assert resolution.persist is True


def test_invocation_config_derives_flags(tmp_path: Path) -> None:
    config = InvocationConfig.build(
        "s",
        tmp_path,
        {"use_weak": True, "skip_build": True, "port": 5000, "environment": None},
        [EnvBinding("PORT", "4000", option="port"), EnvBinding("NODE_ENV", "development", option="environment")],
        {"NODE_ENV": "test"},
    )
    assert config.strict is False
    assert config.skip_build is True
    assert config.environment == {"PORT": "5000", "NODE_ENV": "test"}
    assert [r.key for r in config.resolutions if r.persist] == ["PORT"]
