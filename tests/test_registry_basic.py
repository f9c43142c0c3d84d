import pytest

from ecodiff.errors import ConfigError
from ecodiff.registry import Registry, resolve_analysis
from ecodiff.tasks.runner import list_analyses


def test_register_get_list_roundtrip() -> None:
    registry = Registry()
    sentinel = object()

    registry.register("analysis", "dummy", sentinel)

    assert registry.get("analysis", "dummy") is sentinel
    assert registry.list("analysis") == ["dummy"]


def test_unknown_kind_error_is_clear() -> None:
    registry = Registry()

    with pytest.raises(KeyError) as exc:
        registry.get("unknown", "dummy")

    message = str(exc.value)
    assert "Unknown registry kind" in message
    assert "unknown" in message


def test_duplicate_registration_requires_overwrite() -> None:
    registry = Registry()
    registry.register("analysis", "a1", 1)

    with pytest.raises(ValueError) as exc:
        registry.register("analysis", "a1", 2)

    assert "already registered" in str(exc.value)

    registry.register("analysis", "a1", 2, overwrite=True)
    assert registry.get("analysis", "a1") == 2


def test_missing_analysis_raises_config_error() -> None:
    with pytest.raises(ConfigError) as exc:
        resolve_analysis("missing-analysis", registry=Registry())

    assert "missing-analysis" in str(exc.value)


def test_builtin_analyses_are_registered() -> None:
    assert list_analyses() == [
        "abundance_change",
        "abundance_difference",
        "composition_difference",
        "rac_difference",
    ]
