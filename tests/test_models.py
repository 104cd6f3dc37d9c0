import pytest

from scry.classifier.models import JSON, ModelResponse, ViewKind, ViewType
from scry.input.keys import KeyKind, LogicalKeyEvent, char_event


def test_view_kind_names() -> None:
    assert JSON.name == "Json"
    assert ViewKind.external("jless").name == "External: jless"
    assert ViewKind.external("jless").is_external


def test_external_view_requires_tool() -> None:
    with pytest.raises(ValueError):
        ViewKind(ViewType.EXTERNAL_TOOL)
    with pytest.raises(ValueError):
        ViewKind(ViewType.PLAIN, "less")


def test_model_response_tool_is_optional() -> None:
    assert ModelResponse.model_validate_json('{"view": "Plain"}').tool is None


def test_char_event_only_accepts_bound_characters() -> None:
    assert char_event("A") == LogicalKeyEvent.character("a")
    assert char_event("x") is None
    assert char_event("ab") is None
    assert LogicalKeyEvent.ctrl("C").is_ctrl("c")
    assert not LogicalKeyEvent.key(KeyKind.UP).is_char("q")
