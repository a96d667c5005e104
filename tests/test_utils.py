"""Unit tests for utils."""

import pytest

from async_upnp_bindgen.utils import CaseInsensitiveDict, snake_case


def test_case_insensitive_dict() -> None:
    """Test CaseInsensitiveDict."""
    ci_dict = CaseInsensitiveDict()
    ci_dict["NT"] = "upnp:event"
    assert ci_dict["nt"] == "upnp:event"
    assert "Nt" in ci_dict
    assert CaseInsensitiveDict(sid="uuid:1") == {"SID": "uuid:1"}
    assert CaseInsensitiveDict({"sid": "uuid:1"}, sid="uuid:2") == {"sid": "uuid:2"}

    ci_dict["nt"] = "upnp:propchange"
    assert len(ci_dict) == 1
    assert ci_dict.as_dict() == {"nt": "upnp:propchange"}

    del ci_dict["NT"]
    assert "nt" not in ci_dict


def test_case_insensitive_dict_equality() -> None:
    """Test CaseInsensitiveDict equality."""
    assert CaseInsensitiveDict(key="value") == CaseInsensitiveDict(KEY="value")
    assert CaseInsensitiveDict(key="value") != CaseInsensitiveDict(key="other")


@pytest.mark.parametrize(
    "name,expected",
    [
        ("GetVolume", "get_volume"),
        ("GetVolumeDB", "get_volume_db"),
        ("SetEQ", "set_eq"),
        ("A_ARG_TYPE_InstanceID", "a_arg_type_instance_id"),
        ("LastChange", "last_change"),
        ("HTTPServer", "http_server"),
        ("X", "x"),
        ("Import", "import_"),
    ],
)
def test_snake_case(name: str, expected: str) -> None:
    """Test converting UPnP names to snake_case."""
    assert snake_case(name) == expected
