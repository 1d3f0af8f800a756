# pyright: reportUnknownMemberType=false
import pytest

from courier.networking.config import (
    LIBRARY_DEFAULTS,
    RequestConfig,
    TransportConfig,
    json_transform_request,
    merge_config,
)
from courier.networking.errors import ConfigError


def test_request_config_defaults_are_undefined():
    config = RequestConfig()

    assert config.url is None
    assert config.method is None
    assert config.base_url is None
    assert config.transform_request is None
    assert config.transform_response is None
    assert config.headers is None
    assert config.params is None
    assert config.data is None
    assert config.timeout is None
    assert config.response_type is None


def test_library_defaults_are_stable():
    assert LIBRARY_DEFAULTS.url == ""
    assert LIBRARY_DEFAULTS.method == "GET"
    assert LIBRARY_DEFAULTS.base_url == ""
    assert dict(LIBRARY_DEFAULTS.headers) == {}
    assert LIBRARY_DEFAULTS.response_type == "json"
    assert LIBRARY_DEFAULTS.transform_request == (json_transform_request,)
    assert LIBRARY_DEFAULTS.transform_response == ()


def test_method_is_normalized_to_upper_case():
    assert RequestConfig(method="post").method == "POST"


def test_config_rejects_unknown_method():
    with pytest.raises(ConfigError):
        RequestConfig(method="DELETE")


def test_config_rejects_non_string_method():
    with pytest.raises(ConfigError):
        RequestConfig(method=1)  # type: ignore[arg-type]


def test_config_rejects_unknown_response_type():
    with pytest.raises(ConfigError):
        RequestConfig(response_type="xml")


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        RequestConfig(method="PATCH")


def test_config_rejects_non_positive_timeout():
    with pytest.raises(ConfigError):
        RequestConfig(timeout=0)
    with pytest.raises(ConfigError):
        RequestConfig(timeout=-1)


def test_config_headers_are_immutable():
    config = RequestConfig(headers={"X-Test": "1"})

    with pytest.raises(TypeError):
        config.headers["X-Test"] = "2"  # type: ignore[index]


def test_config_copies_external_headers_and_params():
    headers = {"X-Test": "1"}
    params = {"a": 1}
    config = RequestConfig(headers=headers, params=params)
    headers["X-Test"] = "2"
    params["b"] = 2

    assert config.headers["X-Test"] == "1"
    assert dict(config.params) == {"a": 1}


def test_config_freezes_transform_lists():
    transforms = [json_transform_request]
    config = RequestConfig(transform_request=transforms)
    transforms.append(json_transform_request)

    assert config.transform_request == (json_transform_request,)


def test_config_is_frozen():
    config = RequestConfig(url="/x")

    with pytest.raises(AttributeError):
        config.url = "/y"  # type: ignore[misc]


def test_merge_is_right_biased():
    base = RequestConfig(url="/base", method="GET", timeout=5.0, data={"a": 1})
    override = RequestConfig(url="/override", response_type="text")

    merged = merge_config(base, override)

    assert merged.url == "/override"
    assert merged.method == "GET"
    assert merged.timeout == 5.0
    assert merged.data == {"a": 1}
    assert merged.response_type == "text"


def test_merge_headers_is_keywise_union():
    base = RequestConfig(headers={"a": "1", "b": "2"})
    override = RequestConfig(headers={"b": "3", "c": "4"})

    merged = merge_config(base, override)

    assert dict(merged.headers) == {"a": "1", "b": "3", "c": "4"}


def test_merge_headers_from_one_side_only():
    base = RequestConfig(headers={"a": "1"})

    assert dict(merge_config(base, RequestConfig()).headers) == {"a": "1"}
    assert dict(merge_config(RequestConfig(), base).headers) == {"a": "1"}


def test_merge_headers_are_shallow():
    base = RequestConfig(headers={"X-Meta": {"a": 1}})  # type: ignore[dict-item]
    override = RequestConfig(headers={"X-Meta": {"b": 2}})  # type: ignore[dict-item]

    merged = merge_config(base, override)

    assert merged.headers["X-Meta"] == {"b": 2}


def test_merge_does_not_mutate_inputs():
    base = RequestConfig(headers={"a": "1"})
    override = RequestConfig(headers={"b": "2"})

    merged = merge_config(base, override)

    assert merged is not base
    assert merged is not override
    assert dict(base.headers) == {"a": "1"}
    assert dict(override.headers) == {"b": "2"}


def test_merge_keeps_empty_override_transforms():
    base = RequestConfig(transform_request=(json_transform_request,))

    merged = merge_config(base, RequestConfig(transform_request=()))

    assert merged.transform_request == ()


def test_json_transform_request_serializes_compactly():
    assert json_transform_request({"y": 2, "z": [1]}, {}) == '{"y":2,"z":[1]}'


def test_json_transform_request_passes_encoded_bodies_through():
    assert json_transform_request(None, {}) is None
    assert json_transform_request("raw", {}) == "raw"
    assert json_transform_request(b"raw", {}) == b"raw"


def test_transport_config_defaults_are_stable():
    config = TransportConfig()

    assert config.user_agent is None
    assert dict(config.default_headers) == {}
    assert config.verify_tls is True


def test_transport_config_default_headers_are_independent():
    first = TransportConfig()
    second = TransportConfig()

    assert first.default_headers is not second.default_headers


def test_transport_config_copies_external_headers_input():
    headers = {"X-Test": "1"}
    config = TransportConfig(default_headers=headers)
    headers["X-Test"] = "2"

    assert config.default_headers["X-Test"] == "1"
