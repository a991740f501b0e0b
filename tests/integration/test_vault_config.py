from __future__ import annotations

import pytest

from curvevault.core.curves import CurveKind
from curvevault.core.errors import ValidationError
from curvevault.integration.config import VaultConfig, config_from_mapping, load_config


def test_defaults() -> None:
    cfg = VaultConfig()
    assert cfg.fee_bps == 100
    assert cfg.direct_sum_threshold == 100
    assert cfg.require_signatures is False
    assert cfg.curve_defaults(CurveKind.LINEAR) == (10_000_000, 100_000)
    assert cfg.curve_defaults(CurveKind.EXPONENTIAL) == (1_000_000, 500)


def test_load_yaml(tmp_path) -> None:
    path = tmp_path / "vault.yaml"
    path.write_text(
        "fee_bps: 250\n"
        "direct_sum_threshold: 64\n"
        "chain_id: curvevault-test\n"
        "linear_slope: 0\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.fee_bps == 250
    assert cfg.direct_sum_threshold == 64
    assert cfg.chain_id == "curvevault-test"
    assert cfg.linear_slope == 0
    assert cfg.linear_base_price == 10_000_000


def test_empty_yaml_is_default(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == VaultConfig()


def test_invalid_yaml(tmp_path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("fee_bps: [1, 2\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)


def test_yaml_must_be_a_mapping(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)


@pytest.mark.parametrize(
    "obj",
    [
        {"fee_bps": 10_001},
        {"fee_bps": True},
        {"fee_bps": "100"},
        {"direct_sum_threshold": -1},
        {"require_signatures": "yes"},
        {"chain_id": ""},
        {"fee": 100},
    ],
)
def test_rejects_bad_values(obj) -> None:
    with pytest.raises(ValidationError):
        config_from_mapping(obj)


def test_none_mapping_is_default() -> None:
    assert config_from_mapping(None) == VaultConfig()
