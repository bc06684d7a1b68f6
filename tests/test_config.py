from pathlib import Path

import pytest

from store_dre.config import load_app_config


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "store_dre_config.toml"
    path.write_text(body, encoding="utf-8")
    return path


MINIMAL = """
[snapshot]
stores = "data/stores.csv"
movement_types = "data/movement_types.csv"
closings = "data/closings.csv"
"""


def test_minimal_config_uses_defaults(tmp_path: Path) -> None:
    cfg = load_app_config(str(_write_config(tmp_path, MINIMAL)))

    assert cfg.snapshot.stores == (tmp_path / "data" / "stores.csv").resolve()
    assert cfg.snapshot.movements is None
    assert cfg.snapshot.payment_methods is None
    assert cfg.snapshot.goals is None
    assert cfg.default_store is None
    assert cfg.cache_size == 128
    assert cfg.decimals == 2
    assert cfg.currency == "BRL"
    assert cfg.log_level == "WARNING"


def test_full_config(tmp_path: Path) -> None:
    body = (
        MINIMAL
        + """movements = "data/movements.csv"
goals = "data/goals.csv"

[reporting]
default_store = "store-a"
cache_size = 16

[display]
decimals = 0
currency = "USD"

[logging]
level = "debug"
"""
    )
    cfg = load_app_config(str(_write_config(tmp_path, body)))

    assert cfg.snapshot.movements == (tmp_path / "data" / "movements.csv").resolve()
    assert cfg.snapshot.goals == (tmp_path / "data" / "goals.csv").resolve()
    assert cfg.default_store == "store-a"
    assert cfg.cache_size == 16
    assert cfg.decimals == 0
    assert cfg.currency == "USD"
    assert cfg.log_level == "DEBUG"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_invalid_toml_raises_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_app_config(str(_write_config(tmp_path, "[snapshot\n")))


def test_missing_snapshot_paths_raise(tmp_path: Path) -> None:
    body = '[snapshot]\nstores = "stores.csv"\n'
    with pytest.raises(ValueError, match="movement_types"):
        load_app_config(str(_write_config(tmp_path, body)))


@pytest.mark.parametrize(
    "extra",
    [
        '[reporting]\ncache_size = "lots"\n',
        "[reporting]\ncache_size = -1\n",
        '[logging]\nlevel = "LOUD"\n',
    ],
)
def test_invalid_options_raise(tmp_path: Path, extra: str) -> None:
    with pytest.raises(ValueError):
        load_app_config(str(_write_config(tmp_path, MINIMAL + "\n" + extra)))


def test_default_config_file_in_current_directory(tmp_path: Path, monkeypatch) -> None:
    _write_config(tmp_path, MINIMAL)
    monkeypatch.chdir(tmp_path)

    cfg = load_app_config()

    assert cfg.snapshot.closings == (tmp_path / "data" / "closings.csv").resolve()
