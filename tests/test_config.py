from datetime import date
from pathlib import Path

import pytest

from smb_kasir.config import default_app_config, load_app_config


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "smb_kasir_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_full_config(tmp_path):
    path = write_config(
        tmp_path,
        """
[business]
name = "Warung Sari"
currency = "IDR"
default_customer = "Umum"

[fiscal_year]
start_date = "2025-04-01"
end_date = "2026-03-31"

[inventory]
default_min_stock = 3
low_stock_threshold = 8
purchase_markup = 1.25

[accounting]
equipment_ratio = 0.2
chart_of_accounts = "data/accounts/chart.csv"

[display]
mode = "both"
output_dir = "out"

[logging]
level = "info"
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.business_name == "Warung Sari"
    assert cfg.default_customer == "Umum"
    assert cfg.fiscal_year.start_date == date(2025, 4, 1)
    assert cfg.fiscal_year.end_date == date(2026, 3, 31)
    assert cfg.inventory.default_min_stock == 3
    assert cfg.inventory.low_stock_threshold == 8
    assert cfg.inventory.purchase_markup == pytest.approx(1.25)
    assert cfg.accounting.equipment_ratio == pytest.approx(0.2)
    # Relative paths resolve against the config file directory.
    assert cfg.accounting.chart_of_accounts == (
        tmp_path / "data/accounts/chart.csv"
    ).resolve()
    assert cfg.display_mode == "both"
    assert cfg.output_dir == (tmp_path / "out").resolve()
    assert cfg.log_level == "INFO"


def test_minimal_config_uses_defaults(tmp_path):
    cfg = load_app_config(str(write_config(tmp_path, "")))

    assert cfg.business_name == "Toko Saya"
    assert cfg.currency == "IDR"
    assert cfg.default_customer == "Pelanggan Umum"
    assert cfg.inventory.default_min_stock == 5
    assert cfg.inventory.low_stock_threshold == 10
    assert cfg.inventory.purchase_markup == pytest.approx(1.3)
    assert cfg.accounting.equipment_ratio == pytest.approx(0.1)
    assert cfg.accounting.chart_of_accounts is None
    assert cfg.display_mode == "table"
    assert cfg.log_level == "WARNING"
    assert cfg.fiscal_year.start_date.month == 1
    assert cfg.fiscal_year.end_date.month == 12


def test_missing_default_config_returns_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_app_config()
    assert cfg == default_app_config()


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


@pytest.mark.parametrize(
    "content, message",
    [
        ('[fiscal_year]\nstart_date = "2025-01-01"\n', "missing"),
        ('[fiscal_year]\nstart_date = "2025-12-31"\nend_date = "2025-01-01"\n', "before"),
        ('[fiscal_year]\nstart_date = "01/01/2025"\nend_date = "2025-12-31"\n', "YYYY-MM-DD"),
        ('[display]\nmode = "html"\n', "display"),
        ('[logging]\nlevel = "LOUD"\n', "logging"),
        ("[inventory]\npurchase_markup = 0\n", "purchase_markup"),
        ('[inventory]\ndefault_min_stock = "many"\n', "inventory"),
        ("[accounting]\nequipment_ratio = 1.5\n", "equipment_ratio"),
        ("this is not toml", "parse"),
    ],
)
def test_invalid_config_values(tmp_path, content, message):
    path = write_config(tmp_path, content)
    with pytest.raises(ValueError, match=message):
        load_app_config(str(path))
