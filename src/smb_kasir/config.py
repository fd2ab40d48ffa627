# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SMB Kasir.

This module is responsible for:
- loading the application configuration from a TOML file,
- falling back to built-in defaults when no configuration file exists,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

DEFAULT_CONFIG_FILE = "smb_kasir_config.toml"

VALID_DISPLAY_MODES = {"table", "csv", "both"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class FiscalYear:
    """Represents a fiscal year with a start and end date."""

    start_date: date
    end_date: date


@dataclass(frozen=True)
class InventoryConfig:
    """
    Inventory rules.

    Attributes
    ----------
    default_min_stock:
        Minimum stock assigned to products created without one (including
        products created automatically by a purchase).
    low_stock_threshold:
        Stock level below which the product list counts a product as
        "low stock".
    purchase_markup:
        Selling price multiplier applied to the unit cost of products
        created from a purchase (1.3 = 30 % markup).
    """

    default_min_stock: int = 5
    low_stock_threshold: int = 10
    purchase_markup: float = 1.3


@dataclass(frozen=True)
class AccountingConfig:
    """
    Accounting rules.

    Attributes
    ----------
    equipment_ratio:
        Share of paid purchases reported as equipment (Peralatan) in the
        balance sheet and as investing cash flow.
    chart_of_accounts:
        Optional CSV chart of accounts. The built-in chart is used when None.
    """

    equipment_ratio: float = 0.1
    chart_of_accounts: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SMB Kasir.

    This aggregates:
    - the business identity (name, currency, default walk-in customer),
    - the fiscal year definition,
    - inventory and accounting rules,
    - display options for tables and CSV exports,
    - the logging level.
    """

    business_name: str
    currency: str
    default_customer: str
    fiscal_year: FiscalYear
    inventory: InventoryConfig
    accounting: AccountingConfig
    display_mode: str
    output_dir: Path
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a TOML table, or an empty mapping if missing or malformed."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _default_fiscal_year(today: Optional[date] = None) -> FiscalYear:
    """Calendar year containing `today`."""
    today = today or date.today()
    return FiscalYear(
        start_date=date(today.year, 1, 1),
        end_date=date(today.year, 12, 31),
    )


def _parse_fiscal_year(config_data: Mapping[str, Any]) -> FiscalYear:
    """
    Extract and validate the fiscal year from raw TOML configuration data.

    When the [fiscal_year] table is absent, the current calendar year is
    used.

    Raises:
        ValueError: if the fiscal year dates are incomplete or invalid.
    """
    fiscal_data = config_data.get("fiscal_year")
    if fiscal_data is None:
        return _default_fiscal_year()
    if not isinstance(fiscal_data, Mapping):
        raise ValueError("Config [fiscal_year] must be a table.")

    try:
        start_raw = fiscal_data["start_date"]
        end_raw = fiscal_data["end_date"]
    except KeyError as exc:
        raise ValueError(
            "Config file is missing [fiscal_year].start_date or end_date."
        ) from exc

    try:
        start = date.fromisoformat(str(start_raw))
        end = date.fromisoformat(str(end_raw))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(
            "Invalid fiscal year dates, expected YYYY-MM-DD format."
        ) from exc

    if end < start:
        raise ValueError("Fiscal year end_date cannot be before start_date.")

    return FiscalYear(start_date=start, end_date=end)


def _parse_inventory(section: Mapping[str, Any]) -> InventoryConfig:
    defaults = InventoryConfig()
    try:
        min_stock = int(section.get("default_min_stock", defaults.default_min_stock))
        threshold = int(
            section.get("low_stock_threshold", defaults.low_stock_threshold)
        )
        markup = float(section.get("purchase_markup", defaults.purchase_markup))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value in [inventory]: default_min_stock and "
            "low_stock_threshold must be integers, purchase_markup a number."
        ) from exc

    if min_stock < 0 or threshold < 0:
        raise ValueError("[inventory] stock thresholds cannot be negative.")
    if markup <= 0:
        raise ValueError("[inventory].purchase_markup must be greater than 0.")

    return InventoryConfig(
        default_min_stock=min_stock,
        low_stock_threshold=threshold,
        purchase_markup=markup,
    )


def _parse_accounting(section: Mapping[str, Any], base_dir: Path) -> AccountingConfig:
    defaults = AccountingConfig()
    try:
        ratio = float(section.get("equipment_ratio", defaults.equipment_ratio))
    except (TypeError, ValueError) as exc:
        raise ValueError("[accounting].equipment_ratio must be a number.") from exc
    if not 0.0 <= ratio <= 1.0:
        raise ValueError("[accounting].equipment_ratio must be between 0 and 1.")

    chart_raw = section.get("chart_of_accounts") or None
    chart_path = (base_dir / str(chart_raw)).resolve() if chart_raw else None

    return AccountingConfig(equipment_ratio=ratio, chart_of_accounts=chart_path)


def default_app_config() -> AppConfig:
    """Configuration used when no TOML file is available."""
    return _build_app_config({}, Path.cwd())


def _build_app_config(raw: Mapping[str, Any], base_dir: Path) -> AppConfig:
    # 1) Business identity
    business = _section(raw, "business")
    business_name = str(business.get("name") or "Toko Saya")
    currency = str(business.get("currency") or "IDR")
    default_customer = str(business.get("default_customer") or "Pelanggan Umum")

    # 2) Fiscal year
    fiscal_year = _parse_fiscal_year(raw)

    # 3) Rules
    inventory = _parse_inventory(_section(raw, "inventory"))
    accounting = _parse_accounting(_section(raw, "accounting"), base_dir)

    # 4) Display options
    display = _section(raw, "display")
    display_mode = str(display.get("mode", "table"))
    if display_mode not in VALID_DISPLAY_MODES:
        raise ValueError(
            f"Invalid [display].mode {display_mode!r}; expected one of "
            f"{sorted(VALID_DISPLAY_MODES)}."
        )
    output_dir = (base_dir / str(display.get("output_dir", "data/output"))).resolve()

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid [logging].level {log_level!r}; expected one of "
            f"{sorted(VALID_LOG_LEVELS)}."
        )

    return AppConfig(
        business_name=business_name,
        currency=currency,
        default_customer=default_customer,
        fiscal_year=fiscal_year,
        inventory=inventory,
        accounting=accounting,
        display_mode=display_mode,
        output_dir=output_dir,
        log_level=log_level,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SMB Kasir application configuration from a TOML file.

    Expected top-level sections in the TOML file (all optional)
    ------------------------------------------------------------
    [business]
        name, currency, default_customer.

    [fiscal_year]
        start_date / end_date (YYYY-MM-DD). Defaults to the current
        calendar year.

    [inventory]
        default_min_stock, low_stock_threshold, purchase_markup.

    [accounting]
        equipment_ratio, chart_of_accounts (CSV path).

    [display]
        mode ("table" | "csv" | "both"), output_dir.

    [logging]
        level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Notes
    -----
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.
    - When `config_path` is None and ``smb_kasir_config.toml`` does not
      exist in the current directory, built-in defaults are returned. An
      explicit path that does not exist raises FileNotFoundError.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return default_app_config()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    return _build_app_config(raw, config_file.parent)
