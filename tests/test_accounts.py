import pandas as pd
import pytest

from smb_kasir.accounts import (
    common_account_names,
    default_chart_of_accounts,
    load_chart_of_accounts,
    split_known_and_unknown_accounts,
    summarize_unknown_accounts,
)


def test_default_chart_covers_form_and_automatic_accounts():
    chart = default_chart_of_accounts()
    names = set(chart["name"])

    assert list(chart.columns) == ["code", "name", "class"]
    for account in (
        "Kas",
        "Persediaan",
        "Pendapatan Penjualan",
        "Beban Operasional",
        "Beban Administrasi",
        "Beban Penjualan",
        "Beban Lainnya",
        "Modal",
    ):
        assert account in names
    assert "Hutang Usaha" in common_account_names()


def test_load_chart_with_aliases_and_derived_class(tmp_path):
    path = tmp_path / "chart.csv"
    path.write_text(
        "Account_Number,Label\n1-101,Kas\n2-101,Hutang Usaha\n4-101,Penjualan\n6-100,Beban Lain\n",
        encoding="utf-8",
    )
    chart = load_chart_of_accounts(str(path))

    assert chart["class"].tolist() == ["asset", "liability", "revenue", "expense"]
    assert chart["name"].tolist()[0] == "Kas"


def test_load_chart_rejects_bad_structure(tmp_path):
    path = tmp_path / "chart.csv"
    path.write_text("foo,bar\n1,2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="account code"):
        load_chart_of_accounts(str(path))

    path.write_text("code,name,class\n1-101,Kas,cash\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown account class"):
        load_chart_of_accounts(str(path))


def test_split_and_summarize_unknown_accounts():
    lines = pd.DataFrame(
        {
            "account": ["Kas", " kas ", "Kass", "Kass", "Biaya Iklan"],
            "debit": [100.0, 50.0, 10.0, 0.0, 5.0],
            "credit": [0.0, 0.0, 0.0, 20.0, 0.0],
        }
    )

    known, unknown = split_known_and_unknown_accounts(lines, {"Kas", "Modal"})
    assert len(known) == 2
    assert len(unknown) == 3

    summary = summarize_unknown_accounts(unknown)
    assert summary["account"].tolist() == ["Biaya Iklan", "Kass"]
    kass = summary[summary["account"] == "Kass"].iloc[0]
    assert kass["lines_count"] == 2
    assert kass["total_debit"] == pytest.approx(10.0)
    assert kass["total_credit"] == pytest.approx(20.0)

    assert summarize_unknown_accounts(unknown.iloc[0:0]).empty
