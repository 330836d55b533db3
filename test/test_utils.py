from utils import gbp, invoice_lines_dataframe, shifts_to_dataframe


def test_gbp():
    assert gbp(1234.5) == "£1,234.50"
    assert gbp(0) == "£0.00"
    assert gbp(-12) == "-£12.00"


def test_shifts_to_dataframe_sorted_newest_first(shift_factory):
    shifts = [
        shift_factory(id="old", date="2024-01-10", display_date="10/01/2024"),
        shift_factory(id="bad", date="", display_date="??"),
        shift_factory(id="new", date="2024-03-01", display_date="01/03/2024"),
    ]
    df = shifts_to_dataframe(shifts)
    assert list(df["ID"]) == ["new", "old", "bad"]
    assert "Sort" not in df.columns
    assert df.loc[0, "Date"] == "01/03/2024"


def test_shifts_to_dataframe_empty():
    assert shifts_to_dataframe([]).empty


def test_invoice_lines_dataframe(shift_factory):
    df = invoice_lines_dataframe([shift_factory(hours=7.5, rate=40.0, day_salary=300.0)])
    assert list(df.columns) == ["Date", "Description", "Hours", "Rate", "Amount"]
    row = df.iloc[0]
    assert row["Description"] == "Locum Agency 1 at City Hospital"
    assert row["Hours"] == "7.5"
    assert row["Amount"] == "£300.00"
