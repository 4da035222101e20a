import pytest

from storeapps.infrastructure.importers import RecordImportError, import_records


def test_parses_example_row(csv_factory):
    path = csv_factory(
        [["App1", "https://play.google.com/x", "Acme", "Desc", "4_0", "/icons/app1.png"]]
    )

    records = import_records(path, ";")

    assert len(records) == 1
    record = records[0]
    assert record.name == "App1"
    assert record.url == "https://play.google.com/x"
    assert record.publisher == "Acme"
    assert record.description == "Desc"
    assert record.minimum_android_version == "4_0"
    assert record.icon_path == "/icons/app1.png"


def test_preserves_file_order_and_duplicates(csv_factory):
    rows = [
        ["B", "https://x/b", "P", "D", "5_0", "b.png"],
        ["A", "https://x/a", "P", "D", "5_0", "a.png"],
        ["B", "https://x/b", "P", "D", "5_0", "b.png"],
    ]
    records = import_records(csv_factory(rows))

    assert [r.name for r in records] == ["B", "A", "B"]


def test_custom_delimiter(csv_factory):
    path = csv_factory(
        [["App1", "https://x/1", "Acme", "Has; semicolon", "6_0", "i.png"]],
        delimiter="\t",
    )

    records = import_records(path, "\t")

    assert records[0].description == "Has; semicolon"


def test_handles_bom_and_blank_lines(tmp_path):
    path = tmp_path / "apps.csv"
    path.write_text(
        "\ufeffName;URL;Publisher;Description;MininumAndroidVersion;Icon\n"
        "App1;https://x/1;Acme;Desc;4_0;i.png\n"
        "\n",
        encoding="utf-8",
    )

    records = import_records(path)

    assert [r.name for r in records] == ["App1"]


def test_header_only_yields_no_records(csv_factory):
    assert import_records(csv_factory([])) == []


def test_missing_column_raises(csv_factory):
    path = csv_factory(
        [["App1", "https://x/1", "Acme", "Desc", "4_0"]],
        header="Name;URL;Publisher;Description;MininumAndroidVersion",
    )
    with pytest.raises(RecordImportError, match="Icon"):
        import_records(path)


def test_short_row_raises(csv_factory):
    path = csv_factory([["App1", "https://x/1", "Acme"]])
    with pytest.raises(RecordImportError, match="line 2"):
        import_records(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(RecordImportError):
        import_records(tmp_path / "nope.csv")


def test_delimiter_must_be_single_character(csv_factory):
    with pytest.raises(ValueError):
        import_records(csv_factory([]), ";;")


def test_invalid_row_error_is_a_single_line(csv_factory):
    path = csv_factory([["App1", "https://x/1"]])

    with pytest.raises(RecordImportError) as excinfo:
        import_records(path)

    message = str(excinfo.value)
    assert "\n" not in message
    assert "Publisher" in message
