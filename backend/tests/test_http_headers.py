"""Content-Disposition 檔名組裝測試"""
from urllib.parse import unquote

from shiftbook.utils.http_headers import ascii_fallback_filename, build_content_disposition


def test_unicode_filename_is_percent_encoded():
    value = build_content_disposition("shifts_2024_06.xlsx", "シフト_2024年6月.xlsx")
    assert value.startswith('attachment; filename="shifts_2024_06.xlsx"; ')
    encoded = value.split("filename*=UTF-8''", 1)[1]
    assert unquote(encoded) == "シフト_2024年6月.xlsx"
    value.encode("latin-1")


def test_ascii_only_omits_extended_filename():
    assert build_content_disposition("a.xlsx") == 'attachment; filename="a.xlsx"'
    assert build_content_disposition("a.xlsx", "a.xlsx", disposition="inline") == 'inline; filename="a.xlsx"'


def test_ascii_fallback_sanitizes():
    assert ascii_fallback_filename("シフト.xlsx") == "___.xlsx"
    assert ascii_fallback_filename('a"b.xlsx') == 'a\\"b.xlsx'
    assert ascii_fallback_filename("") == "download"
