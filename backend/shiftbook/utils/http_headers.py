"""
下載檔名的 Content-Disposition（RFC 5987 / RFC 6266）。

header 只能放 latin-1，日文檔名放在 filename*=UTF-8''...；
filename="..." 只留 ASCII 當 fallback，非 ASCII 字元換成底線。
"""
import re
from typing import Optional
from urllib.parse import quote

_NON_ASCII = re.compile(r"[^\x20-\x7e]")


def ascii_fallback_filename(name: str) -> str:
    """非 ASCII → _；雙引號與反斜線跳脫。"""
    cleaned = _NON_ASCII.sub("_", name or "") or "download"
    return cleaned.replace("\\", "\\\\").replace('"', '\\"')


def build_content_disposition(
    ascii_filename: str,
    unicode_filename: Optional[str] = None,
    disposition: str = "attachment",
) -> str:
    """
    例：build_content_disposition("shifts_2024_06.xlsx", "シフト_2024年6月.xlsx")
    → attachment; filename="shifts_2024_06.xlsx"; filename*=UTF-8''%E3%82%B7...

    unicode_filename 未給或與 ASCII 檔名相同時省略 filename*。
    """
    value = f'{disposition}; filename="{ascii_fallback_filename(ascii_filename)}"'
    if unicode_filename and unicode_filename != ascii_filename:
        value += f"; filename*=UTF-8''{quote(unicode_filename, safe='')}"
    return value
