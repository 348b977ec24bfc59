"""国家代码工具（ISO 3166-1 数字码 → 二位字母码）"""
from __future__ import annotations

import re
from functools import lru_cache

import pycountry

_ALPHA2_RE = re.compile(r"^[A-Z]{2}$")
_NUMERIC_RE = re.compile(r"^\d{1,3}$")


def normalize_country_code(value) -> str | None:
    """去空白并转大写；不是两个大写字母则返回 None。"""
    if not isinstance(value, str):
        return None
    code = value.strip().upper()
    return code if _ALPHA2_RE.match(code) else None


@lru_cache(maxsize=None)
def _lookup_numeric(numeric: str) -> str | None:
    entry = pycountry.countries.get(numeric=numeric)
    if entry is None:
        return None
    return normalize_country_code(entry.alpha_2)


def alpha2_from_numeric(numeric) -> str | None:
    """数字码（如 840 / "840" / "4"）转二位码；无法识别时返回 None。"""
    if numeric is None or isinstance(numeric, bool):
        return None
    text = str(numeric).strip()
    if not _NUMERIC_RE.match(text):
        return None
    return _lookup_numeric(text.zfill(3))
