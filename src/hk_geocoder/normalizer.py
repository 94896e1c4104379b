from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

import jieba

COMMON_REPLACEMENTS = {
    "\t": " ",
    "－": "-",
    "—": "-",
    "～": "-",
    "至": "-",
    "号": "號",
    "楼": "樓",
    "层": "層",
}

CJK_PATTERN = re.compile(r"[㐀-鿿]")
# floor / flat / shop parts are never in a land or OGCIO premises address
CHINESE_FLOOR_PATTERN = re.compile(r"([0-9A-Za-z\-\s]+[樓層]|[0-9A-Za-z號\-\s]+[舖鋪室]|地[下庫]|平台).*$")
ENGLISH_FLOOR_PATTERN = re.compile(
    r"\b(FLAT|RM|ROOM|UNIT|SHOP|SUITE)\b\.?\s*[A-Z0-9\-]+\b|\b[0-9A-Z]+/F\b|\b\d+(ST|ND|RD|TH)?\s+FLOOR\b",
)
CHINESE_HOUSE_PATTERN = re.compile(r"(\d+)[A-Za-z]?(?:-(\d+)[A-Za-z]?)?號")
ENGLISH_HOUSE_PATTERN = re.compile(r"(?:^|[\s,])(\d+)[A-Z]?(?:-(\d+)[A-Z]?)?\s+[A-Z]")
WORD_PATTERN = re.compile(r"[A-Z0-9']+")


@dataclass
class NormalizedAddress:
    text: str
    tokens: list[str]
    is_chinese: bool
    house_number: Optional[tuple[int, int]] = None


def is_chinese(text: str) -> bool:
    return bool(CJK_PATTERN.search(text))


class AddressNormalizer:
    def __init__(self) -> None:
        jieba.initialize()

    def normalize(self, text: str) -> NormalizedAddress:
        chinese = is_chinese(text)
        cleaned = self._basic_clean(text)
        if chinese:
            cleaned = CHINESE_FLOOR_PATTERN.sub("", cleaned)
            cleaned = re.sub(r"\s+", "", cleaned)
            tokens = [token for token in jieba.cut(cleaned) if token.strip()]
        else:
            cleaned = ENGLISH_FLOOR_PATTERN.sub(" ", cleaned.upper())
            cleaned = " ".join(cleaned.replace(",", " ").split())
            tokens = WORD_PATTERN.findall(cleaned)
        house = self._extract_house(cleaned, chinese)
        return NormalizedAddress(text=cleaned, tokens=tokens, is_chinese=chinese, house_number=house)

    def _basic_clean(self, text: str) -> str:
        result = unicodedata.normalize("NFKC", text).strip()
        for old, new in COMMON_REPLACEMENTS.items():
            result = result.replace(old, new)
        result = re.sub(r"[()（）【】\[\]]", " ", result)
        return result

    def _extract_house(self, text: str, chinese: bool) -> Optional[tuple[int, int]]:
        """Street number as an inclusive (low, high) range, e.g. "1-3號" -> (1, 3)."""
        pattern = CHINESE_HOUSE_PATTERN if chinese else ENGLISH_HOUSE_PATTERN
        match = pattern.search(text)
        if not match:
            return None
        low = int(match.group(1))
        high = int(match.group(2)) if match.group(2) else low
        return (low, high) if low <= high else (high, low)
