"""
CSV 텍스트 필드 파싱 유틸리티.

[ 역할 ]
    가격 CSV / 메타데이터 CSV 공통으로 쓰는 저수준 파서.
    - split_csv_line(): 큰따옴표 안의 쉼표는 구분자로 보지 않음 (예: "1,000.00")
    - parse_number():   따옴표/쉼표 제거 후 float 변환, 빈 값은 0
    - parse_date():     "YYYY/M/D" 또는 "YYYY-M-D" (뒤의 시간 부분은 무시)

[ 호출하는 곳 ]
    - ingestion/price_csv.py
    - ingestion/metadata_csv.py
"""

import math
import re
from datetime import date

DATE_LIKE_PATTERN = re.compile(r"^\d{4}[/\-]\d{1,2}[/\-]\d{1,2}")
_DATE_SEPARATORS = re.compile(r"[/\-]")
_NUMBER_NOISE = re.compile(r"[\"',]")


def split_csv_line(line: str) -> list[str]:
    """한 줄을 필드 목록으로 분리. 각 필드는 앞뒤 공백 제거, 따옴표 문자는 버림."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def parse_number(text: str | None) -> float:
    """숫자 필드 파싱.

    Raises:
        ValueError: 숫자가 아니거나 유한하지 않은 값 (nan, inf)
    """
    if not text:
        return 0.0
    cleaned = _NUMBER_NOISE.sub("", text).strip()
    if not cleaned:
        return 0.0
    value = float(cleaned)
    if not math.isfinite(value):
        raise ValueError(f"유한하지 않은 숫자: {text!r}")
    return value


def strip_time(text: str) -> str:
    """'2024/01/05 13:30:00', '2024-01-05T00:00:00' → 날짜 부분만."""
    text = text.strip()
    for sep in (" ", "T"):
        text = text.split(sep, 1)[0]
    return text


def parse_date(text: str) -> date:
    """Y/M/D 또는 Y-M-D 문자열을 date로 변환.

    Raises:
        ValueError: 세 부분으로 나뉘지 않거나 존재하지 않는 날짜 (예: 2024/02/30)
    """
    parts = _DATE_SEPARATORS.split(strip_time(text))
    if len(parts) != 3:
        raise ValueError(f"날짜 형식 아님: {text!r}")
    year, month, day = (int(p) for p in parts)
    return date(year, month, day)


def looks_like_date(text: str) -> bool:
    return bool(DATE_LIKE_PATTERN.match(text.strip()))
