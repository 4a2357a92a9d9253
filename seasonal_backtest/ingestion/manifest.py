"""
분할 데이터셋 매니페스트 모듈.

[ 역할 ]
    큰 가격 CSV를 여러 JSON 파트 파일로 나누고(write_manifest),
    다시 하나의 텍스트로 이어 붙인다(read_manifest_text).
    코어(parse_prices)는 항상 이어 붙인 텍스트 하나만 받는다.

[ 파일 구조 ]
    data_manifest.json   → {"parts": ["data_part1.json", "data_part2.json", ...]}
    data_partN.json      → {"csvData": "...", "partIndex": N-1, "totalParts": M}

    파트 경로는 매니페스트 파일 기준 상대 경로.

[ 호출하는 곳 ]
    - data/providers.py::ManifestProvider
    - scripts/split_dataset.py
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger("seasonal_backtest.ingestion")

MANIFEST_FILENAME = "data_manifest.json"
PART_PREFIX = "data_part"
DEFAULT_CHUNK_SIZE = 40 * 1024 * 1024  # 파트당 약 40MB (문자 수 기준)


class ManifestError(ValueError):
    """매니페스트 또는 파트 파일 형식 오류."""


def _load_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestError(f"JSON 파싱 실패: {path} ({e})") from e


def read_manifest_text(manifest_path: str | Path) -> str:
    """매니페스트에 나열된 파트의 csvData를 순서대로 이어 붙여 반환.

    Raises:
        FileNotFoundError: 매니페스트 또는 파트 파일 없음
        ManifestError: parts 목록이 없거나 파트에 csvData가 문자열이 아님
    """
    manifest_path = Path(manifest_path)
    manifest = _load_json(manifest_path)

    parts = manifest.get("parts") if isinstance(manifest, dict) else None
    if not isinstance(parts, list):
        raise ManifestError(f"parts 목록이 없습니다: {manifest_path}")

    chunks: list[str] = []
    for part_name in parts:
        part_path = manifest_path.parent / part_name
        part = _load_json(part_path)
        csv_data = part.get("csvData") if isinstance(part, dict) else None
        if not isinstance(csv_data, str):
            raise ManifestError(f"csvData가 없습니다: {part_path}")
        chunks.append(csv_data)

    text = "".join(chunks)
    logger.info(f"매니페스트 로드: {manifest_path} ({len(parts)}개 파트, {len(text):,}자)")
    return text


def split_into_parts(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """텍스트를 chunk_size 단위로 분할. 가능하면 줄바꿈 직후에서 자른다.

    이어 붙이면 원문과 정확히 같다.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size는 양수여야 합니다: {chunk_size}")

    parts: list[str] = []
    current = 0
    while current < len(text):
        end = min(current + chunk_size, len(text))
        if end < len(text):
            last_newline = text.rfind("\n", current, end + 1)
            if last_newline > current:
                end = last_newline + 1
        parts.append(text[current:end])
        current = end
    return parts


def write_manifest(
    text: str,
    out_dir: str | Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Path:
    """텍스트를 파트 파일 + 매니페스트로 저장하고 매니페스트 경로를 반환."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    parts = split_into_parts(text, chunk_size)
    part_names = [f"{PART_PREFIX}{i + 1}.json" for i in range(len(parts))]

    for index, (name, content) in enumerate(zip(part_names, parts)):
        payload = {"csvData": content, "partIndex": index, "totalParts": len(parts)}
        with open(out_dir / name, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False)
        logger.info(f"{name} 저장 ({len(content):,}자)")

    manifest_path = out_dir / MANIFEST_FILENAME
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump({"parts": part_names}, f)
    logger.info(f"{MANIFEST_FILENAME} 저장 ({len(parts)}개 파트)")
    return manifest_path
