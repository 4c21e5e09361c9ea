"""
BaseDrop Backend — Category File Store
========================================

What:  Reads and appends submission records in the per-TH category files.
How:   Each category is one JSON array at <base_dir>/baseth<th>.json. An
       append is a full read-modify-write: load the array, compute the next
       id, append, and rewrite the whole file with 4-space indentation.
Why:   The category files are the published data; readers fetch them whole.
Who:   Called by SubmissionService; sole writer of the category files.
When:  After the image is stored, once per accepted submission.

Write Safety:
    Appends to the same TH are serialized with one asyncio.Lock per TH, and
    the rewrite goes through a temporary file that replaces the category
    file in one os.replace call. Within a single process no append can be
    lost and readers never see a half-written array.

    TH levels are capped at MAX_TH_LEVEL before they reach this module, so
    the lock map holds at most one entry per valid level.

    The locks live in this process only. Running several uvicorn workers
    against the same base_dir brings the lost-update race back.

Corrupt Files:
    A category file that is not valid JSON (or not a JSON array) is logged
    and treated as empty. The next append then overwrites it, so the old
    content is gone for good.
"""

import asyncio
import json
import logging
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os

from app.config import settings
from app.schemas.submission import Author, SubmissionRecord

logger = logging.getLogger(__name__)


class CategoryStore:
    """
    Storage interface over the category files.

        load(th)           -> list of SubmissionRecord
        append(th, ...)    -> the SubmissionRecord as stored
    """

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.base_dir).resolve()
        self._locks: Dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def path_for(self, th: int) -> Path:
        """Category file for a TH level: <base_dir>/baseth<th>.json."""
        return self.base_dir / f"baseth{th}.json"

    async def _read_entries(self, path: Path) -> List[Any]:
        """
        Raw array stored in a category file.

        Missing file → []. Unparseable content or a non-array → logged, [].
        """
        if not path.exists():
            return []

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Could not parse %s, starting a new array: %s", path.name, e)
            return []

        if not isinstance(data, list):
            logger.error(
                "%s holds a JSON %s instead of an array, starting a new array",
                path.name,
                type(data).__name__,
            )
            return []

        return data

    async def _write_entries(self, path: Path, entries: List[Any]) -> None:
        """Rewrite the whole category file atomically."""
        payload = json.dumps(entries, indent=4, ensure_ascii=False)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")

        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, path)
        except BaseException:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

    @staticmethod
    def next_id(entries: List[Any]) -> int:
        """Largest integer id in the array plus one; 1 if there is none."""
        ids = [
            entry["id"]
            for entry in entries
            if isinstance(entry, dict)
            and isinstance(entry.get("id"), int)
            and not isinstance(entry.get("id"), bool)
        ]
        return max(ids) + 1 if ids else 1

    async def load(self, th: int) -> List[SubmissionRecord]:
        """All records of a category, in append order."""
        entries = await self._read_entries(self.path_for(th))
        return [SubmissionRecord.model_validate(entry) for entry in entries]

    async def append(
        self,
        th: int,
        link: str,
        base_type: List[str],
        image: Optional[str],
        author: Author,
    ) -> SubmissionRecord:
        """
        Append a new record to the category file for `th`.

        Existing entries are written back exactly as read; only the new
        record goes through the SubmissionRecord model.

        Returns: The record as stored, including its assigned id.
        """
        path = self.path_for(th)

        async with self._locks[th]:
            self.base_dir.mkdir(parents=True, exist_ok=True)

            entries = await self._read_entries(path)
            record = SubmissionRecord(
                id=self.next_id(entries),
                link=link,
                th=th,
                base_type=base_type,
                image=image,
                author=author,
            )
            entries.append(record.model_dump())

            await self._write_entries(path, entries)

        logger.info("Appended record %d to %s (%d total)", record.id, path.name, len(entries))
        return record


# ── Singleton Instance ────────────────────────────────────────────────────
category_store = CategoryStore()
