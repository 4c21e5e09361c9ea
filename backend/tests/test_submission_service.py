"""
BaseDrop Backend — Submission Service Unit Tests
==================================================

What:  Tests for SubmissionService orchestration and field normalization.
How:   Real FileService/CategoryStore singletons pointed at tmp dirs via the
       `storage` fixture; failures injected with unittest.mock.
"""

import json

import pytest
from unittest.mock import AsyncMock, patch

from app.exceptions import ProcessingError, UploadError, ValidationError
from app.services.submission_service import (
    SubmissionService,
    normalize_base_type,
    parse_th,
)


class TestNormalizeBaseType:
    """Tests for base_type shape handling."""

    def test_omitted(self):
        assert normalize_base_type(None) == []

    def test_empty_string(self):
        assert normalize_base_type("") == []

    def test_scalar(self):
        assert normalize_base_type("a") == ["a"]

    def test_list_unchanged(self):
        assert normalize_base_type(["a", "b"]) == ["a", "b"]

    def test_blank_entries_dropped(self):
        assert normalize_base_type(["a", "", "b"]) == ["a", "b"]

    def test_tuple(self):
        assert normalize_base_type(("b", "a")) == ["b", "a"]

    def test_non_string_items_rejected(self):
        with pytest.raises(ValidationError, match="base_type"):
            normalize_base_type(["a", 3])

    def test_unrecognized_shape_rejected(self):
        with pytest.raises(ValidationError, match="base_type"):
            normalize_base_type({"a": 1})


class TestParseTh:

    def test_integer_string(self):
        assert parse_th("12") == 12

    def test_surrounding_whitespace(self):
        assert parse_th(" 7 ") == 7

    def test_upper_bound_accepted(self):
        assert parse_th("999") == 999

    @pytest.mark.parametrize("value", ["abc", "3.5", "0", "-2", "../12", "1000", "1" * 300])
    def test_invalid_values_rejected(self, value):
        with pytest.raises(ValidationError, match="TH must be a positive integer"):
            parse_th(value)


class TestSubmissionServiceSubmit:
    """Tests for the submit workflow."""

    def setup_method(self):
        self.service = SubmissionService()

    @pytest.mark.asyncio
    async def test_submit_success(self, storage, make_upload):
        record = await self.service.submit(
            link="https://example.com/layout",
            th="12",
            image=make_upload(),
            base_type="war",
            author_name="Chief",
            author_tag="#2PP",
        )

        assert record.id == 1
        assert record.th == 12
        assert record.base_type == ["war"]
        assert record.author.name == "Chief"
        assert record.author.tag == "#2PP"
        assert (storage.image_dir / record.image).exists()
        stored = json.loads((storage.base_dir / "baseth12.json").read_text(encoding="utf-8"))
        assert stored == [record.model_dump()]

    @pytest.mark.asyncio
    async def test_author_defaults(self, storage, make_upload):
        record = await self.service.submit(
            link="https://example.com/layout", th="12", image=make_upload(),
        )

        assert record.author.name == "Unknown"
        assert record.author.tag == ""
        assert record.base_type == []

    @pytest.mark.asyncio
    async def test_whitespace_author_name_defaults_to_unknown(self, storage, make_upload):
        record = await self.service.submit(
            link="https://example.com/layout", th="12", image=make_upload(), author_name="   ",
        )

        assert record.author.name == "Unknown"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "link, th, with_image",
        [
            (None, "12", True),
            ("   ", "12", True),
            ("https://example.com", None, True),
            ("https://example.com", "", True),
            ("https://example.com", "12", False),
        ],
    )
    async def test_missing_required_fields(self, storage, make_upload, link, th, with_image):
        image = make_upload() if with_image else None

        with pytest.raises(ValidationError, match="Link, TH, and Image are required"):
            await self.service.submit(link=link, th=th, image=image)

        assert not storage.image_dir.exists() or list(storage.image_dir.iterdir()) == []
        assert not storage.base_dir.exists()

    @pytest.mark.asyncio
    async def test_image_without_filename_counts_as_missing(self, storage, make_upload):
        with pytest.raises(ValidationError, match="required"):
            await self.service.submit(
                link="https://example.com", th="12", image=make_upload(filename=""),
            )

    @pytest.mark.asyncio
    async def test_rejected_image_leaves_no_trace(self, storage, make_upload):
        with pytest.raises(UploadError):
            await self.service.submit(
                link="https://example.com",
                th="12",
                image=make_upload(filename="notes.txt", content=b"hi", content_type="text/plain"),
            )

        assert not storage.image_dir.exists() or list(storage.image_dir.iterdir()) == []
        assert not (storage.base_dir / "baseth12.json").exists()

    @pytest.mark.asyncio
    async def test_append_failure_cleans_up_image(self, storage, make_upload):
        with patch(
            "app.services.submission_service.category_store.append",
            new=AsyncMock(side_effect=RuntimeError("disk on fire")),
        ):
            with pytest.raises(ProcessingError) as exc_info:
                await self.service.submit(
                    link="https://example.com", th="12", image=make_upload(),
                )

        assert exc_info.value.error == "disk on fire"
        assert exc_info.value.message == "A server error occurred"
        assert list(storage.image_dir.iterdir()) == []
