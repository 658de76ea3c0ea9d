"""Tests for the link service."""

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy.exc import SQLAlchemyError

from tinylink.core.config import settings
from tinylink.services.exceptions import (
    CodeAlreadyExistsError,
    InvalidCodeError,
    InvalidURLError,
    LinkNotFoundError,
    LinkServiceError,
)
from tinylink.services.links import LinkService
from tinylink.services.validation import is_valid_code
from tests.utils import create_test_link, random_url, reload_link


@pytest.fixture
def link_service(link_repository):
    """Return a link service instance."""
    return LinkService(link_repository=link_repository)


@pytest.mark.service
class TestCreateLink:
    """Link creation."""

    @pytest.mark.asyncio
    async def test_create_with_explicit_code(self, test_db, link_service):
        """An explicit code is stored as given."""
        target_url = random_url()

        link = await link_service.create_link(test_db, target_url, "MyCode1")

        assert link.code == "MyCode1"
        assert link.target_url == target_url
        assert link.clicks == 0
        assert link.last_clicked is None

        stored = await reload_link(test_db, "MyCode1")
        assert stored is not None

    @pytest.mark.asyncio
    async def test_create_strips_code_whitespace(self, test_db, link_service):
        """Surrounding whitespace around a code is ignored."""
        link = await link_service.create_link(test_db, random_url(), "  padded1 ")

        assert link.code == "padded1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [None, "", "   "])
    async def test_create_generates_code(self, test_db, link_service, code):
        """Without a code a random one of the configured length is generated."""
        link = await link_service.create_link(test_db, random_url(), code)

        assert len(link.code) == settings.CODE_LENGTH
        assert is_valid_code(link.code)
        assert await reload_link(test_db, link.code) is not None

    @pytest.mark.asyncio
    async def test_target_url_is_stored_verbatim(self, test_db, link_service):
        """The URL is not normalized on the way in."""
        target_url = "https://Example.com/Path?b=2&a=1#frag"

        link = await link_service.create_link(test_db, target_url, "verbat1")

        assert link.target_url == target_url

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target_url,message", [
        (None, "target_url is required"),
        ("", "target_url is required"),
        ("not a url", "target_url is not a valid URL"),
        ("ftp://example.com/file", "target_url must be http or https"),
    ])
    async def test_invalid_target_url(self, test_db, link_service, link_repository, target_url, message):
        """Bad URLs are rejected before anything is stored."""
        with pytest.raises(InvalidURLError) as excinfo:
            await link_service.create_link(test_db, target_url, "badurl1")

        assert str(excinfo.value) == message
        assert await link_repository.count(test_db) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["abc12", "abcdefghi", "abc-12", "abc 123", "abc12é"])
    async def test_invalid_code(self, test_db, link_service, link_repository, code):
        """Codes must be 6-8 ASCII letters or digits."""
        with pytest.raises(InvalidCodeError):
            await link_service.create_link(test_db, random_url(), code)

        assert await link_repository.count(test_db) == 0

    @pytest.mark.asyncio
    async def test_duplicate_code(self, test_db, link_service):
        """An existing code is a conflict and the original link is untouched."""
        original = await create_test_link(test_db, code="taken01")

        with pytest.raises(CodeAlreadyExistsError) as excinfo:
            await link_service.create_link(test_db, random_url(), "taken01")

        assert str(excinfo.value) == "code already exists"
        stored = await reload_link(test_db, "taken01")
        assert stored.target_url == original.target_url

    @pytest.mark.asyncio
    async def test_generation_retries_on_collision(self, test_db, link_service):
        """A generated code that is taken is replaced by a fresh one."""
        await create_test_link(test_db, code="AAAAAA")

        with patch.object(link_service, "_random_code", side_effect=["AAAAAA", "BBBBBB"]):
            link = await link_service.create_link(test_db, random_url())

        assert link.code == "BBBBBB"

    @pytest.mark.asyncio
    async def test_generation_gives_up_after_max_attempts(self, test_db, link_service):
        """Exhausted retries end in a conflict from the unique constraint."""
        await create_test_link(test_db, code="AAAAAA")

        with patch.object(link_service, "_random_code", return_value="AAAAAA") as random_code:
            with pytest.raises(CodeAlreadyExistsError):
                await link_service.create_link(test_db, random_url())

        assert random_code.call_count == settings.CODE_MAX_ATTEMPTS

    @pytest.mark.asyncio
    async def test_storage_failure(self, test_db, link_service, link_repository):
        """Storage errors become an opaque LinkServiceError."""
        with patch.object(test_db, "execute", side_effect=SQLAlchemyError("connection lost")):
            with pytest.raises(LinkServiceError) as excinfo:
                await link_service.create_link(test_db, random_url())

        assert str(excinfo.value) == "internal error"

    def test_random_code_alphabet(self, link_service):
        """Generated codes only use the configured characters."""
        for _ in range(50):
            code = link_service._random_code()
            assert len(code) == settings.CODE_LENGTH
            assert set(code) <= set(settings.CODE_CHARS)

        assert len(link_service._random_code(8)) == 8


@pytest.mark.service
class TestReadAndDelete:
    """Listing, inspecting and deleting links."""

    @pytest.mark.asyncio
    async def test_list_links(self, test_db, link_service):
        """All links are listed; q filters them."""
        await create_test_link(test_db, code="alpha01", target_url="https://alpha.example.com/")
        await create_test_link(test_db, code="beta001", target_url="https://beta.example.com/")

        all_links = await link_service.list_links(test_db)
        assert sorted(link.code for link in all_links) == ["alpha01", "beta001"]

        filtered = await link_service.list_links(test_db, "ALPHA")
        assert [link.code for link in filtered] == ["alpha01"]

        # An empty query means no filter
        assert len(await link_service.list_links(test_db, "")) == 2

    @pytest.mark.asyncio
    async def test_list_links_storage_failure(self, test_db, link_service):
        """Listing failures are opaque."""
        with patch.object(test_db, "execute", side_effect=SQLAlchemyError("boom")):
            with pytest.raises(LinkServiceError):
                await link_service.list_links(test_db)

    @pytest.mark.asyncio
    async def test_get_link(self, test_db, link_service):
        """A link is returned with its counters."""
        test_link = await create_test_link(test_db, code="inspect", clicks=7)

        link = await link_service.get_link(test_db, "inspect")

        assert link.target_url == test_link.target_url
        assert link.clicks == 7

    @pytest.mark.asyncio
    async def test_get_link_not_found(self, test_db, link_service):
        """Unknown codes raise LinkNotFoundError."""
        with pytest.raises(LinkNotFoundError):
            await link_service.get_link(test_db, "missing1")

    @pytest.mark.asyncio
    async def test_get_link_invalid_code(self, test_db, link_service):
        """Malformed codes never reach storage."""
        with patch.object(test_db, "get", new=AsyncMock()) as get:
            with pytest.raises(InvalidCodeError):
                await link_service.get_link(test_db, "no")

        get.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_link(self, test_db, link_service):
        """Deleting removes the link; a second delete is not found."""
        await create_test_link(test_db, code="gone001")

        await link_service.delete_link(test_db, "gone001")

        assert await reload_link(test_db, "gone001") is None
        with pytest.raises(LinkNotFoundError):
            await link_service.delete_link(test_db, "gone001")

    @pytest.mark.asyncio
    async def test_delete_invalid_code(self, test_db, link_service):
        """Deleting a malformed code is a validation error."""
        with pytest.raises(InvalidCodeError):
            await link_service.delete_link(test_db, "bad!code")

    @pytest.mark.asyncio
    async def test_deleted_code_can_be_reused(self, test_db, link_service):
        """A deleted code is free again."""
        await create_test_link(test_db, code="reuse01")
        await link_service.delete_link(test_db, "reuse01")

        link = await link_service.create_link(test_db, "https://example.com/new", "reuse01")

        assert link.target_url == "https://example.com/new"
        assert link.clicks == 0
