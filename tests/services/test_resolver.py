"""Tests for redirect resolution and click counting."""

import asyncio

import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from tinylink.db.base import make_session_factory
from tinylink.repositories.base import RepositoryError
from tinylink.services.exceptions import RedirectError
from tinylink.services.resolver import RedirectResolver, RedirectResult
from tests.utils import as_utc, create_test_link, reload_link


@pytest.fixture
def resolver(link_repository):
    """Return a redirect resolver instance."""
    return RedirectResolver(link_repository=link_repository)


def test_redirect_result():
    """A result is found exactly when it carries a target URL."""
    assert RedirectResult("https://example.com").found is True
    assert RedirectResult.not_found().found is False
    assert RedirectResult.not_found().target_url is None


@pytest.mark.service
class TestRedirectResolver:
    """Single-session behaviour."""

    @pytest.mark.asyncio
    async def test_resolve_counts_click(self, test_db, resolver):
        """A hit returns the target URL and records exactly one click."""
        test_link = await create_test_link(test_db, code="hit0001")

        result = await resolver.resolve(test_db, "hit0001")

        assert result.found
        assert result.target_url == test_link.target_url

        link = await reload_link(test_db, "hit0001")
        assert link.clicks == 1
        assert link.last_clicked is not None
        assert as_utc(link.last_clicked) >= as_utc(test_link.created_at)

    @pytest.mark.asyncio
    async def test_sequential_resolves(self, test_db, resolver):
        """Each resolution adds one click and moves last_clicked forward."""
        await create_test_link(test_db, code="seq0001", clicks=10)

        await resolver.resolve(test_db, "seq0001")
        first = (await reload_link(test_db, "seq0001")).last_clicked
        await test_db.commit()

        await resolver.resolve(test_db, "seq0001")
        await resolver.resolve(test_db, "seq0001")
        link = await reload_link(test_db, "seq0001")

        assert link.clicks == 13
        assert as_utc(link.last_clicked) >= as_utc(first)

    @pytest.mark.asyncio
    async def test_resolve_unknown_code(self, test_db, resolver, link_repository):
        """A miss is a normal outcome and writes nothing."""
        await create_test_link(test_db, code="other01", clicks=2)

        result = await resolver.resolve(test_db, "unknown1")

        assert result.found is False
        assert result.target_url is None
        assert await link_repository.count(test_db) == 1
        assert (await reload_link(test_db, "other01")).clicks == 2

    @pytest.mark.asyncio
    async def test_resolve_is_case_sensitive(self, test_db, resolver):
        """Lookups never fold case."""
        await create_test_link(test_db, code="MixCase")

        assert (await resolver.resolve(test_db, "mixcase")).found is False
        assert (await resolver.resolve(test_db, "MixCase")).found is True

    @pytest.mark.asyncio
    async def test_failed_update_rolls_back(self, test_db, resolver, link_repository):
        """If the counter update fails, no click is recorded."""
        await create_test_link(test_db, code="fail001", clicks=5)

        with patch.object(
            link_repository, "record_click", side_effect=RepositoryError("disk full")
        ):
            with pytest.raises(RedirectError) as excinfo:
                await resolver.resolve(test_db, "fail001")

        assert str(excinfo.value) == "internal error"
        link = await reload_link(test_db, "fail001")
        assert link.clicks == 5
        assert link.last_clicked is None

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back(self, test_db, resolver):
        """A failed commit surfaces as RedirectError and discards the click."""
        await create_test_link(test_db, code="fail002")

        with patch.object(
            test_db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("lost"))
        ):
            with pytest.raises(RedirectError):
                await resolver.resolve(test_db, "fail002")

        link = await reload_link(test_db, "fail002")
        assert link.clicks == 0

    @pytest.mark.asyncio
    async def test_failed_lookup(self, test_db, resolver, link_repository):
        """A storage failure on the locking read is a RedirectError."""
        with patch.object(
            link_repository,
            "get_by_code_for_update",
            side_effect=RepositoryError("connection refused"),
        ):
            with pytest.raises(RedirectError):
                await resolver.resolve(test_db, "any0001")


@pytest.mark.service
class TestConcurrentResolves:
    """Many sessions resolving at the same time."""

    @pytest.mark.asyncio
    async def test_no_lost_clicks(self, file_engine, resolver):
        """N concurrent resolutions of one code record exactly N clicks."""
        session_factory = make_session_factory(file_engine)
        async with session_factory() as session:
            await create_test_link(session, code="busy001")

        async def resolve_once():
            async with session_factory() as session:
                return await resolver.resolve(session, "busy001")

        results = await asyncio.gather(*(resolve_once() for _ in range(25)))

        assert all(result.found for result in results)
        async with session_factory() as session:
            link = await reload_link(session, "busy001")
        assert link.clicks == 25
        assert link.last_clicked is not None

    @pytest.mark.asyncio
    async def test_independent_codes(self, file_engine, resolver):
        """Concurrent resolutions of different codes each count separately."""
        session_factory = make_session_factory(file_engine)
        async with session_factory() as session:
            await create_test_link(session, code="codeaa1")
            await create_test_link(session, code="codebb2")

        async def resolve_once(code):
            async with session_factory() as session:
                return await resolver.resolve(session, code)

        codes = ["codeaa1"] * 10 + ["codebb2"] * 6 + ["missing"] * 4
        results = await asyncio.gather(*(resolve_once(code) for code in codes))

        assert sum(result.found for result in results) == 16
        async with session_factory() as session:
            assert (await reload_link(session, "codeaa1")).clicks == 10
            assert (await reload_link(session, "codebb2")).clicks == 6
