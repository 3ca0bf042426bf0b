"""Tests for the SQLite report/warning/keyword store."""

import pytest

from fountainscan.storage.database import Database


async def _open(tmp_path) -> Database:
    db = Database(tmp_path / "test.db")
    await db.connect()
    return db


@pytest.mark.asyncio
async def test_reports_newest_first(tmp_path):
    db = await _open(tmp_path)
    try:
        first = await db.add_report("https://a.example/", "fake scholarship")
        second = await db.add_report("https://b.example/", "asked for BVN", "user@example.com")
        assert second > first

        reports = await db.get_reports()
        assert [r["reported_url"] for r in reports] == ["https://b.example/", "https://a.example/"]
        assert reports[0]["user_email"] == "user@example.com"
        assert reports[1]["user_email"] is None

        assert len(await db.get_reports(limit=1)) == 1
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_warning_keywords_round_trip(tmp_path):
    db = await _open(tmp_path)
    try:
        await db.add_warning(
            site_url="http://scam.example/",
            detection_score=85,
            keywords=["easy-cash", "bvn"],
            severity="danger",
            user_email="user@example.com",
            source="extension",
        )
        await db.add_warning(message="Popup blocked")

        everything = await db.get_warnings()
        assert len(everything) == 2
        assert everything[1]["keywords"] == ["easy-cash", "bvn"]
        assert everything[0]["keywords"] == []

        mine = await db.get_warnings(user_email="user@example.com")
        assert len(mine) == 1
        assert mine[0]["detection_score"] == 85
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_keywords_are_unique(tmp_path):
    db = await _open(tmp_path)
    try:
        keyword_id = await db.add_keyword("  Easy-Cash ", "high")
        assert keyword_id is not None
        assert await db.add_keyword("easy-cash") is None

        keywords = await db.get_keywords()
        assert [k["keyword"] for k in keywords] == ["easy-cash"]
        assert keywords[0]["severity"] == "high"

        assert await db.delete_keyword(keyword_id)
        assert not await db.delete_keyword(keyword_id)
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_empty_keyword_rejected(tmp_path):
    db = await _open(tmp_path)
    try:
        with pytest.raises(ValueError):
            await db.add_keyword("   ")
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_counts(tmp_path):
    db = await _open(tmp_path)
    try:
        await db.add_report("https://a.example/", "spam")
        await db.add_keyword("npower")
        assert await db.get_counts() == {
            "user_reports": 1,
            "warning_logs": 0,
            "detection_keywords": 1,
        }
    finally:
        await db.close()
