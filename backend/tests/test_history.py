import pytest

USER = "user_1"


def _analysis(image_url="/api/images/user_1/a.jpg", score=7, harmony="triadic"):
    return {
        "image_url": image_url,
        "dominant_colors": [{"r": 224, "g": 0, "b": 0, "percentage": 75},
                            {"r": 0, "g": 224, "b": 0, "percentage": 25}],
        "color_harmony": harmony,
        "contrast": "low",
        "suggestions": "Add a pop of contrasting color with accessories to create more visual interest.",
        "score": score,
    }


class TestAnalysisHistory:
    """JSON-file record store for analyses."""

    @pytest.mark.unit
    async def test_save_builds_record(self, history_handler):
        result = await history_handler.save_analysis(USER, _analysis())
        assert result["success"] is True

        record = result["analysis"]
        assert record["id"] == result["history_id"]
        assert record["user_id"] == USER
        assert record["overall_score"] == 7
        assert record["is_favorite"] is False
        assert record["style_analysis"] == {
            "color_harmony": "triadic",
            "contrast": "low",
            "versatility": "medium",
            "seasonality": "all-season",
        }

    @pytest.mark.unit
    async def test_list_is_newest_first(self, history_handler):
        ids = []
        for i in range(3):
            ids.append((await history_handler.save_analysis(USER, _analysis(image_url=f"/img/{i}")))["history_id"])

        result = await history_handler.get_analyses(USER)
        assert [a["id"] for a in result["analyses"]] == list(reversed(ids))
        assert result["total"] == 3
        assert result["has_more"] is False

    @pytest.mark.unit
    async def test_pagination(self, history_handler):
        for i in range(4):
            await history_handler.save_analysis(USER, _analysis(image_url=f"/img/{i}"))

        page = await history_handler.get_analyses(USER, limit=3, offset=0)
        assert len(page["analyses"]) == 3
        assert page["has_more"] is True

        rest = await history_handler.get_analyses(USER, limit=3, offset=3)
        assert [a["image_url"] for a in rest["analyses"]] == ["/img/0"]

    @pytest.mark.unit
    async def test_keeps_most_recent_records(self, history_handler):
        # fixture caps history at 5 records
        for i in range(7):
            await history_handler.save_analysis(USER, _analysis(image_url=f"/img/{i}"))

        result = await history_handler.get_analyses(USER)
        assert result["total"] == 5
        assert result["analyses"][-1]["image_url"] == "/img/2"

    @pytest.mark.unit
    async def test_users_are_isolated(self, history_handler):
        await history_handler.save_analysis(USER, _analysis())
        result = await history_handler.get_analyses("someone_else")
        assert result["analyses"] == []
        assert result["total"] == 0

    @pytest.mark.unit
    async def test_toggle_and_filter_favorites(self, history_handler):
        first = (await history_handler.save_analysis(USER, _analysis(image_url="/img/0")))["history_id"]
        await history_handler.save_analysis(USER, _analysis(image_url="/img/1"))

        toggled = await history_handler.toggle_favorite(USER, first)
        assert toggled == {"success": True, "is_favorite": True, "message": "Added to favorites"}

        favorites = await history_handler.get_analyses(USER, favorites_only=True)
        assert [a["id"] for a in favorites["analyses"]] == [first]
        assert (await history_handler.get_favorite_analyses(USER))["total"] == 1

        toggled = await history_handler.toggle_favorite(USER, first)
        assert toggled["is_favorite"] is False
        assert (await history_handler.get_analyses(USER, favorites_only=True))["total"] == 0

    @pytest.mark.unit
    async def test_set_favorite_is_idempotent(self, history_handler):
        history_id = (await history_handler.save_analysis(USER, _analysis()))["history_id"]
        await history_handler.set_favorite(USER, history_id, True)
        result = await history_handler.set_favorite(USER, history_id, True)
        assert result["is_favorite"] is True
        assert (await history_handler.get_analysis(USER, history_id))["is_favorite"] is True

    @pytest.mark.unit
    async def test_missing_record(self, history_handler):
        assert (await history_handler.toggle_favorite(USER, "nope"))["success"] is False
        await history_handler.save_analysis(USER, _analysis())
        assert (await history_handler.toggle_favorite(USER, "nope"))["success"] is False
        assert (await history_handler.delete_analysis(USER, "nope"))["success"] is False
        assert await history_handler.get_analysis(USER, "nope") is None

    @pytest.mark.unit
    async def test_delete(self, history_handler):
        history_id = (await history_handler.save_analysis(USER, _analysis(image_url="/img/x")))["history_id"]
        result = await history_handler.delete_analysis(USER, history_id)
        assert result["success"] is True
        assert result["image_url"] == "/img/x"
        assert (await history_handler.get_analyses(USER))["total"] == 0

    @pytest.mark.unit
    async def test_find_latest_by_image_url(self, history_handler):
        await history_handler.save_analysis(USER, _analysis(image_url="/img/same", score=5))
        latest = (await history_handler.save_analysis(USER, _analysis(image_url="/img/same", score=9)))["history_id"]

        record = await history_handler.find_latest_by_image_url(USER, "/img/same")
        assert record["id"] == latest
        assert await history_handler.find_latest_by_image_url(USER, "/img/other") is None

    @pytest.mark.unit
    async def test_stats(self, history_handler):
        first = (await history_handler.save_analysis(USER, _analysis(score=6)))["history_id"]
        await history_handler.save_analysis(USER, _analysis(score=9, harmony="analogous"))
        await history_handler.toggle_favorite(USER, first)

        stats = await history_handler.get_history_stats(USER)
        assert stats == {
            "total_analyses": 2,
            "favorite_count": 1,
            "average_score": 7.5,
            "harmony_counts": {"triadic": 1, "analogous": 1}
        }

    @pytest.mark.unit
    async def test_records_survive_reload(self, history_handler):
        from api.history import AnalysisHistoryHandler

        await history_handler.save_analysis(USER, _analysis())
        reopened = AnalysisHistoryHandler(history_file=history_handler.history_file)
        assert (await reopened.get_analyses(USER))["total"] == 1
