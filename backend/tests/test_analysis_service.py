import pytest

from services.analysis_service import OutfitAnalysisService


@pytest.fixture
def analysis_service(image_service, blob_store, history_handler) -> OutfitAnalysisService:
    return OutfitAnalysisService(image_service, blob_store, history_handler)


def _stored_files(blob_store):
    return [p for p in blob_store.root_dir.rglob("*") if p.is_file()]


class TestOutfitAnalysisService:
    """Analysis orchestration: decode, store image, save record."""

    @pytest.mark.unit
    async def test_analyze_and_save(self, analysis_service, blob_store, make_png):
        result = await analysis_service.analyze_and_save("user_1", make_png((0, 0, 255)), filename="look.png")

        assert result["analysis"]["dominant_colors"][0]["name"] == "Blue"
        assert result["record"]["image_url"] == result["analysis"]["image_url"]
        assert len(_stored_files(blob_store)) == 1

    @pytest.mark.unit
    async def test_undecodable_image_stores_nothing(self, analysis_service, blob_store):
        with pytest.raises(ValueError):
            await analysis_service.analyze_and_save("user_1", b"not an image", filename="look.png")
        assert _stored_files(blob_store) == []

    @pytest.mark.unit
    async def test_failed_history_write_removes_image(self, analysis_service, blob_store,
                                                      history_handler, make_png, monkeypatch):
        async def broken_save(user_id, analysis_data):
            raise OSError("disk full")

        monkeypatch.setattr(history_handler, "save_analysis", broken_save)

        with pytest.raises(OSError):
            await analysis_service.analyze_and_save("user_1", make_png((255, 0, 0)), filename="look.png")
        assert _stored_files(blob_store) == []
