#!/usr/bin/env python3
"""
Outfit Analysis Service
Runs the color pipeline on uploaded photos and keeps the results in the
user's history.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi.concurrency import run_in_threadpool

from api.history import AnalysisHistoryHandler
from models.pipeline import OutfitAnalysis, run_pipeline
from services.blob_store import LocalBlobStore
from services.image_service import ImageService


class OutfitAnalysisService:
    """Decode -> analyze -> store image -> save record."""

    def __init__(self, image_service: ImageService,
                 blob_store: LocalBlobStore,
                 history_handler: AnalysisHistoryHandler):
        self.logger = logging.getLogger(__name__)
        self.image_service = image_service
        self.blob_store = blob_store
        self.history_handler = history_handler

        self.logger.info("Outfit analysis service initialized")

    def analyze_bytes(self, data: bytes) -> OutfitAnalysis:
        """
        Decode image bytes and run the color pipeline.

        Raises:
            ValueError: if the bytes are not a readable image
        """
        pixels = self.image_service.decode_bytes(data)
        analysis = run_pipeline(pixels)
        self.logger.debug(
            "Analyzed %dx%d image: %d colors, %s harmony, %s contrast",
            pixels.width, pixels.height, len(analysis.colors),
            analysis.harmony.value, analysis.contrast.value,
        )
        return analysis

    async def analyze_and_save(self, user_id: str, data: bytes,
                               filename: Optional[str] = None,
                               content_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Analyze an image and persist both the image and the analysis.

        The image is only stored once it decoded successfully, and is removed
        again if the history record cannot be written.

        Returns:
            analysis (pipeline output) and record (saved history entry)
        """
        analysis = await run_in_threadpool(self.analyze_bytes, data)
        image_url = self.blob_store.save(data, filename=filename, content_type=content_type, owner=user_id)

        result = analysis.to_dict()
        record_data = {
            "image_url": image_url,
            "dominant_colors": [c.to_dict() for c in analysis.colors],
            "color_harmony": result["color_harmony"],
            "contrast": result["contrast"],
            "suggestions": result["suggestions"],
            "score": result["score"],
        }
        try:
            saved = await self.history_handler.save_analysis(user_id, record_data)
        except Exception:
            self.logger.exception("Failed to save analysis for %s, removing %s", user_id, image_url)
            self.blob_store.delete(image_url)
            raise

        self.logger.info("Saved analysis %s for %s (score %d)", saved["history_id"], user_id, analysis.score)

        return {
            "analysis": {**result, "image_url": image_url, "analyzed_at": datetime.now().isoformat()},
            "record": saved["analysis"]
        }

    async def delete_analysis(self, user_id: str, history_id: str) -> Dict[str, Any]:
        """Delete a record and the image it points to."""
        result = await self.history_handler.delete_analysis(user_id, history_id)
        if result.get("success") and result.get("image_url"):
            result["image_deleted"] = self.blob_store.delete(result["image_url"])
        return result
