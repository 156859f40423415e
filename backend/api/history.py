import json
import logging
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import config


class AnalysisHistoryHandler:
    """
    Outfit analysis history: saved analyses and favorites per user.

    Records live in one JSON document keyed by user id. Listings are always
    newest-first.
    """

    def __init__(self, history_file: Optional[Union[str, Path]] = None,
                 max_records: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        self.history_file = Path(history_file) if history_file else config.DATA_DIR / "outfit_analyses.json"
        self.max_records = max_records or config.HISTORY_MAX_RECORDS
        self._lock = threading.Lock()

        self.history_file.parent.mkdir(parents=True, exist_ok=True)
        self._init_data_file()

        self.logger.info("Analysis history handler initialized (%s)", self.history_file)

    def _init_data_file(self):
        if not self.history_file.exists():
            with open(self.history_file, 'w', encoding='utf-8') as f:
                json.dump({}, f, ensure_ascii=False, indent=2)

    def _load_history(self) -> dict:
        try:
            with open(self.history_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return {}

    def _save_history(self, history: dict):
        with open(self.history_file, 'w', encoding='utf-8') as f:
            json.dump(history, f, ensure_ascii=False, indent=2)

    @staticmethod
    def _newest_first(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # records are stored oldest-first; reversing keeps same-timestamp ties newest-first
        return sorted(reversed(records), key=lambda x: x.get("created_at", ""), reverse=True)

    @staticmethod
    def _find(records: List[Dict[str, Any]], history_id: str) -> Optional[Dict[str, Any]]:
        for record in records:
            if record["id"] == history_id:
                return record
        return None

    async def save_analysis(self, user_id: str, analysis_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert an analysis record.

        Args:
            user_id: owner
            analysis_data: image_url, dominant_colors, color_harmony, contrast,
                suggestions, score

        Returns:
            Result with the new history_id and the stored record
        """
        now = datetime.now().isoformat()
        record = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "image_url": analysis_data.get("image_url", ""),
            "dominant_colors": analysis_data.get("dominant_colors", []),
            "style_analysis": {
                "color_harmony": analysis_data.get("color_harmony", "monochromatic"),
                "contrast": analysis_data.get("contrast", "low"),
                "versatility": "medium",
                "seasonality": "all-season"
            },
            "suggestions": analysis_data.get("suggestions", ""),
            "overall_score": analysis_data.get("score", 0),
            "is_favorite": bool(analysis_data.get("is_favorite", False)),
            "created_at": now,
            "updated_at": now
        }

        with self._lock:
            history = self._load_history()
            if user_id not in history:
                history[user_id] = {
                    "analyses": [],
                    "created_at": now
                }

            analyses = history[user_id]["analyses"]
            analyses.append(record)

            # keep only the most recent records
            if len(analyses) > self.max_records:
                history[user_id]["analyses"] = analyses[-self.max_records:]

            self._save_history(history)

        return {
            "success": True,
            "message": "Analysis saved to history",
            "history_id": record["id"],
            "analysis": record
        }

    async def get_analyses(self, user_id: str, limit: Optional[int] = None, offset: int = 0,
                           favorites_only: bool = False) -> Dict[str, Any]:
        """
        List a user's analyses, newest first.

        Args:
            user_id: owner
            limit: page size (defaults to HISTORY_PAGE_SIZE)
            offset: records to skip
            favorites_only: only return favorites
        """
        limit = limit or config.HISTORY_PAGE_SIZE
        history = self._load_history()
        analyses = history.get(user_id, {}).get("analyses", [])

        if favorites_only:
            analyses = [a for a in analyses if a.get("is_favorite", False)]

        sorted_analyses = self._newest_first(analyses)

        end = offset + limit
        return {
            "analyses": sorted_analyses[offset:end],
            "total": len(sorted_analyses),
            "limit": limit,
            "offset": offset,
            "has_more": end < len(sorted_analyses)
        }

    async def get_favorite_analyses(self, user_id: str) -> Dict[str, Any]:
        history = self._load_history()
        analyses = history.get(user_id, {}).get("analyses", [])

        favorites = self._newest_first([a for a in analyses if a.get("is_favorite", False)])
        return {
            "favorites": favorites,
            "total": len(favorites)
        }

    async def get_analysis(self, user_id: str, history_id: str) -> Optional[Dict[str, Any]]:
        history = self._load_history()
        return self._find(history.get(user_id, {}).get("analyses", []), history_id)

    async def find_latest_by_image_url(self, user_id: str, image_url: str) -> Optional[Dict[str, Any]]:
        """Most recent record for an image URL, if any"""
        history = self._load_history()
        matches = [a for a in history.get(user_id, {}).get("analyses", []) if a.get("image_url") == image_url]
        if not matches:
            return None
        return self._newest_first(matches)[0]

    async def set_favorite(self, user_id: str, history_id: str, is_favorite: bool) -> Dict[str, Any]:
        return self._update_favorite(user_id, history_id, lambda current: is_favorite)

    async def toggle_favorite(self, user_id: str, history_id: str) -> Dict[str, Any]:
        return self._update_favorite(user_id, history_id, lambda current: not current)

    def _update_favorite(self, user_id: str, history_id: str, new_value) -> Dict[str, Any]:
        with self._lock:
            history = self._load_history()
            if user_id not in history:
                return {"success": False, "error": "No history for this user"}

            record = self._find(history[user_id]["analyses"], history_id)
            if not record:
                return {"success": False, "error": "Analysis record not found"}

            record["is_favorite"] = bool(new_value(record.get("is_favorite", False)))
            record["updated_at"] = datetime.now().isoformat()
            self._save_history(history)

        return {
            "success": True,
            "is_favorite": record["is_favorite"],
            "message": "Added to favorites" if record["is_favorite"] else "Removed from favorites"
        }

    async def delete_analysis(self, user_id: str, history_id: str) -> Dict[str, Any]:
        """
        Delete a record.

        Returns:
            Result including the deleted record's image_url so callers can
            clean up the stored image
        """
        with self._lock:
            history = self._load_history()
            if user_id not in history:
                return {"success": False, "error": "No history for this user"}

            analyses = history[user_id]["analyses"]
            record = self._find(analyses, history_id)
            if not record:
                return {"success": False, "error": "Analysis record not found"}

            analyses.remove(record)
            self._save_history(history)

        return {
            "success": True,
            "message": "Analysis deleted",
            "image_url": record.get("image_url")
        }

    async def get_history_stats(self, user_id: str) -> Dict[str, Any]:
        """Counts and average score for a user's history"""
        history = self._load_history()
        analyses = history.get(user_id, {}).get("analyses", [])

        scores = [a.get("overall_score", 0) for a in analyses]
        harmony_counts: Dict[str, int] = {}
        for a in analyses:
            harmony = a.get("style_analysis", {}).get("color_harmony", "unknown")
            harmony_counts[harmony] = harmony_counts.get(harmony, 0) + 1

        return {
            "total_analyses": len(analyses),
            "favorite_count": sum(1 for a in analyses if a.get("is_favorite", False)),
            "average_score": round(sum(scores) / len(scores), 1) if scores else 0,
            "harmony_counts": harmony_counts
        }
