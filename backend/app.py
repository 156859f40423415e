from fastapi import FastAPI, HTTPException, Depends, UploadFile, File, Request, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from typing import Optional, Union
from datetime import datetime
from pathlib import Path
import logging

import config
from api.auth import AuthHandler
from api.history import AnalysisHistoryHandler
from api.style_tips import StyleTipsHandler
from api.upload import UploadHandler
from services.analysis_service import OutfitAnalysisService
from services.blob_store import LocalBlobStore
from services.image_service import ImageService
from services.session_manager import AuthEvent, SessionManager

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

# Security
security = HTTPBearer()


# Pydantic models
class UserRegister(BaseModel):
    email: str
    password: str

class UserLogin(BaseModel):
    email: str
    password: str

class CaptureRequest(BaseModel):
    image_data: str  # data:image/...;base64,...

class SetFavoriteRequest(BaseModel):
    is_favorite: bool


# Dependencies
def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager

def get_analysis_service(request: Request) -> OutfitAnalysisService:
    return request.app.state.analysis_service

def get_history_handler(request: Request) -> AnalysisHistoryHandler:
    return request.app.state.history_handler

def get_upload_handler(request: Request) -> UploadHandler:
    return request.app.state.upload_handler

def get_style_tips_handler(request: Request) -> StyleTipsHandler:
    return request.app.state.style_tips_handler

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security),
                           sessions: SessionManager = Depends(get_session_manager)) -> dict:
    user = sessions.current_user(credentials.credentials)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user


def _log_auth_event(event: AuthEvent) -> None:
    if event.user:
        logger.info("Auth event %s for %s", event.type, event.user.get("id"))


def create_app(data_dir: Optional[Union[str, Path]] = None) -> FastAPI:
    """
    Build the API with its handlers.

    Args:
        data_dir: storage root, defaults to config.DATA_DIR
    """
    if data_dir:
        data_dir = Path(data_dir)
        upload_dir = data_dir / "uploads"
    else:
        data_dir, upload_dir = config.DATA_DIR, config.UPLOAD_DIR

    app = FastAPI(
        title=config.API_TITLE,
        description=config.API_DESCRIPTION,
        version=config.API_VERSION
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Initialize handlers
    image_service = ImageService()
    blob_store = LocalBlobStore(upload_dir, public_prefix=config.PUBLIC_IMAGE_PREFIX)
    auth_handler = AuthHandler(users_file=data_dir / "users.json")
    history_handler = AnalysisHistoryHandler(history_file=data_dir / "outfit_analyses.json")

    session_manager = SessionManager(auth_handler)
    session_manager.subscribe(_log_auth_event)

    app.state.session_manager = session_manager
    app.state.history_handler = history_handler
    app.state.upload_handler = UploadHandler(image_service)
    app.state.analysis_service = OutfitAnalysisService(image_service, blob_store, history_handler)
    app.state.style_tips_handler = StyleTipsHandler(knowledge_file=data_dir / "style_knowledge.json")

    # Static files serving for uploaded images
    app.mount(config.PUBLIC_IMAGE_PREFIX, StaticFiles(directory=str(upload_dir)), name="images")

    # Routes
    @app.get("/")
    async def root():
        return {"message": config.API_TITLE, "version": config.API_VERSION}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    # Auth endpoints
    @app.post("/api/auth/register")
    async def register(user: UserRegister, sessions: SessionManager = Depends(get_session_manager)):
        try:
            return await sessions.sign_up(user.email, user.password)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.post("/api/auth/login")
    async def login(user: UserLogin, sessions: SessionManager = Depends(get_session_manager)):
        try:
            return await sessions.sign_in(user.email, user.password)
        except ValueError as e:
            raise HTTPException(status_code=401, detail=str(e))

    @app.post("/api/auth/logout")
    async def logout(credentials: HTTPAuthorizationCredentials = Depends(security),
                     sessions: SessionManager = Depends(get_session_manager)):
        if not sessions.sign_out(credentials.credentials):
            raise HTTPException(status_code=401, detail="Invalid token")
        return {"success": True, "message": "Signed out"}

    @app.get("/api/user/profile")
    async def get_user_profile(user: dict = Depends(get_current_user)):
        return {"success": True, "data": user}

    # Analysis endpoints
    @app.post("/api/analyze")
    async def analyze_outfit(
        file: UploadFile = File(...),
        user: dict = Depends(get_current_user),
        uploads: UploadHandler = Depends(get_upload_handler),
        service: OutfitAnalysisService = Depends(get_analysis_service)
    ):
        data, content_type = await uploads.read_upload(file)
        try:
            result = await service.analyze_and_save(user["id"], data, file.filename, content_type)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"success": True, "data": result, "message": "Outfit analyzed"}

    @app.post("/api/analyze/capture")
    async def analyze_capture(
        request: CaptureRequest,
        user: dict = Depends(get_current_user),
        uploads: UploadHandler = Depends(get_upload_handler),
        service: OutfitAnalysisService = Depends(get_analysis_service)
    ):
        data, content_type = uploads.read_capture(request.image_data)
        try:
            result = await service.analyze_and_save(user["id"], data, content_type=content_type)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"success": True, "data": result, "message": "Outfit analyzed"}

    @app.post("/api/analyze/preview")
    async def preview_analysis(
        file: UploadFile = File(...),
        user: dict = Depends(get_current_user),
        uploads: UploadHandler = Depends(get_upload_handler),
        service: OutfitAnalysisService = Depends(get_analysis_service)
    ):
        data, _ = await uploads.read_upload(file)
        try:
            analysis = await run_in_threadpool(service.analyze_bytes, data)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"success": True, "data": analysis.to_dict()}

    # History endpoints
    @app.get("/api/analyses")
    async def list_analyses(
        favorites: bool = False,
        limit: int = Query(config.HISTORY_PAGE_SIZE, ge=1, le=100),
        offset: int = Query(0, ge=0),
        user: dict = Depends(get_current_user),
        history: AnalysisHistoryHandler = Depends(get_history_handler)
    ):
        result = await history.get_analyses(user["id"], limit=limit, offset=offset, favorites_only=favorites)
        return {"success": True, "data": result}

    @app.get("/api/analyses/stats")
    async def analysis_stats(
        user: dict = Depends(get_current_user),
        history: AnalysisHistoryHandler = Depends(get_history_handler)
    ):
        return {"success": True, "data": await history.get_history_stats(user["id"])}

    @app.get("/api/analyses/{history_id}")
    async def get_analysis(
        history_id: str,
        user: dict = Depends(get_current_user),
        history: AnalysisHistoryHandler = Depends(get_history_handler)
    ):
        record = await history.get_analysis(user["id"], history_id)
        if not record:
            raise HTTPException(status_code=404, detail="Analysis record not found")
        return {"success": True, "data": record}

    @app.post("/api/analyses/{history_id}/favorite")
    async def toggle_favorite(
        history_id: str,
        user: dict = Depends(get_current_user),
        history: AnalysisHistoryHandler = Depends(get_history_handler)
    ):
        result = await history.toggle_favorite(user["id"], history_id)
        if not result["success"]:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app.put("/api/analyses/{history_id}/favorite")
    async def set_favorite(
        history_id: str,
        request: SetFavoriteRequest,
        user: dict = Depends(get_current_user),
        history: AnalysisHistoryHandler = Depends(get_history_handler)
    ):
        result = await history.set_favorite(user["id"], history_id, request.is_favorite)
        if not result["success"]:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app.delete("/api/analyses/{history_id}")
    async def delete_analysis(
        history_id: str,
        user: dict = Depends(get_current_user),
        service: OutfitAnalysisService = Depends(get_analysis_service)
    ):
        result = await service.delete_analysis(user["id"], history_id)
        if not result["success"]:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    # Knowledge base endpoints
    @app.get("/api/style-tips")
    async def get_style_tips(tips: StyleTipsHandler = Depends(get_style_tips_handler)):
        return {"success": True, "data": tips.get_style_tips()}

    @app.get("/api/color-palettes")
    async def get_color_palettes(tips: StyleTipsHandler = Depends(get_style_tips_handler)):
        return {"success": True, "data": tips.get_color_palettes()}

    @app.get("/api/colors/name")
    async def get_color_name(hex_value: str = Query(..., alias="hex", description="Color as #rrggbb")):
        described = StyleTipsHandler.describe_color(hex_value)
        if described is None:
            raise HTTPException(status_code=400, detail=f"Invalid hex color: {hex_value}")
        return {"success": True, "data": described}

    return app


app = create_app()
