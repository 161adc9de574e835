"""FastAPI application and routes."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Query, Depends, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from chara_inspector import __version__
from chara_inspector.config import ConfigLoader, SystemConfig
from chara_inspector.services.character_cards import (
    CardParseError,
    CharacterRecord,
    NoCharacterDataFound,
    NoTextChunksFound,
    read_character_card,
)
from chara_inspector.services.image_info import describe_image
from chara_inspector.services.image_proxy import (
    ImageProxyError,
    ImageProxyService,
    filename_from_url,
)

logger = logging.getLogger(__name__)


# Global state
app_state = {
    "system_config": None,
    "image_proxy": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    logger.info("Starting Chara Inspector...")

    loader = ConfigLoader()
    system_config = loader.load_system_config()
    app_state["system_config"] = system_config

    if system_config.proxy.enabled:
        app_state["image_proxy"] = ImageProxyService(system_config.proxy)
        logger.info("✓ Image proxy initialized")
    else:
        logger.info("Image proxy disabled in system config")

    yield

    logger.info("Shutting down Chara Inspector...")
    proxy = app_state.get("image_proxy")
    if proxy is not None:
        await proxy.close()
    app_state["image_proxy"] = None


app = FastAPI(
    title="Chara Inspector",
    description="Extract character cards embedded in PNG images",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ParseUrlRequest(BaseModel):
    """Request body for parsing a remote card image."""
    url: str


def get_system_config() -> SystemConfig:
    """Current system config (defaults before startup has run)."""
    return app_state["system_config"] or SystemConfig()


def get_image_proxy() -> ImageProxyService:
    """Image proxy service; 503 when disabled."""
    proxy = app_state["image_proxy"]
    if proxy is None:
        raise HTTPException(status_code=503, detail="Image proxy is disabled")
    return proxy


def _suggestions_for(error: CardParseError) -> List[str]:
    """Remediation hints shown alongside a parse failure."""
    if isinstance(error, NoTextChunksFound):
        return [
            "The image carries no text metadata. It may have been re-encoded "
            "and lost the card data.",
            "Chat platforms such as Discord serve re-encoded WebP previews; "
            "download the original PNG instead.",
            "Export the character from SillyTavern as PNG and use that file.",
        ]
    if isinstance(error, NoCharacterDataFound):
        return [
            "The image has text metadata but no 'chara' or 'ccv3' entry, so it "
            "is probably not a character card.",
        ]
    return [
        "The character card metadata is corrupted. Re-export the card from "
        "its source.",
    ]


def _card_error(error: CardParseError) -> HTTPException:
    """Translate a parse failure into a 422 with structured detail."""
    return HTTPException(
        status_code=422,
        detail={
            "error": type(error).__name__,
            "message": error.message,
            "keyword": error.keyword,
            "context": error.context,
            "suggestions": _suggestions_for(error),
        },
    )


def _proxy_error(error: ImageProxyError) -> HTTPException:
    return HTTPException(
        status_code=error.status_code,
        detail={
            "error": "Image proxy failed",
            "message": error.message,
            "details": {
                "url": error.url,
                "timestamp": datetime.now().isoformat(),
            },
        },
    )


def _card_response(record: CharacterRecord, image_info: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "card": record.card,
        "source_keyword": record.source_keyword,
        "summary": record.summarize().model_dump(),
        "filename": record.suggested_filename(),
        "image": image_info,
    }


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "version": __version__}


@app.post("/cards/parse")
async def parse_card(
    file: UploadFile = File(...),
    config: SystemConfig = Depends(get_system_config),
):
    """
    Parse a character card from an uploaded PNG.

    Returns the card JSON, a display summary and basic image facts.
    """
    content = await file.read(config.upload.max_bytes + 1)
    if len(content) > config.upload.max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large: more than {config.upload.max_bytes} bytes",
        )

    file_name = file.filename or "character.png"
    try:
        record = read_character_card(content)
    except CardParseError as e:
        logger.warning(f"Failed to parse uploaded card '{file_name}': {e}")
        raise _card_error(e)

    image_info = describe_image(
        content,
        file_name=file_name,
        content_type=file.content_type,
        has_character_data=True,
    )
    return _card_response(record, image_info.model_dump())


@app.post("/cards/parse-url")
async def parse_card_from_url(
    request: ParseUrlRequest,
    proxy: ImageProxyService = Depends(get_image_proxy),
):
    """Fetch an image through the proxy and parse its character card."""
    try:
        image = await proxy.fetch(request.url)
    except ImageProxyError as e:
        logger.warning(f"Failed to fetch card image {request.url}: {e}")
        raise _proxy_error(e)

    try:
        record = read_character_card(image.content)
    except CardParseError as e:
        logger.warning(f"Failed to parse card from {request.url}: {e}")
        raise _card_error(e)

    image_info = describe_image(
        image.content,
        file_name=filename_from_url(request.url),
        content_type=image.content_type,
        url=request.url,
        has_character_data=True,
    )
    return _card_response(record, image_info.model_dump())


@app.get("/api/proxy-image")
async def proxy_image(
    url: str = Query(default="", description="Image URL to fetch"),
    proxy: ImageProxyService = Depends(get_image_proxy),
):
    """
    Proxy a remote image so browsers can read its bytes.

    Only http/https images up to the configured size are served.
    """
    if not url:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing url parameter", "message": "Provide the image URL to proxy"},
        )

    try:
        image = await proxy.fetch(url)
    except ImageProxyError as e:
        logger.error(f"Image proxy error for {url}: {e}")
        raise _proxy_error(e)

    return Response(
        content=image.content,
        media_type=image.content_type,
        headers={
            "Cache-Control": f"public, max-age={proxy.config.cache_ttl_seconds}",
            "Access-Control-Allow-Origin": "*",
            "X-Proxy-Source": image.source_url,
            "X-Original-Content-Type": image.content_type,
            "X-Cache-Status": "HIT" if image.from_cache else "MISS",
        },
    )
