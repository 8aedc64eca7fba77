from __future__ import annotations

import base64
import logging
from functools import lru_cache
from typing import Any, List, Optional

import cv2
import numpy as np
from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import TypeAdapter, ValidationError

from .config import get_settings
from .errors import InvalidImageError
from .geometry import FaceObservation
from .models import FaceAnalysisResponse, FaceControls, FaceObservationModel, TransformResponse
from .pipeline import FaceTransformPipeline
from .session import FaceDetector, ObservationCache

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Neuro Face Editor Backend", version="1.0.0")
pipeline = FaceTransformPipeline(identity_scale=settings.identity_scale)
observation_cache = ObservationCache(maxsize=settings.cache_size)

_FACES_ADAPTER = TypeAdapter(List[FaceObservationModel])

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_detector() -> FaceDetector:
    # MediaPipe is loaded on first use only
    try:
        from .landmarks import FaceMeshDetector

        return FaceMeshDetector(max_num_faces=settings.max_faces)
    except Exception as exc:
        logger.error(f"Face detector unavailable: {exc}", exc_info=True)
        raise HTTPException(status_code=503, detail=f"Face detector unavailable: {str(exc)}") from exc


def encode_image(image: np.ndarray, quality: int = 95) -> str:
    success, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    if not success:
        raise ValueError("Failed to encode image")
    return "data:image/jpeg;base64," + base64.b64encode(buffer).decode("utf-8")


@app.get("/health")
async def health() -> dict[str, Any]:
    return {"status": "ok"}


async def _load_image(upload: UploadFile) -> np.ndarray:
    """Load image from UploadFile and convert to numpy array."""
    try:
        data = await upload.read()
        if not data:
            raise HTTPException(status_code=400, detail="Empty image payload")
        array = np.frombuffer(data, np.uint8)
        image = cv2.imdecode(array, cv2.IMREAD_COLOR)
        if image is None:
            raise HTTPException(status_code=400, detail="Unsupported image format")
        return image
    except HTTPException:
        raise
    except Exception as exc:
        logger.error(f"Error loading image: {exc}", exc_info=True)
        raise HTTPException(status_code=400, detail=f"Failed to load image: {str(exc)}") from exc


def _parse_controls(raw: Optional[str]) -> FaceControls:
    if not raw:
        return FaceControls()
    try:
        return FaceControls.model_validate_json(raw)
    except ValidationError as exc:
        logger.error(f"Invalid controls: {exc}")
        raise HTTPException(status_code=400, detail=f"Invalid controls: {exc.errors()}") from exc


def _parse_faces(raw: Optional[str]) -> Optional[List[FaceObservation]]:
    if raw is None or raw == "":
        return None
    try:
        models = _FACES_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        logger.error(f"Invalid faces payload: {exc}")
        raise HTTPException(status_code=400, detail=f"Invalid faces payload: {exc}") from exc
    return [model.to_observation() for model in models]


def _detect(image: np.ndarray, detector: FaceDetector) -> List[FaceObservation]:
    try:
        return observation_cache.get_or_detect(image, detector)
    except InvalidImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/api/face/analyze", response_model=FaceAnalysisResponse)
async def analyze_face(
    image: UploadFile = File(...),
    detector: FaceDetector = Depends(get_detector),
) -> FaceAnalysisResponse:
    """Detect faces and return their landmark regions."""
    try:
        img = await _load_image(image)
        faces = _detect(img, detector)
        if not faces:
            raise HTTPException(status_code=422, detail="No face detected")
        h, w = img.shape[:2]
        return FaceAnalysisResponse(
            width=w,
            height=h,
            faces=[FaceObservationModel.from_observation(face) for face in faces],
        )
    except HTTPException:
        raise
    except Exception as exc:
        logger.error(f"Error analyzing face: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error analyzing face: {str(exc)}") from exc


@app.post("/api/face/transform", response_model=TransformResponse)
async def transform_face(
    image: UploadFile = File(...),
    controls: Optional[str] = Form(None),
    faces: Optional[str] = Form(None),
    detector: FaceDetector = Depends(get_detector),
) -> TransformResponse:
    """Warp the face outline, eyes and nose of every face in the image.

    ``faces`` may carry observations from an earlier ``/api/face/analyze``
    call; detection is skipped in that case.
    """
    parsed_controls = _parse_controls(controls)
    observations = _parse_faces(faces)

    try:
        img = await _load_image(image)
        if observations is None:
            observations = _detect(img, detector)
        processed = pipeline.transform(
            img,
            observations,
            parsed_controls.ovalScale,
            parsed_controls.eyeScale,
            parsed_controls.noseScale,
        )
        return TransformResponse(
            image=encode_image(processed, settings.jpeg_quality),
            controls=parsed_controls,
            faces=[FaceObservationModel.from_observation(face) for face in observations],
        )
    except HTTPException:
        raise
    except InvalidImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"Error transforming face: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error transforming face: {str(exc)}") from exc
