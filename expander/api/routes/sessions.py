from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from expander.api.routes.composition import build_plan_response
from expander.canvas.types import Alignment, AspectRatio
from expander.config import settings
from expander.errors import (
    InvalidImageError,
    SessionNotFoundError,
    SessionStateError,
    UploadTooLargeError,
)
from expander.schemas import (
    AlignmentModel,
    CompositionPlanResponse,
    CompositionUpdateRequest,
    DescriptionUpdateRequest,
    ExpandedImageResponse,
    SessionResponse,
    SourceImageResponse,
)
from expander.session.state import ExpanderSession
from expander.session.store import SessionStore, get_session_store


API_PREFIX = "/api/v1"

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_session(session_id: str, store: SessionStore) -> ExpanderSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc


def _build_session_response(session: ExpanderSession) -> SessionResponse:
    base = f"{API_PREFIX}/sessions/{session.id}"
    source = session.source
    expanded = session.expanded
    return SessionResponse(
        id=session.id,
        state=session.state,
        description=session.description,
        aspect_ratio=session.aspect_ratio.value,
        alignment=AlignmentModel(row=session.alignment.row, col=session.alignment.col),
        scale=session.scale,
        can_generate=session.can_generate(),
        error_message=session.error_message or None,
        source=(
            SourceImageResponse(
                file_name=source.file_name,
                mime_type=source.mime_type,
                width=source.width,
                height=source.height,
                preview_url=f"{base}/source",
            )
            if source is not None
            else None
        ),
        result=(
            ExpandedImageResponse(
                width=expanded.width,
                height=expanded.height,
                file_name=expanded.download_name,
                result_url=f"{base}/result",
                download_url=f"{base}/download",
            )
            if expanded is not None
            else None
        ),
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(store: SessionStore = Depends(get_session_store)) -> SessionResponse:
    return _build_session_response(store.create())


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> SessionResponse:
    return _build_session_response(_get_session(session_id, store))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    try:
        store.delete(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/image", response_model=SessionResponse)
def upload_image(
    session_id: str,
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    session = _get_session(session_id, store)
    try:
        # One byte past the limit is enough to reject an oversized upload.
        data = file.file.read(settings.max_upload_bytes + 1)
        session.select_file(data, file.content_type, file.filename)
    except UploadTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except InvalidImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    finally:
        file.file.close()

    session.describe()
    return _build_session_response(session)


@router.get("/{session_id}/source")
def get_source_image(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    source = _get_session(session_id, store).source
    if source is None:
        raise HTTPException(status_code=404, detail="No image uploaded")
    return Response(content=source.data, media_type=source.mime_type)


@router.put("/{session_id}/description", response_model=SessionResponse)
def update_description(
    session_id: str,
    payload: DescriptionUpdateRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    session = _get_session(session_id, store)
    try:
        session.set_description(payload.description)
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _build_session_response(session)


@router.put("/{session_id}/composition", response_model=SessionResponse)
def update_composition(
    session_id: str,
    payload: CompositionUpdateRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    session = _get_session(session_id, store)
    try:
        session.set_composition(
            aspect_ratio=AspectRatio.parse(payload.aspect_ratio) if payload.aspect_ratio else None,
            alignment=(
                Alignment(row=payload.alignment.row, col=payload.alignment.col)
                if payload.alignment is not None
                else None
            ),
            scale=payload.scale,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _build_session_response(session)


@router.get("/{session_id}/plan", response_model=CompositionPlanResponse)
def get_session_plan(session_id: str, store: SessionStore = Depends(get_session_store)) -> CompositionPlanResponse:
    session = _get_session(session_id, store)
    try:
        plan = session.plan()
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return build_plan_response(plan)


@router.post("/{session_id}/expand", response_model=SessionResponse)
def expand_image(session_id: str, store: SessionStore = Depends(get_session_store)) -> SessionResponse:
    session = _get_session(session_id, store)
    session.generate()
    return _build_session_response(session)


@router.get("/{session_id}/result")
def get_result_image(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    expanded = _get_session(session_id, store).expanded
    if expanded is None:
        raise HTTPException(status_code=404, detail="No expanded image available")
    return Response(content=expanded.data, media_type="image/png")


@router.get("/{session_id}/download")
def download_result(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    session = _get_session(session_id, store)
    try:
        file_name, data = session.download()
    except SessionStateError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(
        content=data,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.post("/{session_id}/reset", response_model=SessionResponse)
def reset_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> SessionResponse:
    session = _get_session(session_id, store)
    session.reset()
    return _build_session_response(session)
