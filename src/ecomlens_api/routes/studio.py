"""Studio endpoints: upload, generate and download product images."""

from fastapi import APIRouter, Depends, Response, status

from ecomlens_api.auth.dependencies import get_current_user, get_session_token
from ecomlens_api.config import STYLE_PRESETS
from ecomlens_api.models.asset import GeneratedAsset
from ecomlens_api.models.studio import (
    BatchGenerationResponse,
    CustomGenerationRequest,
    PresetResponse,
    SourceImageRequest,
    StudioResponse,
)
from ecomlens_api.models.user import UserRecord
from ecomlens_api.services.studio_service import StudioService, get_studio_service

router = APIRouter(prefix="/studio", tags=["Studio"])


def _studio_response(studio: StudioService, token: str) -> StudioResponse:
    workspace = studio.workspace(token)
    return StudioResponse(
        has_source_image=workspace.source_image is not None,
        assets=list(workspace.assets),
    )


@router.get(
    "/presets",
    response_model=list[PresetResponse],
    summary="List Style Presets",
    description="The five styles generated by a batch, in generation order.",
)
async def list_presets() -> list[PresetResponse]:
    return [
        PresetResponse(id=preset.id, label=preset.label, description=preset.description)
        for preset in STYLE_PRESETS
    ]


@router.get(
    "",
    response_model=StudioResponse,
    summary="Get Studio",
    description="Whether an image is uploaded, plus all generated assets.",
)
async def get_studio(
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> StudioResponse:
    return _studio_response(studio, token)


@router.put(
    "/image",
    response_model=StudioResponse,
    summary="Upload Product Image",
    description="Set the source image. Previously generated assets are cleared.",
)
async def set_source_image(
    request: SourceImageRequest,
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> StudioResponse:
    """
    Accepts base64 image data, either bare or as a data URI
    (``data:image/png;base64,...``). Bare data is treated as JPEG.
    """
    studio.set_source_image(token, request.image, user.id)
    return _studio_response(studio, token)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset Studio",
    description="Clear the uploaded image and all generated assets.",
)
async def reset_studio(
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> Response:
    studio.reset(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/generate/batch",
    response_model=BatchGenerationResponse,
    summary="Generate All Styles",
    description="Generate one image per style preset. Counts as one generation.",
)
async def generate_batch(
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> BatchGenerationResponse:
    """
    Generate the batch.

    - One generation is charged up front, whatever the outcome
    - Presets that fail are listed in `failed` and produce no asset
    - Returns 429 when the daily limit is reached
    """
    return await studio.generate_batch(token, user)


@router.post(
    "/generate/custom",
    response_model=GeneratedAsset,
    status_code=status.HTTP_201_CREATED,
    summary="Generate Custom Edit",
    description="Generate one image from a free-text instruction.",
)
async def generate_custom(
    request: CustomGenerationRequest,
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> GeneratedAsset:
    """The generation is charged even if the model returns no image."""
    return await studio.generate_custom(token, user, request.prompt)


@router.get(
    "/assets",
    response_model=list[GeneratedAsset],
    summary="List Assets",
)
async def list_assets(
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> list[GeneratedAsset]:
    return studio.list_assets(token)


@router.get(
    "/assets/{asset_id}",
    response_model=GeneratedAsset,
    summary="Get Asset",
)
async def get_asset(
    asset_id: str,
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> GeneratedAsset:
    return studio.get_asset(token, asset_id)


@router.get(
    "/assets/{asset_id}/download",
    summary="Download Asset",
    description="Download the decoded image as ecomlens-<category>.png.",
    response_class=Response,
)
async def download_asset(
    asset_id: str,
    token: str = Depends(get_session_token),
    user: UserRecord = Depends(get_current_user),
    studio: StudioService = Depends(get_studio_service),
) -> Response:
    download = studio.download(token, asset_id)
    return Response(
        content=download.content,
        media_type=download.media_type,
        headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
    )
