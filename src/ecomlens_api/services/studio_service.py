"""Studio service for product image generation."""

import asyncio
import base64
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field

from ecomlens_api.config import CUSTOM_CATEGORY, STYLE_PRESETS, StylePreset, get_settings
from ecomlens_api.errors.exceptions import (
    AssetNotFoundError,
    GenerationError,
    NoSourceImageError,
)
from ecomlens_api.models.asset import GeneratedAsset
from ecomlens_api.models.studio import BatchGenerationResponse
from ecomlens_api.models.user import UserRecord
from ecomlens_api.services.generation_client import (
    DEFAULT_OUTPUT_MIME_TYPE,
    GenerationClient,
    decode_image,
    get_generation_client,
)
from ecomlens_api.services.quota_service import QuotaService, get_quota_service

logger = logging.getLogger(__name__)


@dataclass
class StudioWorkspace:
    """Uploaded image and generated assets of one session. Not persisted."""

    user_id: str | None = None
    source_image: str | None = None
    assets: list[GeneratedAsset] = field(default_factory=list)


@dataclass(frozen=True)
class AssetDownload:
    """Decoded asset payload ready to send as a file."""

    content: bytes
    media_type: str
    filename: str


class StudioService:
    """
    Service for the per-session studio workspace and generation.

    Workspaces are held in memory, at most one per user. Uploading from a new
    session drops the user's older workspace, and the least recently used
    workspaces are evicted beyond ``studio_max_workspaces``.
    """

    def __init__(
        self,
        client: GenerationClient | None = None,
        quota: QuotaService | None = None,
        max_workspaces: int | None = None,
    ):
        self._client = client
        self._quota = quota
        self._max_workspaces = max_workspaces or get_settings().studio_max_workspaces
        self._workspaces: OrderedDict[str, StudioWorkspace] = OrderedDict()

    @property
    def client(self) -> GenerationClient:
        """Get generation client."""
        if self._client is None:
            self._client = get_generation_client()
        return self._client

    @property
    def quota(self) -> QuotaService:
        """Get quota service."""
        if self._quota is None:
            self._quota = get_quota_service()
        return self._quota

    @property
    def active_workspaces(self) -> int:
        """Number of workspaces currently held in memory."""
        return len(self._workspaces)

    def workspace(self, token: str) -> StudioWorkspace:
        """Get the workspace of a session, or an empty view if it has none."""
        workspace = self._workspaces.get(token)
        if workspace is None:
            return StudioWorkspace()
        self._workspaces.move_to_end(token)
        return workspace

    def set_source_image(self, token: str, image: str, user_id: str) -> StudioWorkspace:
        """
        Upload a new product image. Previous assets are cleared.

        Any workspace the user holds under another session is dropped.

        Raises:
            InvalidImageError: If the image is not valid base64
        """
        decode_image(image)

        for other_token, other in list(self._workspaces.items()):
            if other.user_id == user_id and other_token != token:
                del self._workspaces[other_token]
                logger.info("Dropped older studio workspace of user %s", user_id)

        workspace = StudioWorkspace(user_id=user_id, source_image=image)
        self._workspaces[token] = workspace
        self._workspaces.move_to_end(token)

        while len(self._workspaces) > self._max_workspaces:
            _, evicted = self._workspaces.popitem(last=False)
            logger.info("Evicted least recently used studio workspace of user %s", evicted.user_id)

        return workspace

    def reset(self, token: str) -> StudioWorkspace:
        """Clear the image and all assets."""
        self._workspaces.pop(token, None)
        return StudioWorkspace()

    def discard(self, token: str) -> None:
        """Drop the workspace entirely (on logout)."""
        self._workspaces.pop(token, None)

    def list_assets(self, token: str) -> list[GeneratedAsset]:
        """Assets in display order: newest custom first, batches appended."""
        return list(self.workspace(token).assets)

    def get_asset(self, token: str, asset_id: str) -> GeneratedAsset:
        """
        Get one asset by ID.

        Raises:
            AssetNotFoundError: If the workspace has no such asset
        """
        for asset in self.workspace(token).assets:
            if asset.id == asset_id:
                return asset
        raise AssetNotFoundError(asset_id)

    def download(self, token: str, asset_id: str) -> AssetDownload:
        """Decode an asset's data URI for download as ecomlens-<category>.png."""
        asset = self.get_asset(token, asset_id)
        header, _, payload = asset.url.partition(",")
        media_type = header.removeprefix("data:").split(";")[0] or DEFAULT_OUTPUT_MIME_TYPE
        return AssetDownload(
            content=base64.b64decode(payload),
            media_type=media_type,
            filename=asset.download_filename,
        )

    def _require_source(self, token: str) -> StudioWorkspace:
        workspace = self._workspaces.get(token)
        if workspace is None or workspace.source_image is None:
            raise NoSourceImageError()
        return workspace

    async def _charge(self, user: UserRecord) -> UserRecord:
        self.quota.check(user)
        return await self.quota.increment(user.id)

    async def _generate_preset(self, source: str, preset: StylePreset) -> GeneratedAsset | None:
        try:
            url = await self.client.generate(source, preset.prompt)
        except GenerationError as e:
            logger.warning("Failed to generate %s: %s", preset.id, e.message)
            return None
        except Exception:
            logger.exception("Unexpected error generating %s", preset.id)
            return None

        return GeneratedAsset(
            id=str(uuid.uuid4()),
            url=url,
            prompt=preset.label,
            category=preset.id,
        )

    async def generate_batch(self, token: str, user: UserRecord) -> BatchGenerationResponse:
        """
        Generate one image per style preset.

        Charges one generation for the whole batch before any model call.
        Presets run concurrently; failures are logged and left out, the rest
        are appended in preset order.

        Raises:
            NoSourceImageError: If no image was uploaded
            QuotaExceededError: If the user has no generations left
        """
        workspace = self._require_source(token)
        source = workspace.source_image
        charged = await self._charge(user)

        results = await asyncio.gather(
            *(self._generate_preset(source, preset) for preset in STYLE_PRESETS)
        )

        assets = [asset for asset in results if asset is not None]
        failed = [
            preset.id for preset, asset in zip(STYLE_PRESETS, results, strict=True) if asset is None
        ]
        workspace.assets.extend(assets)

        logger.info(
            "Batch for user %s: %d/%d presets succeeded",
            user.id,
            len(assets),
            len(STYLE_PRESETS),
        )
        return BatchGenerationResponse(
            assets=assets,
            failed=failed,
            total_requested=len(STYLE_PRESETS),
            usage_count=charged.usage_count,
            usage_limit=charged.usage_limit,
        )

    async def generate_custom(self, token: str, user: UserRecord, prompt: str) -> GeneratedAsset:
        """
        Generate one image from a free-text instruction.

        The generation is charged even if the model call fails.

        Raises:
            NoSourceImageError: If no image was uploaded
            QuotaExceededError: If the user has no generations left
            GenerationError: If the model call fails
        """
        workspace = self._require_source(token)
        source = workspace.source_image
        await self._charge(user)

        url = await self.client.generate(source, prompt)

        asset = GeneratedAsset(
            id=str(uuid.uuid4()),
            url=url,
            prompt=prompt,
            category=CUSTOM_CATEGORY,
        )
        workspace.assets.insert(0, asset)
        logger.info("Custom asset %s generated for user %s", asset.id, user.id)
        return asset


# Singleton instance
_studio_service: StudioService | None = None


def get_studio_service() -> StudioService:
    """Get studio service instance."""
    global _studio_service
    if _studio_service is None:
        _studio_service = StudioService()
    return _studio_service


def reset_studio_service() -> None:
    """Reset studio service (for testing)."""
    global _studio_service
    _studio_service = None
