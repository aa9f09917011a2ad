"""Load raster assets and normalise them for crisp embedding.

An asset is decoded with Pillow, then composited, centred on a white
background, into a buffer ``upscale_factor`` times larger than the box it
will be drawn into (never smaller than the source). ReportLab then scales
that buffer down into the target box. The detour only affects sharpness;
the drawn geometry is the aspect-preserving fit of the source into the box.

Sources may be local paths, ``http(s)`` URLs, ``data:`` URIs or raw bytes.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

import httpx
from PIL import Image, UnidentifiedImageError

from ..core.errors import AssetLoadError
from ..core.models import ImageSource

logger = logging.getLogger(__name__)

_IMAGE_DOWNLOAD_TIMEOUT = 20.0
_WHITE = (255, 255, 255)


@dataclass(frozen=True)
class ImageAsset:
    """A decoded source image."""

    source_ref: str
    image: Image.Image

    @property
    def natural_width(self) -> int:
        return self.image.width

    @property
    def natural_height(self) -> int:
        return self.image.height


@dataclass(frozen=True)
class NormalizedImage:
    """An upscaled buffer plus the size it must be drawn at."""

    pixels: Image.Image
    draw_width: float
    draw_height: float


def describe_source(source: ImageSource) -> str:
    """Short, log-friendly description of an image source."""
    if isinstance(source, bytes):
        return f"<{len(source)} bytes>"
    text = str(source)
    if text.startswith("data:"):
        return text[:32] + "..."
    return text


def fit_box(
    natural_width: float, natural_height: float, box_width: float, box_height: float
) -> tuple[float, float]:
    """Largest ``(width, height)`` with the natural aspect ratio inside the box."""
    if natural_width <= 0 or natural_height <= 0:
        return box_width, box_height
    scale = min(box_width / natural_width, box_height / natural_height)
    return natural_width * scale, natural_height * scale


class ImageNormalizer:
    """Loads assets ("load or skip") and prepares them for drawing."""

    def __init__(
        self,
        upscale_factor: int = 6,
        timeout: float = _IMAGE_DOWNLOAD_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.upscale_factor = upscale_factor
        self.timeout = timeout
        self._client = client

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, source: ImageSource) -> ImageAsset:
        """Fetch and decode *source*. Raises :class:`AssetLoadError`."""
        ref = describe_source(source)
        data = await self._read_bytes(source, ref)
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except Image.DecompressionBombError as exc:
            raise AssetLoadError(ref, f"image too large ({exc})") from exc
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise AssetLoadError(ref, f"cannot decode image ({exc})") from exc
        return ImageAsset(source_ref=ref, image=image)

    async def load_or_skip(self, source: Optional[ImageSource]) -> Optional[ImageAsset]:
        """Like :meth:`load`, but logs and returns ``None`` on failure."""
        if source is None:
            return None
        try:
            return await self.load(source)
        except AssetLoadError as exc:
            logger.warning("Skipping image: %s", exc)
            return None

    async def _read_bytes(self, source: ImageSource, ref: str) -> bytes:
        if isinstance(source, bytes):
            return source
        if isinstance(source, Path):
            return await self._read_file(source, ref)
        if source.startswith("data:"):
            return self._decode_data_uri(source, ref)
        if source.startswith(("http://", "https://")):
            return await self._download(source, ref)
        return await self._read_file(Path(source), ref)

    @staticmethod
    async def _read_file(path: Path, ref: str) -> bytes:
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise AssetLoadError(ref, str(exc)) from exc

    @staticmethod
    def _decode_data_uri(uri: str, ref: str) -> bytes:
        header, sep, payload = uri.partition(",")
        if not sep or ";base64" not in header:
            raise AssetLoadError(ref, "only base64 data URIs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AssetLoadError(ref, f"bad base64 payload ({exc})") from exc

    async def _download(self, url: str, ref: str) -> bytes:
        try:
            if self._client is not None:
                resp = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout, follow_redirects=True
                ) as client:
                    resp = await client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise AssetLoadError(ref, str(exc)) from exc
        logger.debug("Downloaded image %s (%d bytes)", url, len(resp.content))
        return resp.content

    # ------------------------------------------------------------------
    # Normalisation
    # ------------------------------------------------------------------

    def normalize(
        self,
        asset: ImageAsset,
        box_width: float,
        box_height: float,
        *,
        natural_size: Optional[tuple[float, float]] = None,
    ) -> NormalizedImage:
        """Fit *asset* into the box and render it onto an upscaled buffer.

        *natural_size* overrides the decoded pixel size for the aspect
        ratio (charts may declare their intended size).
        """
        src = _flatten(asset.image)
        nat_w, nat_h = natural_size or (src.width, src.height)
        draw_w, draw_h = fit_box(nat_w, nat_h, box_width, box_height)

        buf_w = max(src.width, round(draw_w * self.upscale_factor), 1)
        buf_h = max(src.height, round(draw_h * self.upscale_factor), 1)
        # Buffer must share the drawn aspect ratio; ReportLab stretches it.
        if draw_w > 0 and draw_h > 0:
            target_ratio = draw_w / draw_h
            if buf_w / buf_h > target_ratio:
                buf_h = max(round(buf_w / target_ratio), 1)
            else:
                buf_w = max(round(buf_h * target_ratio), 1)

        canvas = Image.new("RGB", (buf_w, buf_h), _WHITE)
        scale = min(buf_w / src.width, buf_h / src.height)
        scaled_w = max(round(src.width * scale), 1)
        scaled_h = max(round(src.height * scale), 1)
        resized = src.resize((scaled_w, scaled_h), resample=Image.Resampling.LANCZOS)
        canvas.paste(resized, ((buf_w - scaled_w) // 2, (buf_h - scaled_h) // 2))
        return NormalizedImage(pixels=canvas, draw_width=draw_w, draw_height=draw_h)

    def normalize_or_skip(
        self,
        asset: Optional[ImageAsset],
        box_width: float,
        box_height: float,
        *,
        natural_size: Optional[tuple[float, float]] = None,
    ) -> Optional[NormalizedImage]:
        """Like :meth:`normalize`, but logs and returns ``None`` on failure."""
        if asset is None:
            return None
        try:
            return self.normalize(asset, box_width, box_height, natural_size=natural_size)
        except (OSError, ValueError, MemoryError) as exc:
            logger.warning("Skipping image: %s: cannot resample (%s)", asset.source_ref, exc)
            return None


def _flatten(img: Image.Image) -> Image.Image:
    """Composite transparency onto white and return an RGB image."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        bg = Image.new("RGB", rgba.size, _WHITE)
        bg.paste(rgba, mask=rgba.split()[-1])
        return bg
    if img.mode != "RGB":
        return img.convert("RGB")
    return img
