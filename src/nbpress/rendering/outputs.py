"""Rendering of code cell outputs.

Each output is classified into exactly one ``OutputKind`` by walking
``OUTPUT_RULES`` in order; the first rule whose MIME key holds a non-empty
payload wins. Rich payloads become asset files referenced from the document,
text payloads become ``text`` fenced blocks.
"""

import base64
import binascii
import io
import json
import logging
import re
from typing import Any, Callable, Optional

from PIL import Image

from nbpress.hashing import ContentHasher
from nbpress.models import AssetFile, OutputKind, RenderContext, RenderedOutput
from nbpress.rendering.frames import html_document, plotly_document

logger = logging.getLogger(__name__)

PLOTLY_MIME = "application/vnd.plotly.v1+json"

# (kind, MIME keys checked in order). Stream text is checked after all of these.
OUTPUT_RULES: tuple[tuple[OutputKind, tuple[str, ...]], ...] = (
    (OutputKind.PLOTLY, (PLOTLY_MIME,)),
    (OutputKind.HTML, ("text/html",)),
    (OutputKind.RASTER_IMAGE, ("image/png", "image/jpeg")),
    (OutputKind.SVG, ("image/svg+xml",)),
    (OutputKind.TEXT_PLAIN, ("text/plain",)),
)

RASTER_EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg"}


def fenced_block(source: str, language: str = "") -> str:
    """Wrap text in a fenced block.

    The fence is made longer than any backtick run inside the text so the
    block cannot be closed early.
    """
    runs = re.findall(r"`{3,}", source)
    fence = "`" * max([3] + [len(run) + 1 for run in runs])
    return f"{fence}{language}\n{source.rstrip()}\n{fence}"


class OutputRenderer:
    """Turn one cell output into a document fragment.

    Asset file names are ``<hash>.<ext>`` where the hash covers the slug,
    the output's position and its full serialized content, so unchanged
    outputs keep their names across runs and changed ones never reuse one.
    """

    def __init__(
        self,
        assets_url_root: str = "nb-assets",
        frame_height: int = 400,
        plotly_cdn_url: str = "https://cdn.plot.ly/plotly-2.35.2.min.js",
        hasher: Optional[ContentHasher] = None,
    ):
        """Initialize the renderer.

        Args:
            assets_url_root: Site path prefix under which assets are served
            frame_height: Initial iframe height in pixels
            plotly_cdn_url: plotly.js bundle referenced by plot pages
            hasher: Hasher used for asset names
        """
        self.assets_url_root = assets_url_root.strip("/")
        self.frame_height = frame_height
        self.plotly_cdn_url = plotly_cdn_url
        self.hasher = hasher or ContentHasher()

        self._handlers: dict[OutputKind, Callable[..., Optional[RenderedOutput]]] = {
            OutputKind.PLOTLY: self._render_plotly,
            OutputKind.HTML: self._render_html,
            OutputKind.RASTER_IMAGE: self._render_raster,
            OutputKind.SVG: self._render_svg,
            OutputKind.TEXT_PLAIN: self._render_text,
            OutputKind.STREAM: self._render_text,
        }

    def classify(self, output: dict) -> tuple[OutputKind, Optional[str], Any]:
        """Pick the payload of an output that will be rendered.

        Args:
            output: Normalized output mapping

        Returns:
            tuple: (kind, MIME type or None, payload)
        """
        data = output.get("data")
        if isinstance(data, dict):
            for kind, mimes in OUTPUT_RULES:
                for mime in mimes:
                    if data.get(mime):
                        return kind, mime, data[mime]

        text = output.get("text")
        if text:
            return OutputKind.STREAM, None, text

        return OutputKind.UNRECOGNIZED, None, None

    def render(self, output: dict, context: RenderContext) -> Optional[RenderedOutput]:
        """Render one output.

        Args:
            output: Normalized output mapping
            context: Position of the output, used for asset naming

        Returns:
            Optional[RenderedOutput]: The fragment, or None if nothing is shown
        """
        kind, mime, payload = self.classify(output)
        handler = self._handlers.get(kind)
        if handler is None:
            logger.debug(
                "Skipping unrecognized output %d of cell %d in %s",
                context.output_index,
                context.cell_index,
                context.slug,
            )
            return None

        return handler(output, context, mime, payload)

    def asset_name(self, output: dict, context: RenderContext, extension: str) -> str:
        """Return the deterministic file name for an output's asset."""
        serialized = json.dumps(output, sort_keys=True, ensure_ascii=False, default=str)
        key = f"{context.slug}-{context.cell_index}-{context.output_index}-{serialized}"
        return f"{self.hasher.short(key)}.{extension}"

    def asset_url(self, slug: str, filename: str) -> str:
        """Return the site path of an asset."""
        return f"/{self.assets_url_root}/{slug}/{filename}"

    def _asset(
        self, output: dict, context: RenderContext, extension: str, content: bytes
    ) -> AssetFile:
        filename = self.asset_name(output, context, extension)
        return AssetFile(
            slug=context.slug,
            filename=filename,
            content=content,
            url=self.asset_url(context.slug, filename),
        )

    def _frame(self, kind: OutputKind, asset: AssetFile) -> RenderedOutput:
        markup = (
            f'<iframe src="{asset.url}" class="nb-output-frame" title="Notebook output" '
            f'width="100%" height="{self.frame_height}" loading="lazy"></iframe>'
        )
        return RenderedOutput(kind=kind, markup=markup, assets=[asset])

    def _image(self, kind: OutputKind, asset: AssetFile) -> RenderedOutput:
        return RenderedOutput(
            kind=kind,
            markup=f"![Notebook Output]({asset.url})",
            assets=[asset],
        )

    def _render_plotly(
        self, output: dict, context: RenderContext, mime: str, payload: Any
    ) -> Optional[RenderedOutput]:
        if not isinstance(payload, dict):
            logger.warning(
                "Plot output %d of cell %d in %s is not a JSON object, skipping",
                context.output_index,
                context.cell_index,
                context.slug,
            )
            return None

        page = plotly_document(payload, self.plotly_cdn_url)
        asset = self._asset(output, context, "html", page.encode("utf-8"))
        return self._frame(OutputKind.PLOTLY, asset)

    def _render_html(
        self, output: dict, context: RenderContext, mime: str, payload: Any
    ) -> Optional[RenderedOutput]:
        page = html_document(str(payload))
        asset = self._asset(output, context, "html", page.encode("utf-8"))
        return self._frame(OutputKind.HTML, asset)

    def _render_raster(
        self, output: dict, context: RenderContext, mime: str, payload: Any
    ) -> Optional[RenderedOutput]:
        try:
            # Remove whitespace and newlines
            image_bytes = base64.b64decode("".join(str(payload).split()), validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning(
                "Invalid base64 image in output %d of cell %d in %s: %s",
                context.output_index,
                context.cell_index,
                context.slug,
                e,
            )
            return None

        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                img.verify()
        except Exception as e:
            # Log but don't fail - just skip this image
            logger.warning(
                "Unreadable image in output %d of cell %d in %s: %s",
                context.output_index,
                context.cell_index,
                context.slug,
                e,
            )
            return None

        asset = self._asset(output, context, RASTER_EXTENSIONS[mime], image_bytes)
        return self._image(OutputKind.RASTER_IMAGE, asset)

    def _render_svg(
        self, output: dict, context: RenderContext, mime: str, payload: Any
    ) -> Optional[RenderedOutput]:
        asset = self._asset(output, context, "svg", str(payload).encode("utf-8"))
        return self._image(OutputKind.SVG, asset)

    def _render_text(
        self, output: dict, context: RenderContext, mime: Optional[str], payload: Any
    ) -> Optional[RenderedOutput]:
        text = str(payload)
        if not text.strip():
            return None

        kind = OutputKind.TEXT_PLAIN if mime else OutputKind.STREAM
        markup = fenced_block(text, "text")
        return RenderedOutput(kind=kind, markup=markup)
