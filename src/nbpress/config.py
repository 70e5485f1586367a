"""Configuration management for nbpress."""

from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nbpress import ConfigurationError


class NbPressConfig(BaseSettings):
    """Application configuration loaded from environment variables.

    Environment variables should be prefixed with NBPRESS_
    Example: NBPRESS_NOTEBOOKS_DIR=content/notebooks

    Attributes:
        notebooks_dir: Directory scanned for .ipynb files
        output_dir: Directory receiving the rendered documents
        assets_dir: Directory receiving extracted assets (one subdirectory per slug)
        assets_url_root: Site path under which assets_dir is served
        cache_path: JSON file holding the fingerprint cache
        document_extension: Extension of rendered documents
        default_language: Code fence language when the notebook declares none
        frontmatter_layout: Layout written into synthesized headers (empty to omit)
        default_description: Description written into synthesized headers
        default_author: Author written into synthesized headers
        frame_height: Initial iframe height in pixels
        plotly_cdn_url: plotly.js bundle loaded by plot assets
        prune_stale_assets: Remove assets no longer referenced after a conversion
        watch_poll_interval: Seconds between stop checks in watch mode
    """

    # Locations
    notebooks_dir: Path = Field(
        default=Path("src/notebooks"),
        description="Directory scanned for notebooks",
    )
    output_dir: Path = Field(
        default=Path("src/pages/blog"),
        description="Directory for rendered documents",
    )
    assets_dir: Path = Field(
        default=Path("public/nb-assets"),
        description="Directory for extracted assets",
    )
    assets_url_root: str = Field(
        default="nb-assets",
        description="Site path prefix for extracted assets",
    )
    cache_path: Path = Field(
        default=Path("scripts/.nb-cache.json"),
        description="Fingerprint cache file",
    )

    # Rendering
    document_extension: str = Field(
        default=".mdx",
        description="Extension for rendered documents",
    )
    default_language: str = Field(
        default="python",
        min_length=1,
        description="Fallback code fence language",
    )
    frontmatter_layout: str = Field(
        default="../../layouts/MarkdownPostLayout.astro",
        description="Layout for synthesized frontmatter",
    )
    default_description: str = Field(
        default="Converted notebook",
        description="Description for synthesized frontmatter",
    )
    default_author: str = Field(
        default="Native Notebook",
        description="Author for synthesized frontmatter",
    )
    frame_height: int = Field(
        default=400,
        ge=50,
        le=5000,
        description="Initial height of output iframes in pixels",
    )
    plotly_cdn_url: str = Field(
        default="https://cdn.plot.ly/plotly-2.35.2.min.js",
        description="plotly.js bundle used by plot assets",
    )
    prune_stale_assets: bool = Field(
        default=False,
        description="Delete unreferenced assets after conversion",
    )

    # Watch mode
    watch_poll_interval: float = Field(
        default=0.5,
        gt=0,
        le=60,
        description="Seconds between stop checks while watching",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NBPRESS_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("document_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Require a leading dot on the document extension."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Document extension must start with '.': {v!r}")
        return v

    @field_validator("assets_url_root")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Store the URL root without surrounding slashes."""
        v = v.strip("/")
        if not v:
            raise ValueError("Assets URL root cannot be empty")
        return v


# Global config instance (lazy-loaded)
_config: NbPressConfig | None = None


def get_config() -> NbPressConfig:
    """Get or create the global configuration instance.

    Returns:
        NbPressConfig: The configuration object

    Raises:
        ConfigurationError: If the environment holds invalid values
    """
    global _config
    if _config is None:
        try:
            _config = NbPressConfig()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
