"""Tests for single-notebook conversion."""

from unittest.mock import patch

import pytest

from nbpress import AssetWriteError, NotebookParseError
from nbpress.cache import CacheStore
from nbpress.config import NbPressConfig
from nbpress.converter import NotebookConverter, slug_for
from nbpress.models import ConversionStatus


def _hi_notebook() -> dict:
    return {
        "cells": [
            {"cell_type": "markdown", "source": "# Hi"},
            {
                "cell_type": "code",
                "source": "print(1)",
                "outputs": [{"output_type": "stream", "name": "stdout", "text": ["1\n"]}],
            },
        ],
        "metadata": {},
        "nbformat": 4,
        "nbformat_minor": 5,
    }


class TestNotebookConverter:
    """Tests for NotebookConverter class."""

    def test_end_to_end_document(self, project, write_notebook, make_converter):
        write_notebook("hello-world.ipynb", _hi_notebook())

        result = make_converter().convert("hello-world.ipynb")

        assert result.status == ConversionStatus.CONVERTED
        assert result.document_path == project["output"] / "hello-world.mdx"
        assert result.document_path.read_text() == (
            "---\n"
            "title: Hello World\n"
            "pubDate: '2024-05-01'\n"
            "description: Converted notebook\n"
            "author: Native Notebook\n"
            "---\n"
            "\n"
            "# Hi\n\n"
            "```python\nprint(1)\n```\n\n"
            "```text\n1\n```\n\n"
        )

    def test_author_frontmatter(self, project, write_notebook, make_converter):
        data = _hi_notebook()
        data["cells"].insert(0, {"cell_type": "markdown", "source": ["---\n", "title: Custom\n", "---"]})
        write_notebook("post.ipynb", data)

        make_converter().convert("post.ipynb")

        text = (project["output"] / "post.mdx").read_text()
        assert text.startswith("---\ntitle: Custom\n---\n\n# Hi\n\n")
        assert text.count("---") == 2

    def test_second_run_is_skipped(self, project, write_notebook, make_converter):
        write_notebook("a.ipynb", _hi_notebook())
        converter = make_converter()
        converter.convert("a.ipynb")

        with patch("nbpress.output.writer.atomic_write") as mock_write:
            result = converter.convert("a.ipynb")

        assert result.status == ConversionStatus.SKIPPED
        mock_write.assert_not_called()

    def test_cache_survives_restart(self, project, write_notebook, make_converter):
        write_notebook("a.ipynb", _hi_notebook())
        make_converter().convert("a.ipynb")

        assert make_converter().convert("a.ipynb").status == ConversionStatus.SKIPPED

    def test_force_reconverts_identically(self, project, write_notebook, make_converter):
        write_notebook("a.ipynb", _hi_notebook())
        converter = make_converter()
        converter.convert("a.ipynb")
        first = (project["output"] / "a.mdx").read_bytes()

        result = converter.convert("a.ipynb", force=True)

        assert result.status == ConversionStatus.CONVERTED
        assert (project["output"] / "a.mdx").read_bytes() == first

    def test_changed_content_is_reconverted(self, project, write_notebook, make_converter):
        data = _hi_notebook()
        write_notebook("a.ipynb", data)
        converter = make_converter()
        converter.convert("a.ipynb")

        data["cells"][0]["source"] = "# Changed"
        write_notebook("a.ipynb", data)

        assert converter.convert("a.ipynb").status == ConversionStatus.CONVERTED
        assert "# Changed" in (project["output"] / "a.mdx").read_text()

    def test_reverted_content_is_reconverted(self, project, write_notebook, make_converter):
        original = _hi_notebook()
        changed = _hi_notebook()
        changed["cells"][0]["source"] = "# Other"
        converter = make_converter()

        write_notebook("a.ipynb", original)
        converter.convert("a.ipynb")
        write_notebook("a.ipynb", changed)
        converter.convert("a.ipynb")
        write_notebook("a.ipynb", original)

        assert converter.convert("a.ipynb").status == ConversionStatus.CONVERTED

    def test_schema_version_bump(self, project, write_notebook, make_converter):
        write_notebook("a.ipynb", _hi_notebook())
        make_converter().convert("a.ipynb")

        bumped = CacheStore(project["cache"], schema_version="next")
        bumped.load()

        assert make_converter(cache=bumped).convert("a.ipynb").status == ConversionStatus.CONVERTED

    def test_assets_are_written(self, project, write_notebook, make_converter, sample_notebook_data):
        write_notebook("plots.ipynb", sample_notebook_data)

        result = make_converter().convert("plots.ipynb")

        assert len(result.assets) == 1
        asset_path = project["assets"] / "plots" / result.assets[0]
        assert asset_path.exists()
        text = result.document_path.read_text()
        assert f"![Notebook Output](/nb-assets/plots/{result.assets[0]})" in text
        assert "<Figure" not in text

    def test_asset_names_stable_across_runs(self, project, write_notebook, make_converter, sample_notebook_data):
        write_notebook("plots.ipynb", sample_notebook_data)
        first = make_converter().convert("plots.ipynb", force=True).assets
        second = make_converter().convert("plots.ipynb", force=True).assets

        assert first == second

    def test_parse_error_leaves_previous_output(self, project, write_notebook, make_converter):
        write_notebook("a.ipynb", _hi_notebook())
        converter = make_converter()
        converter.convert("a.ipynb")
        before = (project["output"] / "a.mdx").read_text()

        (project["notebooks"] / "a.ipynb").write_text("{broken")

        with pytest.raises(NotebookParseError):
            converter.convert("a.ipynb")

        assert (project["output"] / "a.mdx").read_text() == before

    def test_failed_write_is_not_cached(self, project, write_notebook, make_converter):
        write_notebook("a.ipynb", _hi_notebook())
        converter = make_converter()

        with patch.object(converter.writer, "commit", side_effect=AssetWriteError("disk full")):
            with pytest.raises(AssetWriteError):
                converter.convert("a.ipynb")

        assert converter.cache.entries() == {}
        assert not project["cache"].exists()
        assert converter.convert("a.ipynb").status == ConversionStatus.CONVERTED

    def test_non_notebook_and_missing_files_are_ignored(self, project, make_converter):
        (project["notebooks"] / "notes.txt").write_text("x")
        converter = make_converter()

        assert converter.convert("notes.txt").status == ConversionStatus.IGNORED
        assert converter.convert("gone.ipynb").status == ConversionStatus.IGNORED

    def test_prune_stale_assets(self, project, write_notebook, make_converter, sample_notebook_data):
        write_notebook("plots.ipynb", sample_notebook_data)
        converter = make_converter(prune_stale_assets=True)
        old = converter.convert("plots.ipynb").assets[0]

        sample_notebook_data["cells"][2]["source"] = "changed()"
        sample_notebook_data["cells"][2]["outputs"][0]["metadata"] = {"changed": True}
        write_notebook("plots.ipynb", sample_notebook_data)
        new = converter.convert("plots.ipynb").assets[0]

        assert new != old
        assert [p.name for p in (project["assets"] / "plots").iterdir()] == [new]

    def test_from_config(self, project):
        config = NbPressConfig(
            notebooks_dir=project["notebooks"],
            output_dir=project["output"],
            assets_dir=project["assets"],
            cache_path=project["cache"],
            document_extension=".md",
            assets_url_root="static/nb",
        )
        cache = CacheStore(config.cache_path)

        converter = NotebookConverter.from_config(config, cache)

        assert converter.writer.document_path("x") == project["output"] / "x.md"
        assert converter.assembler.renderer.asset_url("x", "f.png") == "/static/nb/x/f.png"
        assert converter.resolver.layout == "../../layouts/MarkdownPostLayout.astro"


def test_slug_for():
    assert slug_for("my-post.ipynb") == "my-post"
    assert slug_for("v1.2.ipynb") == "v1.2"
