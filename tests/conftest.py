"""Pytest configuration and fixtures."""

import json
import logging
from datetime import date
from pathlib import Path

import pytest

from nbpress.cache import CacheStore
from nbpress.config import reset_config
from nbpress.converter import NotebookConverter
from nbpress.output import OutputWriter

# 1x1 PNG
TINY_PNG = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


@pytest.fixture(autouse=True)
def reset_config_after_test():
    """Reset global config after each test."""
    yield
    reset_config()


@pytest.fixture(autouse=True)
def reset_nbpress_logger():
    """Undo CLI logging setup so caplog sees nbpress records."""
    yield
    logger = logging.getLogger("nbpress")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def tiny_png():
    return TINY_PNG


@pytest.fixture
def sample_notebook_data():
    """Sample notebook data for testing."""
    return {
        "cells": [
            {
                "cell_type": "markdown",
                "source": ["# First Principles Analysis\n", "\n", "This explores the fundamentals."],
                "metadata": {},
            },
            {
                "cell_type": "code",
                "execution_count": 1,
                "source": "import numpy as np\nimport matplotlib.pyplot as plt",
                "outputs": [],
                "metadata": {},
            },
            {
                "cell_type": "code",
                "execution_count": 2,
                "source": ["plt.plot([1, 2, 3], [1, 4, 9])\n", "plt.show()"],
                "outputs": [
                    {
                        "data": {
                            "image/png": TINY_PNG,
                            "text/plain": ["<Figure size 640x480 with 1 Axes>"],
                        },
                        "metadata": {},
                        "output_type": "display_data",
                    }
                ],
                "metadata": {},
            },
        ],
        "metadata": {
            "kernelspec": {
                "display_name": "Python 3",
                "language": "python",
                "name": "python3",
            }
        },
        "nbformat": 4,
        "nbformat_minor": 5,
    }


@pytest.fixture
def project(tmp_path):
    """Directory layout of a site using nbpress."""
    root = tmp_path / "site"
    dirs = {
        "notebooks": root / "src" / "notebooks",
        "output": root / "src" / "pages" / "blog",
        "assets": root / "public" / "nb-assets",
        "cache": root / "scripts" / ".nb-cache.json",
    }
    dirs["notebooks"].mkdir(parents=True)
    return dirs


@pytest.fixture
def write_notebook(project):
    """Write a notebook dict into the project's notebooks directory."""

    def _write(filename: str, data: dict) -> Path:
        path = project["notebooks"] / filename
        path.write_text(json.dumps(data, indent=1), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_converter(project):
    """Build a converter over the project layout with a fixed date."""

    def _make(cache: CacheStore | None = None, **kwargs) -> NotebookConverter:
        if cache is None:
            cache = CacheStore(project["cache"])
            cache.load()
        return NotebookConverter(
            notebooks_dir=project["notebooks"],
            cache=cache,
            writer=OutputWriter(project["output"], project["assets"]),
            today=lambda: date(2024, 5, 1),
            **kwargs,
        )

    return _make
