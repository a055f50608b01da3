"""
Shared fixtures: synthetic Bodymovin documents and on-disk image assets.
"""

import json

import pytest
from PIL import Image

from helpers import RED, BLUE, solid_image


@pytest.fixture
def red_square():
    return solid_image(50, 50, RED)


@pytest.fixture
def blue_square():
    return solid_image(50, 50, BLUE)


@pytest.fixture
def bodymovin_json():
    """Red square document from the end-to-end scenario, as authored JSON."""
    return {
        "v": "5.7.4",
        "nm": "red square",
        "fr": 30,
        "ip": 0,
        "op": 11,
        "w": 100,
        "h": 100,
        "assets": [
            {"id": "image_0", "w": 50, "h": 50, "u": "images/", "p": "red.png", "e": 0},
        ],
        "layers": [
            {
                "ind": 1,
                "nm": "red.png",
                "refId": "image_0",
                "ip": 0,
                "op": 10,
                "ks": {
                    "o": {"a": 0, "k": 100},
                    "r": {"a": 0, "k": 0},
                    "p": {"a": 0, "k": [50, 50, 0]},
                    "a": {"a": 0, "k": [25, 25, 0]},
                    "s": {"a": 0, "k": [100, 100, 100]},
                },
            }
        ],
    }


@pytest.fixture
def animation_on_disk(tmp_path, bodymovin_json):
    """Writes the document and its asset; returns (json_path, assets_dir)."""
    assets_dir = tmp_path / "images"
    assets_dir.mkdir()
    Image.fromarray(solid_image(50, 50, RED), 'RGBA').save(assets_dir / "red.png")

    json_path = tmp_path / "bodymovin.json"
    json_path.write_text(json.dumps(bodymovin_json))
    return json_path, assets_dir
