"""
Tests for image lookup priority and pixmap loading.
"""
from pathlib import Path

import pytest

from core.errors import ImageLoadFailure
from utils import image_loader
from utils.image_loader import (
    IMAGE_DIR_ENV,
    ImageLoader,
    default_image_dir,
    find_first_image,
    list_candidate_images,
)


def _touch(directory: Path, name: str) -> Path:
    path = directory / name
    path.write_bytes(b"")
    return path


class TestImageLookup:
    def test_png_wins_over_jpg_regardless_of_name(self, tmp_path):
        _touch(tmp_path, "a.jpg")
        png = _touch(tmp_path, "z.png")
        assert find_first_image(tmp_path) == png

    def test_jpg_used_when_no_png(self, tmp_path):
        jpg = _touch(tmp_path, "photo.jpg")
        _touch(tmp_path, "notes.txt")
        assert find_first_image(tmp_path) == jpg

    def test_order_within_extension_is_by_name(self, tmp_path):
        _touch(tmp_path, "b.png")
        _touch(tmp_path, "a.png")
        _touch(tmp_path, "c.jpg")
        names = [p.name for p in list_candidate_images(tmp_path)]
        assert names == ["a.png", "b.png", "c.jpg"]

    def test_extension_match_is_case_insensitive(self, tmp_path):
        upper = _touch(tmp_path, "SHOUT.PNG")
        assert find_first_image(tmp_path) == upper

    def test_other_formats_and_directories_ignored(self, tmp_path):
        _touch(tmp_path, "anim.gif")
        _touch(tmp_path, "photo.jpeg")
        (tmp_path / "folder.png").mkdir()
        assert find_first_image(tmp_path) is None

    def test_subdirectories_not_searched(self, tmp_path):
        nested = tmp_path / "nested"
        nested.mkdir()
        _touch(nested, "deep.png")
        assert find_first_image(tmp_path) is None

    def test_missing_directory_returns_none(self, tmp_path):
        assert find_first_image(tmp_path / "does-not-exist") is None


class TestDefaultImageDir:
    def test_env_var_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv(IMAGE_DIR_ENV, str(tmp_path))
        assert default_image_dir() == tmp_path

    def test_defaults_to_project_root(self, monkeypatch):
        monkeypatch.delenv(IMAGE_DIR_ENV, raising=False)
        expected = Path(image_loader.__file__).resolve().parent.parent
        assert default_image_dir() == expected


@pytest.mark.qt
class TestLoadPixmap:
    def test_loads_valid_image(self, qt_app, temp_image):
        pixmap = ImageLoader.load_pixmap(temp_image)
        assert not pixmap.isNull()
        assert pixmap.width() == 100

    def test_missing_file_raises(self, qt_app, tmp_path):
        missing = tmp_path / "gone.png"
        with pytest.raises(ImageLoadFailure) as exc_info:
            ImageLoader.load_pixmap(missing)
        assert exc_info.value.path == missing

    def test_corrupt_file_raises(self, qt_app, tmp_path):
        corrupt = tmp_path / "corrupt.png"
        corrupt.write_bytes(b"definitely not a png")
        with pytest.raises(ImageLoadFailure, match="corrupt.png"):
            ImageLoader.load_pixmap(corrupt)
