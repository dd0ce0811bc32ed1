"""Tests for image compression, loading and markdown image references."""

import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from publisher.images import (
    compress_image,
    extract_image_paths,
    extract_image_refs,
    load_image_base64,
    resolve_image_ref,
    save_and_compress_image,
)


def make_png(path: Path, size=(3000, 1000)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, (200, 10, 10, 255)).save(path, format="PNG")
    return path


class TestCompressImage:
    def test_fits_within_max_edge(self, tmp_path):
        src = make_png(tmp_path / "big.png")
        dst = compress_image(src, tmp_path / "out" / "nested" / "big.jpg")
        with Image.open(dst) as img:
            assert img.format == "JPEG"
            assert img.size == (1920, 640)

    def test_never_upscales(self, tmp_path):
        src = make_png(tmp_path / "small.png", size=(100, 50))
        dst = compress_image(src, tmp_path / "small.jpg")
        with Image.open(dst) as img:
            assert img.size == (100, 50)

    def test_unreadable_source(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        with pytest.raises(OSError):
            compress_image(bad, tmp_path / "bad.jpg")


class TestSaveAndCompressImage:
    def test_from_base64(self, tmp_path):
        buf = io.BytesIO()
        Image.new("RGB", (40, 20)).save(buf, format="PNG")
        payload = base64.b64encode(buf.getvalue()).decode()
        dst = save_and_compress_image(payload, "upload.png", tmp_path / "uploads" / "a.jpg")
        assert dst.exists()

    def test_invalid_base64(self, tmp_path):
        with pytest.raises(ValueError):
            save_and_compress_image("not base64!!", "x.png", tmp_path / "x.jpg")


class TestLoadImageBase64:
    def test_site_relative(self, tmp_path):
        img = tmp_path / "static" / "images" / "a.png"
        img.parent.mkdir(parents=True)
        img.write_bytes(b"abc")
        assert load_image_base64("/images/a.png", tmp_path) == base64.b64encode(b"abc").decode()

    def test_absolute_without_root(self, tmp_path):
        img = tmp_path / "a.png"
        img.write_bytes(b"abc")
        assert load_image_base64(str(img), None) == base64.b64encode(b"abc").decode()

    def test_relative_without_root(self):
        with pytest.raises(ValueError):
            load_image_base64("images/a.png", None)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_image_base64("/images/none.png", tmp_path)


class TestImageReferences:
    def test_extract_refs(self):
        content = (
            "intro ![a](/images/uploads/a.png) and ![](b.png)\n"
            "![quoted]( 'c.png' )\n"
            "[not an image](d.png)\n"
            "![broken](e.png\n"
        )
        assert extract_image_refs(content) == ["/images/uploads/a.png", "b.png", "c.png"]

    def test_resolve(self, tmp_path):
        images, root = tmp_path / "uploads", tmp_path / "site"
        assert resolve_image_ref("/images/uploads/x/a.png", images, root) == images / "a.png"
        assert resolve_image_ref("/images/uploads/a.png", None, root) is None
        assert resolve_image_ref("https://cdn.example.com/a.png", images, root) is None
        assert resolve_image_ref("/abs/a.png", images, root) == Path("/abs/a.png")
        assert resolve_image_ref("rel/a.png", images, root) == root / "rel/a.png"
        assert resolve_image_ref("rel/a.png", images, None) == images / "rel/a.png"
        assert resolve_image_ref("rel/a.png", None, None) is None

    def test_extract_paths_skips_unresolvable(self, tmp_path):
        content = "![](/images/uploads/a.png)\n![](http://x/y.png)"
        assert extract_image_paths(content, tmp_path, None) == [tmp_path / "a.png"]
