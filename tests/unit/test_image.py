"""Tests for PixelImage and the PNG codec."""

from __future__ import annotations

import io
import struct
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from conftest import oversized_png, png_chunk, raw_png, solid, write_png
from snapdiff.errors import ErrorKind, LoadError, SnapdiffError
from snapdiff.image import LFS_HEADER, PixelImage, decode_png, encode_png, load_image


class TestPixelImage:
    def test_shape_invariant(self) -> None:
        img = solid((1, 2, 3, 4), size=(5, 3))
        assert img.size == (5, 3)
        assert img.n_pixels == 15
        assert img.data.shape == (3, 5, 4)
        assert img.pixels().shape == (15, 4)

    def test_buffer_is_read_only(self) -> None:
        img = solid((0, 0, 0, 255))
        with pytest.raises(ValueError):
            img.data[0, 0, 0] = 1

    def test_source_array_is_not_shared(self) -> None:
        arr = np.zeros((2, 2, 4), dtype=np.uint8)
        img = PixelImage.from_array(arr)
        arr[0, 0] = (9, 9, 9, 9)
        assert img.pixel(0, 0) == (0, 0, 0, 0)

    def test_mismatched_buffer_rejected(self) -> None:
        with pytest.raises(ValueError, match="does not match"):
            PixelImage(width=3, height=2, data=np.zeros((2, 2, 4), dtype=np.uint8))

    def test_wrong_channel_count_rejected(self) -> None:
        with pytest.raises(ValueError):
            PixelImage.from_array(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_pixel_is_row_major(self) -> None:
        arr = np.zeros((2, 3, 4), dtype=np.uint8)
        arr[1, 2] = (10, 20, 30, 40)
        img = PixelImage.from_array(arr)
        assert img.pixel(2, 1) == (10, 20, 30, 40)
        assert tuple(img.pixels()[5]) == (10, 20, 30, 40)

    def test_read_only_array_adopted(self) -> None:
        arr = np.zeros((2, 3, 4), dtype=np.uint8)
        arr.flags.writeable = False
        assert PixelImage.from_array(arr).data is arr

    def test_equality(self) -> None:
        assert solid((1, 1, 1, 1)) == solid((1, 1, 1, 1))
        assert solid((1, 1, 1, 1)) != solid((1, 1, 1, 2))
        assert solid((1, 1, 1, 1), size=(2, 8)) != solid((1, 1, 1, 1), size=(8, 2))


class TestCodec:
    def test_round_trip_is_lossless(self) -> None:
        rng = np.random.default_rng(0)
        arr = rng.integers(0, 256, size=(7, 5, 4), dtype=np.uint8)
        img = PixelImage.from_array(arr)
        decoded = decode_png(encode_png(img))
        assert decoded == img
        assert np.array_equal(decoded.data, arr)

    def test_round_trip_keeps_color_under_zero_alpha(self) -> None:
        img = solid((200, 100, 50, 0), size=(2, 2))
        assert decode_png(encode_png(img)) == img

    def test_encoded_is_rgba8_png(self) -> None:
        data = encode_png(solid((1, 2, 3, 4)))
        assert data.startswith(b"\x89PNG\r\n\x1a\n")
        with Image.open(io.BytesIO(data)) as img:
            assert img.mode == "RGBA"

    def test_lfs_pointer_detected(self) -> None:
        stub = LFS_HEADER + b"oid sha256:abcdef\nsize 1234\n"
        with pytest.raises(SnapdiffError) as excinfo:
            decode_png(stub)
        assert excinfo.value.kind is ErrorKind.EXTERNAL_POINTER_STUB
        assert "LFS" in str(excinfo.value)

    def test_garbage_is_decode_error(self) -> None:
        with pytest.raises(SnapdiffError) as excinfo:
            decode_png(b"not an image")
        assert excinfo.value.kind is ErrorKind.DECODE_ERROR

    def test_truncated_png_is_decode_error(self) -> None:
        rng = np.random.default_rng(1)
        noise = PixelImage.from_array(rng.integers(0, 256, size=(32, 32, 4), dtype=np.uint8))
        data = encode_png(noise)
        with pytest.raises(SnapdiffError) as excinfo:
            decode_png(data[: len(data) // 2])
        assert excinfo.value.kind is ErrorKind.DECODE_ERROR

    def test_oversized_header_is_decode_error(self) -> None:
        with pytest.raises(SnapdiffError) as excinfo:
            decode_png(oversized_png())
        assert excinfo.value.kind is ErrorKind.DECODE_ERROR

    def test_other_formats_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "a.bmp"
        Image.new("RGB", (2, 2), (1, 2, 3)).save(path, format="BMP")
        with pytest.raises(SnapdiffError) as excinfo:
            decode_png(path.read_bytes())
        assert excinfo.value.kind is ErrorKind.DECODE_ERROR
        assert "Not a PNG" in str(excinfo.value)


class TestModeNormalization:
    def test_rgb(self, tmp_path: Path) -> None:
        path = write_png(tmp_path / "a.png", (255, 0, 0), mode="RGB")
        img = load_image(path)
        assert isinstance(img, PixelImage)
        assert img.pixel(0, 0) == (255, 0, 0, 255)

    def test_grayscale(self, tmp_path: Path) -> None:
        path = write_png(tmp_path / "a.png", 128, mode="L")
        img = load_image(path)
        assert isinstance(img, PixelImage)
        assert img.pixel(3, 3) == (128, 128, 128, 255)

    def test_grayscale_alpha(self, tmp_path: Path) -> None:
        path = write_png(tmp_path / "a.png", (50, 100), mode="LA")
        img = load_image(path)
        assert isinstance(img, PixelImage)
        assert img.pixel(0, 0) == (50, 50, 50, 100)

    def test_palette(self, tmp_path: Path) -> None:
        pal = Image.new("P", (4, 4), 0)
        pal.putpalette([10, 20, 30] + [0] * 765)
        path = tmp_path / "a.png"
        pal.save(path)
        img = load_image(path)
        assert isinstance(img, PixelImage)
        assert img.pixel(1, 1) == (10, 20, 30, 255)

    def test_sixteen_bit_grayscale(self, tmp_path: Path) -> None:
        path = write_png(tmp_path / "a.png", 0x8000, mode="I;16")
        img = load_image(path)
        assert isinstance(img, PixelImage)
        assert img.pixel(0, 0) == (128, 128, 128, 255)

    def test_sixteen_bit_transparency_key(self, tmp_path: Path) -> None:
        rows = b"\x00" + struct.pack(">HH", 0x8000, 0x1234)
        trns = png_chunk(b"tRNS", struct.pack(">H", 0x8000))
        path = tmp_path / "a.png"
        path.write_bytes(raw_png(2, 1, bit_depth=16, color_type=0, rows=rows, chunks=(trns,)))
        img = load_image(path)
        assert isinstance(img, PixelImage)
        assert img.pixel(0, 0) == (128, 128, 128, 0)
        assert img.pixel(1, 0) == (18, 18, 18, 255)


class TestLoadImage:
    def test_missing_file(self, tmp_path: Path) -> None:
        err = load_image(tmp_path / "missing.png")
        assert isinstance(err, LoadError)
        assert err.kind is ErrorKind.FILE_NOT_FOUND
        assert err.is_missing

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        (tmp_path / "dir.png").mkdir()
        err = load_image(tmp_path / "dir.png")
        assert isinstance(err, LoadError)
        assert err.kind is ErrorKind.FILE_NOT_FOUND

    def test_invalid_image(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.png"
        bad.write_text("not an image")
        err = load_image(bad)
        assert isinstance(err, LoadError)
        assert err.kind is ErrorKind.DECODE_ERROR
        assert err.path == bad

    def test_lfs_stub(self, tmp_path: Path) -> None:
        stub = tmp_path / "stub.png"
        stub.write_bytes(LFS_HEADER + b"oid sha256:0\nsize 1\n")
        err = load_image(stub)
        assert isinstance(err, LoadError)
        assert err.kind is ErrorKind.EXTERNAL_POINTER_STUB
        assert not err.is_missing

    def test_oversized_header(self, tmp_path: Path) -> None:
        path = tmp_path / "huge.png"
        path.write_bytes(oversized_png())
        err = load_image(path)
        assert isinstance(err, LoadError)
        assert err.kind is ErrorKind.DECODE_ERROR

    def test_valid(self, tmp_path: Path) -> None:
        path = write_png(tmp_path / "ok.png", (1, 2, 3, 4), size=(3, 2))
        img = load_image(path)
        assert img == solid((1, 2, 3, 4), size=(3, 2))
