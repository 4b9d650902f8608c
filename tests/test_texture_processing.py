import io

import numpy as np
import pytest
from PIL import Image

from assetpack.codec import decode_texture_meta, encode_texture_meta
from assetpack.codec.texture import check_level_size
from assetpack.errors import (
    CorruptDataError,
    ImageDecodeError,
    E_IMAGE_DECODE,
    E_INVALID_PARAM,
    E_SIZE_MISMATCH,
)
from assetpack.models import FORMAT_RGBA8_UNORM_SRGB, TextureMeta
from assetpack.processing import build_mip_chain, decode_image, resample_srgb
from assetpack.processing.texture import (
    is_pow2,
    mip_level_count,
    mip_dimensions,
    pow2_ceil,
    single_level,
)


def _png(width: int, height: int, color=(200, 100, 50, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def test_pow2_helpers():
    assert [is_pow2(n) for n in (1, 2, 3, 64, 100)] == [True, True, False, True, False]
    assert [pow2_ceil(n) for n in (1, 2, 3, 100, 128, 129)] == [1, 2, 4, 128, 128, 256]
    assert mip_level_count(128, 128) == 8
    assert mip_level_count(64, 16) == 7
    assert mip_level_count(1, 1) == 1


def test_decode_image_gives_rgba_rows():
    pixels = decode_image(_png(5, 3))
    assert pixels.shape == (3, 5, 4)
    assert pixels.dtype == np.uint8
    assert tuple(pixels[0, 0]) == (200, 100, 50, 255)


def test_decode_image_converts_rgb_to_rgba():
    buf = io.BytesIO()
    Image.new("RGB", (2, 2), (10, 20, 30)).save(buf, format="PNG")
    pixels = decode_image(buf.getvalue())
    assert tuple(pixels[1, 1]) == (10, 20, 30, 255)


def test_decode_garbage_fails():
    with pytest.raises(ImageDecodeError) as ei:
        decode_image(b"not an image", "junk.png")
    assert ei.value.code == E_IMAGE_DECODE
    assert ei.value.context == {"path": "junk.png"}


def test_non_pow2_source_gets_pow2_base_and_full_chain():
    chain = build_mip_chain(decode_image(_png(100, 100)))
    assert (chain.width, chain.height) == (128, 128)
    assert chain.mip_levels == 8
    for level, pixels in enumerate(chain.levels):
        size = 128 >> level
        assert pixels.shape == (size, size, 4)
        assert pixels.dtype == np.uint8


def test_non_square_chain_dimensions():
    chain = build_mip_chain(decode_image(_png(64, 16)))
    dims = [(p.shape[1], p.shape[0]) for p in chain.levels]
    assert dims == [(64, 16), (32, 8), (16, 4), (8, 2), (4, 1), (2, 1), (1, 1)]
    meta = chain.meta()
    for level in range(meta.mip_levels):
        assert meta.level_dimensions(level) == dims[level]


def test_every_level_is_resampled_from_the_source():
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(60, 100, 4), dtype=np.uint8)
    chain = build_mip_chain(pixels)
    assert (chain.width, chain.height) == (128, 64)
    from_base = []
    for k in range(1, chain.mip_levels):
        w, h = mip_dimensions(128, 64, k)
        np.testing.assert_array_equal(chain.levels[k], resample_srgb(pixels, w, h))
        rebased = resample_srgb(chain.levels[0], w, h)
        from_base.append(np.array_equal(chain.levels[k], rebased))
    assert not all(from_base)


def test_pow2_source_level_zero_is_untouched():
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(8, 4, 4), dtype=np.uint8)
    chain = build_mip_chain(pixels)
    assert (chain.width, chain.height) == (4, 8)
    np.testing.assert_array_equal(chain.levels[0], pixels)


def test_solid_colour_survives_resampling():
    chain = build_mip_chain(decode_image(_png(100, 60)))
    for pixels in chain.levels:
        diff = np.abs(pixels.astype(int) - np.array([200, 100, 50, 255]))
        assert diff.max() <= 1


def test_transparent_pixels_do_not_bleed_colour():
    pixels = np.zeros((4, 4, 4), dtype=np.uint8)
    pixels[:, :2] = (255, 0, 0, 255)  # left half opaque red
    pixels[:, 2:] = (0, 255, 0, 0)  # right half transparent green
    out = resample_srgb(pixels, 1, 1)
    r, g, b, a = (int(v) for v in out[0, 0])
    assert g == 0
    assert r >= 250
    assert 100 <= a <= 155


def test_raw_texture_is_single_level():
    chain = single_level(decode_image(_png(100, 30)))
    assert (chain.width, chain.height, chain.mip_levels) == (100, 30, 1)


def test_meta_codec():
    meta = TextureMeta(128, 64, 8)
    data = encode_texture_meta(meta)
    assert len(data) == 16
    assert decode_texture_meta(data) == meta
    assert meta.format == FORMAT_RGBA8_UNORM_SRGB


def test_meta_wrong_size_is_corrupt():
    with pytest.raises(CorruptDataError) as ei:
        decode_texture_meta(b"\x00" * 12)
    assert ei.value.code == E_SIZE_MISMATCH


def test_meta_too_many_mips_is_corrupt():
    data = encode_texture_meta(TextureMeta(4, 4, 4))
    with pytest.raises(CorruptDataError) as ei:
        decode_texture_meta(data)
    assert ei.value.code == E_INVALID_PARAM


def test_level_size_check():
    meta = TextureMeta(8, 4, 4)
    check_level_size(meta, 0, 8 * 4 * 4)
    check_level_size(meta, 3, 1 * 1 * 4)
    with pytest.raises(CorruptDataError):
        check_level_size(meta, 1, 10)
