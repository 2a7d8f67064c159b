from pathlib import Path

import pytest
from PIL import Image

import process
from job import Job
from process import (
    DecodeError,
    EncodeError,
    ResizeError,
    clean_name,
    encoder_for,
    output_path,
    output_suffix,
    process_file,
    should_resize,
)
from scan import Found


@pytest.mark.parametrize(
    "size, width, height, expected",
    [
        ((100, 100), None, None, False),
        ((100, 100), 100, 100, False),
        ((101, 50), 100, 100, True),
        ((50, 101), 100, 100, True),
        ((5000, 5000), None, 4000, True),
        ((5000, 3000), None, 4000, False),
    ],
)
def test_should_resize(size, width, height, expected):
    assert should_resize(size, width, height) is expected


def test_output_suffix():
    assert output_suffix(Path("a/B.JPG")) == ".jpg"
    assert output_suffix(Path("a/B.JPG"), "WebP") == ".webp"


def test_clean_name():
    assert clean_name('bad:name?*"<>|') == "badname"
    assert clean_name("café ünïcode") == "cafe unicode"
    assert clean_name("???") == "image"
    assert clean_name("trailing. ") == "trailing"


def test_output_path_is_unique_within_run(tmp_path):
    taken = set()
    first = output_path(Found(Path("x/photo.jpg"), Path("photo.jpg")), tmp_path, "png", taken)
    second = output_path(Found(Path("x/photo.png"), Path("photo.png")), tmp_path, "png", taken)
    third = output_path(Found(Path("x/photo?.png"), Path("photo?.png")), tmp_path, "png", taken)

    assert first == tmp_path / "photo.png"
    assert second == tmp_path / "photo (1).png"
    assert third == tmp_path / "photo (2).png"


def test_encoder_for():
    assert encoder_for(".jpg", 80) == ("JPEG", {"quality": 80, "optimize": True})
    assert encoder_for(".jpeg", 80)[0] == "JPEG"
    assert encoder_for(".png", 80) == ("PNG", {"optimize": True})
    assert encoder_for(".webp", 60) == ("WEBP", {"quality": 60})
    assert encoder_for(".bmp", 80, original="PNG") == ("PNG", {})
    assert encoder_for(".bmp", 80, original="PNG", override=True) == (None, {})


def job_for(tmp_path, **kwargs):
    return Job.create(tmp_path, output=tmp_path / "out", **kwargs)


def test_large_jpeg_is_resized_and_reencoded(tmp_path, make_image):
    source = make_image(tmp_path / "photo1.jpg", size=(4000, 3000))
    output = tmp_path / "out" / "photo1.jpg"

    size = process_file(source, output, job_for(tmp_path, width=1024, quality=80))

    assert size == (1024, 768)

    with Image.open(output) as image:
        assert image.format == "JPEG"
        assert image.size == (1024, 768)


def test_small_png_is_unchanged(tmp_path, make_image):
    source = make_image(tmp_path / "icon.png", size=(16, 16), mode="RGBA", color=(1, 2, 3, 4))
    output = tmp_path / "out" / "icon.png"

    process_file(source, output, job_for(tmp_path, width=1024))

    with Image.open(source) as before, Image.open(output) as after:
        assert after.format == "PNG"
        assert after.size == (16, 16)
        assert list(after.getdata()) == list(before.getdata())


def test_crop_output_matches_box(tmp_path, make_image):
    source = make_image(tmp_path / "wide.png", size=(300, 100))
    output = tmp_path / "out" / "wide.png"

    process_file(source, output, job_for(tmp_path, width=50, height=50, mode="Crop"))

    with Image.open(output) as image:
        assert image.size == (50, 50)


def test_alpha_png_converted_to_jpeg(tmp_path, make_image):
    source = make_image(tmp_path / "alpha.png", size=(20, 20), mode="RGBA")
    output = tmp_path / "out" / "alpha.jpg"

    process_file(source, output, job_for(tmp_path, format="jpg"))

    with Image.open(output) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"


def test_webp_output(tmp_path, make_image):
    source = make_image(tmp_path / "a.png", size=(20, 20))
    output = tmp_path / "out" / "a.webp"

    process_file(source, output, job_for(tmp_path, format="webp", quality=50))

    with Image.open(output) as image:
        assert image.format == "WEBP"


def test_pass_through_keeps_decoded_format(tmp_path, make_image):
    source = make_image(tmp_path / "odd.img", size=(20, 20), format="PNG")
    output = tmp_path / "out" / "odd.img"

    process_file(source, output, job_for(tmp_path))

    with Image.open(output) as image:
        assert image.format == "PNG"


def test_requested_format_inferred_from_suffix(tmp_path, make_image):
    source = make_image(tmp_path / "a.png", size=(20, 20))
    output = tmp_path / "out" / "a.bmp"

    process_file(source, output, job_for(tmp_path, format="bmp"))

    with Image.open(output) as image:
        assert image.format == "BMP"


def test_unknown_requested_format_fails(tmp_path, make_image):
    source = make_image(tmp_path / "a.png", size=(20, 20))
    output = tmp_path / "out" / "a.nope"

    with pytest.raises(EncodeError):
        process_file(source, output, job_for(tmp_path, format="nope"))

    assert not output.exists()


def test_corrupt_file_raises_decode_error(tmp_path):
    source = tmp_path / "broken.jpg"
    source.write_bytes(b"definitely not a jpeg")

    with pytest.raises(DecodeError):
        process_file(source, tmp_path / "out" / "broken.jpg", job_for(tmp_path))


def test_input_is_not_modified(tmp_path, make_image):
    source = make_image(tmp_path / "big.png", size=(400, 400))
    before = source.read_bytes()

    process_file(source, tmp_path / "out" / "big.png", job_for(tmp_path, width=100))

    assert source.read_bytes() == before


def test_cmyk_jpeg_to_png(tmp_path, make_image):
    source = make_image(tmp_path / "c.jpg", size=(20, 20), mode="CMYK", color=(0, 0, 0, 0))
    output = tmp_path / "out" / "c.png"

    process_file(source, output, job_for(tmp_path, format="png"))

    with Image.open(output) as image:
        assert image.format == "PNG"
        assert image.mode == "RGB"


def test_palette_with_transparency_to_webp_keeps_alpha(tmp_path):
    source = tmp_path / "p.png"
    Image.new("P", (20, 20), 0).save(source, transparency=0)
    output = tmp_path / "out" / "p.webp"

    process_file(source, output, job_for(tmp_path, format="webp"))

    with Image.open(output) as image:
        assert image.mode == "RGBA"


def test_resize_failure_is_a_resize_error(tmp_path, make_image, monkeypatch):
    source = make_image(tmp_path / "a.png", size=(200, 200))

    def broken(image, mode, box):
        raise ValueError("height and width must be > 0")

    monkeypatch.setattr(process.modes, "resize", broken)

    with pytest.raises(ResizeError):
        process_file(source, tmp_path / "out" / "a.png", job_for(tmp_path, width=100))
