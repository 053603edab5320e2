"""Tests for input resolution and the local recognition engine adapter."""

import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from PIL import Image

from recognition.engine import (
    EMPTY_RESULT,
    ImageBytes,
    RawText,
    RecognitionEngine,
    RecognitionResult,
    TesseractEngine,
    guess_mime,
    to_source,
)


def _png_bytes(size=(12, 8)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, "white").save(buf, format="PNG")
    return buf.getvalue()


class ExplodingEngine(RecognitionEngine):
    """Engine whose image path always fails."""
    def __init__(self):
        self.calls = 0

    def _recognize_image(self, image, segmentation_mode):
        self.calls += 1
        raise RuntimeError("tesseract crashed")


# -------------------- to_source --------------------

def test_str_becomes_raw_text():
    assert to_source("Amount 500") == RawText("Amount 500")


def test_bytes_like_become_image_bytes():
    assert to_source(b"abc") == ImageBytes(b"abc")
    assert to_source(bytearray(b"abc")) == ImageBytes(b"abc")
    assert to_source(memoryview(b"abc")) == ImageBytes(b"abc")


def test_path_is_read_with_mime(tmp_path):
    p = tmp_path / "receipt.PNG"
    p.write_bytes(b"png-data")
    src = to_source(p)
    assert src == ImageBytes(b"png-data", "image/png")


def test_binary_file_object():
    assert to_source(io.BytesIO(b"jpeg-data")) == ImageBytes(b"jpeg-data")


def test_text_file_object_rejected():
    with pytest.raises(TypeError):
        to_source(io.StringIO("text"))


def test_unsupported_type_rejected():
    with pytest.raises(TypeError, match="int"):
        to_source(42)


def test_sources_pass_through_unchanged():
    src = ImageBytes(b"x")
    assert to_source(src) is src


def test_guess_mime():
    assert guess_mime(ImageBytes(_png_bytes())) == "image/png"
    assert guess_mime(ImageBytes(b"garbage")) == "image/jpeg"
    assert guess_mime(ImageBytes(b"garbage", "image/webp")) == "image/webp"


# -------------------- RecognitionEngine --------------------

def test_raw_text_passes_through_collapsed():
    engine = ExplodingEngine()
    result = engine.recognize(RawText("  Amount\n\n PHP  500 "))
    assert result == RecognitionResult(text="Amount PHP 500", confidence=100.0)
    assert engine.calls == 0


def test_engine_failure_returns_empty_result():
    engine = ExplodingEngine()
    result = engine.recognize(ImageBytes(_png_bytes()), 6)
    assert result is EMPTY_RESULT
    assert result.text == ""
    assert result.confidence == 0.0


# -------------------- TesseractEngine --------------------

def _fake_backend(data):
    return SimpleNamespace(
        Output=SimpleNamespace(DICT="dict"),
        image_to_data=MagicMock(return_value=data),
    )


def test_tesseract_engine_joins_words_and_averages_confidence():
    engine = TesseractEngine(language="eng")
    engine._backend = _fake_backend({
        "text": ["", "Amount", " ", "PHP", "500"],
        "conf": ["-1", "90", "-1", "80", "70"],
    })

    result = engine.recognize(ImageBytes(_png_bytes()), 11)

    assert result.text == "Amount PHP 500"
    assert result.confidence == 80.0
    kwargs = engine._backend.image_to_data.call_args.kwargs
    assert kwargs["config"] == "--psm 11"
    assert kwargs["lang"] == "eng"
    assert kwargs["output_type"] == "dict"


def test_tesseract_engine_no_words_gives_zero_confidence():
    engine = TesseractEngine()
    engine._backend = _fake_backend({"text": ["", " "], "conf": ["-1", "-1"]})
    result = engine.recognize(ImageBytes(_png_bytes()), 6)
    assert result.text == ""
    assert result.confidence == 0.0


def test_tesseract_engine_undecodable_image_is_isolated():
    engine = TesseractEngine()
    engine._backend = _fake_backend({"text": [], "conf": []})
    result = engine.recognize(ImageBytes(b"not an image"), 6)
    assert result is EMPTY_RESULT
    engine._backend.image_to_data.assert_not_called()
