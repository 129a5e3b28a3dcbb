# localocr/ocr_backends/tesseract_backend.py
from __future__ import annotations

from typing import Any, Dict, Optional
import io
import os
import platform
import re
import shutil
from pathlib import Path

import numpy as np
from PIL import Image
import pytesseract as pt

from ..exceptions import EngineInitError, RecognitionError
from .base import BaseOCREngine, ProgressCallback, emit


def _as_int(x, default: int) -> int:
    try:
        if isinstance(x, str):
            x = x.strip().rstrip(",}] ")
        return int(x)
    except Exception:
        m = re.search(r"-?\d+", str(x))
        return int(m.group()) if m else default


def resolve_tesseract_cmd() -> str | None:
    # 1) explicit env override
    cmd = os.getenv("TESSERACT_CMD")
    if cmd and Path(cmd).exists():
        return cmd

    # 2) look on PATH
    cmd = shutil.which("tesseract")
    if cmd:
        return cmd

    # 3) common fallbacks by OS
    system = platform.system()
    if system == "Windows":
        candidates = [
            r"C:\Program Files\Tesseract-OCR\tesseract.exe",
            r"C:\Program Files (x86)\Tesseract-OCR\tesseract.exe",
        ]
    elif system == "Darwin":
        candidates = [
            "/opt/homebrew/bin/tesseract",
            "/usr/local/bin/tesseract",
        ]
    else:
        candidates = [
            "/usr/bin/tesseract",
            "/usr/local/bin/tesseract",
            "/snap/bin/tesseract",
        ]

    for p in candidates:
        if Path(p).exists():
            return p
    return None


class TesseractOCREngine(BaseOCREngine):
    """
    Pytesseract-based backend.

    Kwargs supported (all optional):
      - tesseract_cmd: full path to tesseract binary (Windows)
      - tessdata_prefix: path to tessdata directory
      - oem: 0..3 (default 3 = LSTM)
      - psm: page segmentation mode (default 3 = fully automatic)
      - preserve_interword_spaces: bool (default False)
      - extra_config: str of extra flags (appended to config string)
      - (ignored safely if present): gpu, use_gpu, languages, lang
    """

    def __init__(self, **kwargs: Dict[str, Any]):
        k = dict(kwargs)  # don't mutate caller's dict

        # the language comes from initialize(), the run decides it
        for junk in ("gpu", "use_gpu", "languages", "lang"):
            k.pop(junk, None)

        tesseract_cmd = k.pop("tesseract_cmd", None) or k.pop("tesseract_path", None) or resolve_tesseract_cmd()
        if tesseract_cmd:
            pt.pytesseract.tesseract_cmd = str(tesseract_cmd)

        tessdata_prefix = k.pop("tessdata_prefix", None)
        if tessdata_prefix:
            os.environ["TESSDATA_PREFIX"] = str(tessdata_prefix)

        oem = _as_int(k.pop("oem", 3), 3)
        psm = _as_int(k.pop("psm", 3), 3)
        preserve_spaces = bool(k.pop("preserve_interword_spaces", False))
        extra_cfg = str(k.pop("extra_config", "")).strip()

        cfg_parts = [f"--oem {oem}", f"--psm {psm}"]
        if preserve_spaces:
            cfg_parts.append("-c preserve_interword_spaces=1")
        if extra_cfg:
            cfg_parts.append(extra_cfg)
        self._config = " ".join(cfg_parts)

        self.language: Optional[str] = None

    def initialize(self, language: str, progress: Optional[ProgressCallback] = None) -> None:
        emit(progress, "loading tesseract core", 0.0)
        try:
            pt.get_tesseract_version()
        except Exception as e:
            raise EngineInitError(f"Tesseract is not available: {e}") from e
        emit(progress, "loading tesseract core", 1.0)

        emit(progress, "loading language traineddata", 0.0)
        try:
            available = set(pt.get_languages(config=""))
        except Exception as e:
            raise EngineInitError(f"Cannot list Tesseract languages: {e}") from e
        if not language or language not in available:
            raise EngineInitError(
                f"Language '{language}' is not installed for Tesseract. Available: {sorted(available)}"
            )
        emit(progress, "loading language traineddata", 1.0)

        self.language = language
        emit(progress, "initialized api", 1.0)

    def _to_pil(self, img) -> Image.Image:
        if isinstance(img, Image.Image):
            return img
        if isinstance(img, np.ndarray):
            if img.ndim == 2:
                return Image.fromarray(img)
            # Heuristic: if last dim is 3/4 treat as RGB
            return Image.fromarray(img[..., :3])
        if isinstance(img, (bytes, bytearray, memoryview)):
            im = Image.open(io.BytesIO(bytes(img)))
            im.load()
            return im
        # As a last resort, try opening via PIL (path-like)
        return Image.open(img).convert("RGB")

    def recognize(self, image: Any, progress: Optional[ProgressCallback] = None) -> str:
        if self.language is None:
            raise RecognitionError("Engine is not initialized")
        emit(progress, "recognizing text", 0.0)
        try:
            pil_im = self._to_pil(image)
            txt = pt.image_to_string(pil_im, lang=self.language, config=self._config)
        except Exception as e:
            raise RecognitionError(f"Tesseract failed to recognize image: {e}") from e
        emit(progress, "recognizing text", 1.0)
        return txt.strip()

    def terminate(self) -> None:
        self.language = None
