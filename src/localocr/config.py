# localocr/config.py
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, Optional

# Language codes understood by the Tesseract backend, with display names
SUPPORTED_LANGUAGES: Dict[str, str] = {
    "eng": "English",
    "chi_sim": "Chinese (Simplified)",
    "chi_tra": "Chinese (Traditional)",
}
DEFAULT_LANGUAGE = "eng"

# Map common short codes to Tesseract's traineddata names
_LANG_ALIASES = {
    "en": "eng",
    "zh": "chi_sim",
    "zh-cn": "chi_sim",
    "zh_cn": "chi_sim",
    "zh-hans": "chi_sim",
    "zh-tw": "chi_tra",
    "zh_tw": "chi_tra",
    "zh-hant": "chi_tra",
}

# Accepted input types, keyed by MIME type
SUPPORTED_FILE_TYPES: Dict[str, tuple] = {
    "application/pdf": (".pdf",),
    "image/tiff": (".tiff", ".tif"),
    "image/png": (".png",),
    "image/jpeg": (".jpg", ".jpeg"),
}

DEFAULT_RENDER_SCALE = 1.5

PROGRESS_MODES = ("per_call", "weighted")

DEFAULT_OCR_BACKEND = "localocr.ocr_backends.tesseract_backend.TesseractOCREngine"


def normalize_language(code: Optional[str]) -> str:
    """
    Map an alias like 'en' or 'zh-TW' to the Tesseract code.
    Unknown codes are returned lowercased and otherwise untouched, the engine decides if they load.
    """
    if not code:
        return DEFAULT_LANGUAGE
    c = str(code).strip()
    return _LANG_ALIASES.get(c.lower(), c if c in SUPPORTED_LANGUAGES else c.lower())


@dataclass
class OCRConfig:
    """Configuration for a localocr processing run."""
    language: str = DEFAULT_LANGUAGE
    render_scale: float = DEFAULT_RENDER_SCALE

    # per_call reproduces the classic indicator, weighted is monotonic over the batch
    progress_mode: str = "per_call"

    ocr_backend: str = DEFAULT_OCR_BACKEND
    ocr_backend_kwargs: Dict[str, Any] = field(default_factory=dict)

    pdf_engine: str = "pymupdf"

    error_log_path: Optional[Path] = None
    show_progress_bar: bool = True

    def __post_init__(self):
        self.language = normalize_language(self.language)
        if self.render_scale is None or float(self.render_scale) <= 0:
            raise ValueError(f"render_scale must be positive, got {self.render_scale!r}")
        self.render_scale = float(self.render_scale)
        if self.progress_mode not in PROGRESS_MODES:
            raise ValueError(f"Unknown progress mode: '{self.progress_mode}'. Supported modes: {list(PROGRESS_MODES)}")
        if isinstance(self.error_log_path, str):
            self.error_log_path = Path(self.error_log_path)

    def to_dict(self):
        """Converts config to a plain dictionary (paths as strings)."""
        d = asdict(self)
        for key, value in d.items():
            if isinstance(value, Path):
                d[key] = str(value)
        return d

    @classmethod
    def from_dict(cls, config_dict: dict):
        d = dict(config_dict)

        if isinstance(d.get("error_log_path"), str):
            d["error_log_path"] = Path(d["error_log_path"])

        # allow explicit None to mean use default
        for key in ["language", "render_scale", "progress_mode", "ocr_backend", "ocr_backend_kwargs", "pdf_engine", "show_progress_bar"]:
            if key in d and d[key] is None:
                d.pop(key)

        return cls(**d)
