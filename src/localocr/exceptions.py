# localocr/exceptions.py
class LocalOCRError(Exception):
    """Base exception for the localocr library."""
    pass

class UnsupportedTypeError(LocalOCRError):
    """Raised when a file is not one of the accepted document types."""
    pass

class FileProcessingError(LocalOCRError):
    """Raised when a single file fails to process."""
    pass

class RenderError(FileProcessingError):
    """Raised when a PDF cannot be opened or one of its pages cannot be rendered."""
    pass

class RecognitionError(FileProcessingError):
    """Raised when the OCR engine fails on an image or page."""
    pass

class EngineInitError(LocalOCRError):
    """Raised when the OCR engine cannot be loaded for the selected language. Fatal for the run."""
    pass
