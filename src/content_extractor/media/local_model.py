"""Local speech-to-text with faster-whisper (CTranslate2, CPU)."""

import logging
import threading
from pathlib import Path

from faster_whisper import WhisperModel

logger = logging.getLogger(__name__)


class LocalSpeechModel:
    """Lazily loaded Whisper model shared by all requests in the process."""

    def __init__(self, model_size: str = "small", compute_type: str = "int8"):
        self.model_size = model_size
        self.compute_type = compute_type
        self._model: WhisperModel | None = None
        self._lock = threading.Lock()

    def _load(self) -> WhisperModel:
        with self._lock:
            if self._model is None:
                logger.info("Loading faster-whisper model %s (%s)", self.model_size, self.compute_type)
                try:
                    self._model = WhisperModel(self.model_size, device="cpu", compute_type=self.compute_type)
                except (RuntimeError, ValueError) as exc:
                    logger.warning("Failed to load with %s, trying float32: %s", self.compute_type, exc)
                    self._model = WhisperModel(self.model_size, device="cpu", compute_type="float32")
            return self._model

    def transcribe(self, audio_path: Path, language: str | None = None) -> str:
        """Blocking transcription. Run it in a worker thread."""
        model = self._load()
        segments, info = model.transcribe(str(audio_path), language=language, beam_size=5, vad_filter=True)
        text = " ".join(segment.text.strip() for segment in segments).strip()
        logger.info("Local transcription: %d chars, language %s", len(text), info.language)
        return text
