import logging

from models.analysis import AnalysisRequest
from services.gemini_service import GeminiService
from services.prompts import build_coaching_prompt
from services.scratch_storage import ScratchStorage


class CoachService:
    """
    Orchestrates one analysis: stage a copy of the upload, hand it to Gemini,
    wait for processing, ask for coaching feedback and clean up.

    Route handlers receive a single instance through the app factory; it holds
    no Flask state of its own.
    """

    def __init__(self, gemini: GeminiService, storage: ScratchStorage, mime_type: str = "video/mp4"):
        self._gemini = gemini
        self.storage = storage
        self.mime_type = mime_type

    def analyze(self, request: AnalysisRequest) -> str:
        """
        Return the model's feedback text. Any failure propagates; the staged
        copy is always removed, the original upload only after success.
        """
        staged_path = None
        try:
            staged_path = self.storage.stage_copy(request.uploaded_path)

            video = self._gemini.upload_video(staged_path, mime_type=self.mime_type)
            logging.info("Uploaded. Processing video...")
            video = self._gemini.wait_until_active(video)

            logging.info("Video ready. Running analysis...")
            prompt = build_coaching_prompt(request.perspective)
            feedback = self._gemini.generate_feedback(video, prompt)
        finally:
            self.storage.cleanup(staged_path)

        self.storage.cleanup(request.uploaded_path)
        return feedback
