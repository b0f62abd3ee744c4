import time
import logging
from typing import Optional

from google import genai
from google.genai import types

from models.analysis import FileState, RemoteVideo


class VideoProcessingError(Exception):
    """Gemini could not process the uploaded video."""


class VideoProcessingTimeout(VideoProcessingError):
    """The uploaded video did not become ACTIVE within the polling bounds."""


def _state_name(state) -> str:
    # The SDK returns a FileState enum; fakes and older SDKs return plain strings
    if state is None:
        return FileState.STATE_UNSPECIFIED.value
    name = getattr(state, "name", None)
    return name if isinstance(name, str) else str(state)


class GeminiService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        client=None,
        model: str = "gemini-2.5-flash",
        poll_interval: float = 2.0,
        max_poll_attempts: Optional[int] = 150,
        poll_timeout: Optional[float] = 300.0,
        clock=time.monotonic,
    ):
        if client is None:
            if not api_key:
                raise ValueError("API Key for Gemini is required.")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = model
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.poll_timeout = poll_timeout
        self._clock = clock

    def _to_remote(self, file_obj, mime_type: str) -> RemoteVideo:
        return RemoteVideo(
            name=file_obj.name,
            uri=getattr(file_obj, "uri", None) or "",
            state=_state_name(getattr(file_obj, "state", None)),
            mime_type=getattr(file_obj, "mime_type", None) or mime_type,
        )

    def upload_video(self, local_path: str, mime_type: str = "video/mp4") -> RemoteVideo:
        """Upload a local video to the Gemini Files API and return its handle."""
        logging.info(f"Uploading video to Gemini: {local_path}")
        uploaded = self.client.files.upload(
            file=local_path,
            config=types.UploadFileConfig(mime_type=mime_type),
        )
        video = self._to_remote(uploaded, mime_type)
        logging.info(f"Uploaded as {video.name} (state={video.state})")
        return video

    def wait_until_active(self, video: RemoteVideo) -> RemoteVideo:
        """
        Poll the Files API until the video is ACTIVE.

        Raises VideoProcessingError when Gemini reports FAILED and
        VideoProcessingTimeout once max_poll_attempts or poll_timeout is exceeded.
        A falsy bound disables that particular limit.
        """
        deadline = self._clock() + self.poll_timeout if self.poll_timeout else None
        attempts = 0
        current = video

        while not current.is_active:
            if current.is_failed:
                logging.error(f"Gemini failed to process video {current.name}")
                raise VideoProcessingError(f"Gemini reported FAILED for {current.name}")
            if self.max_poll_attempts and attempts >= self.max_poll_attempts:
                raise VideoProcessingTimeout(
                    f"{current.name} still {current.state} after {attempts} polls"
                )
            if deadline is not None and self._clock() >= deadline:
                raise VideoProcessingTimeout(
                    f"{current.name} still {current.state} after {self.poll_timeout}s"
                )

            time.sleep(self.poll_interval)
            current = self._to_remote(self.client.files.get(name=current.name), video.mime_type)
            attempts += 1
            logging.info(f"Video state: {current.state}")

        return current

    def generate_feedback(self, video: RemoteVideo, prompt: str) -> str:
        """Single generation request referencing the uploaded video."""
        logging.info(f"Requesting analysis from {self.model} for {video.name}")
        response = self.client.models.generate_content(
            model=self.model,
            contents=[
                types.Content(
                    role="user",
                    parts=[
                        types.Part(
                            file_data=types.FileData(file_uri=video.uri, mime_type=video.mime_type)
                        ),
                        types.Part(text=prompt),
                    ],
                )
            ],
        )
        text = getattr(response, "text", None)
        if not text:
            logging.error("Gemini returned no text for video analysis")
            raise VideoProcessingError("Gemini returned an empty response")
        return text
