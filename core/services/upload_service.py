"""
File upload controller.

Validates selected files, builds image previews and drives each accepted
file through uploading -> uploaded|completed|error. Uploads in a batch run
one after another; a failed file is marked as such and the batch continues.

Two transports, chosen by UploadConfig.upload_mode:
- simulate: progress advances by random increments on a timer task
- api: one multipart POST per file through BookingApiClient

Timer tasks are tracked and cancelled by close(); nothing fires afterwards.
"""

import asyncio
import base64
import logging
import random
import secrets
from fnmatch import fnmatchcase
from typing import Callable, Iterable

from clients.booking_api_client import BookingApiClient, BookingApiError
from core.config import UploadConfig, MB
from core.event_bus import EventBus
from core.events import UserNotice, FileUploadFinished, CreativeSubmitted
from core.exceptions import UploadControllerClosed
from core.models import FileStatus, SelectedFile, UploadedFile

logger = logging.getLogger(__name__)

FilesChangeCallback = Callable[[list[UploadedFile]], None]

SIMULATED_MAX_INCREMENT = 30


class FileUploadController:
    """Per-dialog upload state. Create one per upload surface and close() it on teardown."""

    def __init__(
        self,
        config: UploadConfig | None = None,
        on_files_change: FilesChangeCallback | None = None,
        api_client: BookingApiClient | None = None,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or UploadConfig()
        self.on_files_change = on_files_change
        self.api_client = api_client
        self.event_bus = event_bus or EventBus()
        self._rng = rng or random.Random()
        self._files: list[UploadedFile] = []
        self._tasks: set[asyncio.Task] = set()
        self._closed = False
        self.is_uploading = False

        if self.config.upload_mode == "api" and api_client is None:
            raise ValueError("api_client is required when upload_mode is 'api'")

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def files(self) -> list[UploadedFile]:
        return list(self._files)

    @property
    def completed_files(self) -> list[UploadedFile]:
        return [f for f in self._files if f.is_done]

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_file(self, file_id: str) -> UploadedFile | None:
        for f in self._files:
            if f.id == file_id:
                return f
        return None

    # -------------------------------------------------------------------------
    # Validation and previews
    # -------------------------------------------------------------------------

    def validate_file(self, file: SelectedFile) -> str | None:
        """
        Check a file against the size and type limits.

        Returns:
            User-facing error message, or None if the file is acceptable
        """
        if file.size > self.config.max_file_size:
            return f"File size must be less than {round(self.config.max_file_size / MB)}MB"

        if not self.is_accepted_type(file.mime_type):
            return "File type not supported"

        return None

    def is_accepted_type(self, mime_type: str) -> bool:
        """Match against accepted patterns; 'image/*' covers every image subtype."""
        if not mime_type:
            return False
        mime_type = mime_type.lower()
        return any(
            fnmatchcase(mime_type, pattern.lower())
            for pattern in self.config.accepted_file_types
        )

    async def generate_preview(self, file: SelectedFile) -> str | None:
        """Data URL for image files when previews are enabled, else None."""
        if not self.config.allow_preview or not file.mime_type.startswith("image/"):
            return None
        encoded = await asyncio.to_thread(base64.b64encode, file.content)
        return f"data:{file.mime_type};base64,{encoded.decode('ascii')}"

    # -------------------------------------------------------------------------
    # Selection and removal
    # -------------------------------------------------------------------------

    async def select_files(self, files: Iterable[SelectedFile]) -> list[UploadedFile]:
        """
        Validate, add and upload a batch of files.

        A batch that would push the collection past max_files is rejected
        whole. Otherwise each file is validated on its own; rejected files
        get an individual notice and the rest carry on.

        Returns:
            The accepted files in their final state

        Raises:
            UploadControllerClosed: If close() has been called
        """
        if self._closed:
            raise UploadControllerClosed("Upload controller is closed")

        batch = list(files)
        if len(self._files) + len(batch) > self.config.max_files:
            logger.warning(
                f"Rejected batch of {len(batch)} file(s): "
                f"{len(self._files)} already selected, limit {self.config.max_files}"
            )
            self.event_bus.publish(UserNotice.error(
                "Too many files",
                f"Maximum {self.config.max_files} files allowed",
            ))
            return []

        accepted: list[UploadedFile] = []
        for file in batch:
            error = self.validate_file(file)
            if error:
                logger.info(f"Rejected file {file.name}: {error}")
                self.event_bus.publish(UserNotice.error("Invalid file", f"{file.name}: {error}"))
                continue

            accepted.append(UploadedFile(
                id=secrets.token_hex(6),
                file=file,
                preview=await self.generate_preview(file),
                status=FileStatus.UPLOADING,
                progress=0,
            ))

        if not accepted:
            return []

        self._set_files(self._files + accepted)

        self.is_uploading = True
        try:
            for uploaded in accepted:
                if self._closed:
                    break
                if self.get_file(uploaded.id) is None:
                    continue  # removed before its turn
                if self.config.upload_mode == "api":
                    await self._api_upload(uploaded)
                else:
                    await self._simulate_upload(uploaded.id)
        finally:
            self.is_uploading = False

        return [self.get_file(f.id) or f for f in accepted]

    def remove_file(self, file_id: str) -> bool:
        """
        Remove a file from the collection.

        Returns:
            False if no file has that id
        """
        remaining = [f for f in self._files if f.id != file_id]
        if len(remaining) == len(self._files):
            return False
        self._set_files(remaining)
        return True

    def reset(self) -> None:
        """Drop every file from the collection."""
        self._set_files([])

    async def close(self) -> None:
        """Cancel pending timers and refuse further uploads."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    # -------------------------------------------------------------------------
    # Transports
    # -------------------------------------------------------------------------

    async def _simulate_upload(self, file_id: str) -> None:
        task = asyncio.create_task(self._run_simulation(file_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        try:
            await task
        except asyncio.CancelledError:
            if not self._closed:
                raise
            logger.debug(f"Simulated upload cancelled for file {file_id}", extra={"file_id": file_id})

    async def _run_simulation(self, file_id: str) -> None:
        progress = 0.0
        while True:
            await asyncio.sleep(self.config.simulate_tick_seconds)
            if self.get_file(file_id) is None:
                return

            progress += self._rng.random() * SIMULATED_MAX_INCREMENT
            if progress >= 100:
                finished = self._update_file(file_id, status=FileStatus.UPLOADED, progress=100)
                if finished is not None:
                    self.event_bus.publish(FileUploadFinished.create(file=finished))
                return

            self._update_file(file_id, progress=progress)

    async def _api_upload(self, uploaded: UploadedFile) -> None:
        self._update_file(uploaded.id, status=FileStatus.UPLOADING, progress=0)

        try:
            if not self.config.api_endpoint:
                raise BookingApiError("API endpoint not configured")
            await asyncio.to_thread(
                self.api_client.upload_file,
                self.config.api_endpoint,
                uploaded.file.name,
                uploaded.file.content,
                uploaded.file.mime_type,
                self.config.additional_data,
            )
        except BookingApiError as e:
            logger.error(f"Upload failed for {uploaded.file.name}: {e}", extra={"file_id": uploaded.id})
            failed = self._update_file(uploaded.id, status=FileStatus.ERROR, progress=0)
            self.event_bus.publish(UserNotice.error(
                "Upload failed",
                f"Failed to upload {uploaded.file.name}",
            ))
            if failed is not None:
                self.event_bus.publish(FileUploadFinished.create(file=failed))
            return

        done = self._update_file(uploaded.id, status=FileStatus.COMPLETED, progress=100)
        logger.info(f"Uploaded {uploaded.file.name}", extra={"file_id": uploaded.id})
        if done is not None:
            self.event_bus.publish(FileUploadFinished.create(file=done))

    # -------------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------------

    def _update_file(self, file_id: str, **changes) -> UploadedFile | None:
        current = self.get_file(file_id)
        if current is None:
            return None

        # Progress only moves backwards when an upload is (re)started or fails
        if "progress" in changes and changes.get("status") not in (FileStatus.UPLOADING, FileStatus.ERROR):
            changes["progress"] = max(current.progress, changes["progress"])

        updated = current.model_copy(update=changes)
        self._set_files([updated if f.id == file_id else f for f in self._files])
        return updated

    def _set_files(self, files: list[UploadedFile]) -> None:
        self._files = files
        if self.on_files_change is None:
            return
        try:
            self.on_files_change(list(files))
        except Exception:
            logger.exception("on_files_change callback failed")


class CreativeUpload:
    """Creative asset upload for one booking: api-mode controller plus submit step."""

    def __init__(
        self,
        booking_id: int,
        campaign_name: str,
        api_client: BookingApiClient,
        on_upload_success: Callable[[], None],
        event_bus: EventBus | None = None,
        config: UploadConfig | None = None,
    ):
        self.booking_id = booking_id
        self.campaign_name = campaign_name
        self.on_upload_success = on_upload_success
        self.event_bus = event_bus or EventBus()
        self.controller = FileUploadController(
            config=config or UploadConfig.for_creative(booking_id, campaign_name),
            api_client=api_client,
            event_bus=self.event_bus,
        )

    @property
    def can_submit(self) -> bool:
        return bool(self.controller.completed_files)

    async def select_files(self, files: Iterable[SelectedFile]) -> list[UploadedFile]:
        return await self.controller.select_files(files)

    def remove_file(self, file_id: str) -> bool:
        return self.controller.remove_file(file_id)

    def submit(self) -> bool:
        """
        Hand the uploaded files over for review.

        Returns:
            False (with a notice) if no file finished uploading
        """
        completed = self.controller.completed_files
        if not completed:
            self.event_bus.publish(UserNotice.error(
                "No Files to Submit",
                "Please upload at least one file before submitting.",
            ))
            return False

        self.on_upload_success()
        self.event_bus.publish(UserNotice.info(
            "Creative Assets Submitted",
            f"{len(completed)} file(s) have been submitted for review.",
        ))
        self.event_bus.publish(CreativeSubmitted.create(
            booking_id=self.booking_id,
            files=tuple(completed),
        ))
        logger.info(
            f"Submitted {len(completed)} creative file(s)",
            extra={"booking_id": self.booking_id},
        )
        self.controller.reset()
        return True

    async def close(self) -> None:
        await self.controller.close()
