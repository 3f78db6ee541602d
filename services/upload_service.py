import asyncio
import re
import time
from typing import AsyncIterator, Optional
from uuid import uuid4

from bson import ObjectId
from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket
from pymongo.errors import PyMongoError

from config.env_config import MAX_UPLOAD_BYTES, PUBLIC_BASE_URL, UPLOAD_BUCKET, UPLOAD_CHUNK_BYTES
from config.log_config import get_logger
from services.content_store import translate_error
from utils.exceptions import NotFoundError, UploadError

logger = get_logger("upload_service")


def sanitize_filename(filename: str) -> str:
    return re.sub(r"[^a-zA-Z0-9.]", "_", filename)


class UploadTask:
    """One file being written to GridFS.

    Progress (0-100) is published on ``progress_stream()``; ``result()``
    resolves to the public URL of the file or raises ``UploadError``.
    ``cancel()`` stops the upload and aborts the partial file.
    """

    def __init__(self, bucket, stored_name: str, data: bytes, metadata: dict, chunk_size: int, url_for):
        self.upload_id = uuid4().hex
        self.stored_name = stored_name
        self.progress = 0
        self._bucket = bucket
        self._data = data
        self._metadata = metadata
        self._chunk_size = chunk_size
        self._url_for = url_for
        self._progress_queue: asyncio.Queue = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None

    def start(self) -> "UploadTask":
        self._task = asyncio.create_task(self._run())
        # end of the progress stream, also when cancelled before the first write
        self._task.add_done_callback(lambda _: self._progress_queue.put_nowait(None))
        return self

    def add_done_callback(self, callback) -> None:
        self._task.add_done_callback(lambda _: callback(self))

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> bool:
        if self._task is None or self._task.done():
            return False
        return self._task.cancel()

    async def progress_stream(self) -> AsyncIterator[int]:
        while True:
            value = await self._progress_queue.get()
            if value is None:
                return
            yield value

    async def result(self) -> str:
        try:
            return await self._task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            raise UploadError("Upload cancelled")

    def _publish(self, value: int) -> None:
        self.progress = value
        self._progress_queue.put_nowait(value)

    async def _run(self) -> str:
        grid_in = self._bucket.open_upload_stream(self.stored_name, metadata=self._metadata)
        total = len(self._data)
        try:
            self._publish(0)
            for offset in range(0, total, self._chunk_size):
                chunk = self._data[offset:offset + self._chunk_size]
                await grid_in.write(chunk)
                self._publish(round((offset + len(chunk)) * 100 / total))
            await grid_in.close()
            if self.progress != 100:
                self._publish(100)
        except asyncio.CancelledError:
            logger.info(f"Upload {self.upload_id} cancelled, aborting {self.stored_name}")
            await self._abort(grid_in)
            raise
        except PyMongoError as e:
            logger.error(f"Upload {self.upload_id} failed: {e}")
            await self._abort(grid_in)
            raise UploadError(str(e)) from e

        url = self._url_for(grid_in._id)
        logger.info(f"Upload {self.upload_id} stored as {self.stored_name}\n{url}")
        return url

    async def _abort(self, grid_in) -> None:
        try:
            await grid_in.abort()
        except PyMongoError as e:
            logger.warning(f"Could not abort partial upload {self.stored_name}: {e}")


class UploadService:
    def __init__(
        self,
        bucket,
        public_base_url: str = PUBLIC_BASE_URL,
        max_bytes: int = MAX_UPLOAD_BYTES,
        chunk_size: int = UPLOAD_CHUNK_BYTES,
    ):
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes
        self.chunk_size = chunk_size

    @classmethod
    def from_database(cls, db: AsyncIOMotorDatabase) -> "UploadService":
        return cls(AsyncIOMotorGridFSBucket(db, bucket_name=UPLOAD_BUCKET))

    def ensure_size(self, size: int) -> None:
        if size > self.max_bytes:
            raise UploadError(f"File is larger than {self.max_bytes} bytes")

    def file_url(self, file_id) -> str:
        return f"{self.public_base_url}/api/files/{file_id}"

    def start_upload(
        self,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
        folder: str = "images",
    ) -> UploadTask:
        if not filename:
            raise UploadError("A file name is required")
        self.ensure_size(len(data))

        folder = sanitize_filename(folder.strip("/")) or "images"
        stored_name = f"{folder}/{int(time.time() * 1000)}_{sanitize_filename(filename)}"
        metadata = {
            "contentType": content_type or "application/octet-stream",
            "folder": folder,
            "originalName": filename,
        }
        task = UploadTask(self.bucket, stored_name, data, metadata, self.chunk_size, self.file_url)
        return task.start()

    async def open_file(self, file_id: str):
        if not ObjectId.is_valid(file_id):
            raise NotFoundError(f"No file '{file_id}'", UPLOAD_BUCKET)
        try:
            return await self.bucket.open_download_stream(ObjectId(file_id))
        except NoFile:
            raise NotFoundError(f"No file '{file_id}'", UPLOAD_BUCKET)
        except PyMongoError as e:
            logger.error(f"Error opening file {file_id}: {e}")
            raise translate_error(e, UPLOAD_BUCKET) from e
