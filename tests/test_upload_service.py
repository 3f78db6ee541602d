import asyncio
import io

import pytest
from bson import ObjectId
from fastapi import UploadFile
from pymongo.errors import OperationFailure

from controllers.upload_controller import start_upload
from services.upload_manager import UploadManager
from services.upload_service import sanitize_filename
from utils.exceptions import NotFoundError, UploadError


def test_sanitize_filename():
    assert sanitize_filename("my photo (1).png") == "my_photo__1_.png"
    assert sanitize_filename("résumé.pdf") == "r_sum_.pdf"


async def test_upload_reports_progress_and_returns_url(uploads, bucket):
    task = uploads.start_upload("my photo.png", b"x" * 20, "image/png")

    url = await task.result()
    progress = [value async for value in task.progress_stream()]

    grid_in = bucket.streams[0]
    assert url == f"http://testserver/api/files/{grid_in._id}"
    assert progress == [0, 40, 80, 100]
    assert grid_in.closed
    assert grid_in.buffer == b"x" * 20
    assert grid_in.filename.startswith("images/")
    assert grid_in.filename.endswith("_my_photo.png")
    assert grid_in.metadata == {"contentType": "image/png", "folder": "images", "originalName": "my photo.png"}


async def test_upload_into_custom_folder(uploads, bucket):
    task = uploads.start_upload("cv.pdf", b"%PDF", "application/pdf", folder="/resumes/")
    await task.result()

    assert bucket.streams[0].filename.startswith("resumes/")


async def test_oversized_file_is_rejected(uploads, bucket):
    with pytest.raises(UploadError):
        uploads.start_upload("big.png", b"x" * 65, "image/png")
    assert bucket.streams == []


async def test_missing_filename_is_rejected(uploads):
    with pytest.raises(UploadError):
        uploads.start_upload("", b"data")


async def test_driver_failure_aborts_and_raises_upload_error(uploads, bucket):
    bucket.fail_with = OperationFailure("disk full")

    task = uploads.start_upload("photo.png", b"x" * 20)

    with pytest.raises(UploadError, match="disk full"):
        await task.result()
    assert bucket.streams[0].aborted
    assert not bucket.files


async def test_cancel_aborts_partial_file(uploads, bucket):
    bucket.gate = asyncio.Event()
    task = uploads.start_upload("photo.png", b"x" * 20)
    await asyncio.sleep(0)

    assert task.cancel()

    with pytest.raises(UploadError, match="cancelled"):
        await task.result()
    assert bucket.streams[0].aborted
    assert not bucket.streams[0].closed
    assert [value async for value in task.progress_stream()] == [0]


async def test_cancel_after_completion_is_a_no_op(uploads):
    task = uploads.start_upload("photo.png", b"abc")
    await task.result()

    assert task.done
    assert task.cancel() is False


async def test_uploaded_file_can_be_read_back(uploads):
    task = uploads.start_upload("notes.txt", b"hello world", "text/plain")
    url = await task.result()

    grid_out = await uploads.open_file(url.rsplit("/", 1)[1])

    chunks = []
    while chunk := await grid_out.readchunk():
        chunks.append(chunk)
    assert b"".join(chunks) == b"hello world"
    assert grid_out.metadata["contentType"] == "text/plain"


@pytest.mark.parametrize("file_id", ["nope", str(ObjectId())])
async def test_open_unknown_file_raises_not_found(uploads, file_id):
    with pytest.raises(NotFoundError):
        await uploads.open_file(file_id)


async def test_manager_forgets_finished_uploads(uploads):
    manager = UploadManager()
    task = manager.track(uploads.start_upload("a.png", b"abc"))

    assert manager.get(task.upload_id) is task

    await task.result()
    await asyncio.sleep(0)

    assert manager.get(task.upload_id) is None
    assert manager.cancel(task.upload_id) is False


async def test_manager_cancel_all(uploads, bucket):
    bucket.gate = asyncio.Event()
    manager = UploadManager()
    first = manager.track(uploads.start_upload("a.png", b"abc"))
    second = manager.track(uploads.start_upload("b.png", b"def"))
    await asyncio.sleep(0)

    manager.cancel_all()

    for task in (first, second):
        with pytest.raises(UploadError):
            await task.result()
    await asyncio.sleep(0)
    assert manager.active_uploads == {}
    assert all(stream.aborted for stream in bucket.streams)


async def test_declared_size_is_checked_before_reading(uploads, bucket):
    upload = UploadFile(io.BytesIO(b"x" * 100), size=100, filename="big.png")

    with pytest.raises(UploadError):
        await start_upload(upload, "images", False, uploads, UploadManager())
    assert upload.file.tell() == 0
    assert bucket.streams == []


async def test_unknown_size_is_read_only_past_the_limit(uploads, bucket):
    upload = UploadFile(io.BytesIO(b"x" * 100), filename="big.png")

    with pytest.raises(UploadError):
        await start_upload(upload, "images", False, uploads, UploadManager())
    assert upload.file.tell() == uploads.max_bytes + 1
    assert bucket.streams == []
