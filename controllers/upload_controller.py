import json

from fastapi import UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse

from config.log_config import get_logger
from services.upload_manager import UploadManager
from services.upload_service import UploadService
from utils.exceptions import UploadError

logger = get_logger("upload_api")


async def start_upload(file: UploadFile, folder: str, stream: bool, uploads: UploadService, manager: UploadManager):
    if file.size is not None:
        uploads.ensure_size(file.size)
    # one byte past the limit is enough to reject an upload of unknown size
    data = await file.read(uploads.max_bytes + 1)
    task = manager.track(uploads.start_upload(file.filename, data, file.content_type, folder))
    logger.info(f"Upload {task.upload_id} started for {file.filename} ({len(data)} bytes)")

    if not stream:
        url = await task.result()
        return JSONResponse(
            content={"uploadId": task.upload_id, "url": url},
            status_code=status.HTTP_201_CREATED
        )

    # newline-delimited JSON: the upload id, progress events, then the url or an error
    async def events():
        yield json.dumps({"uploadId": task.upload_id}) + "\n"
        async for progress in task.progress_stream():
            yield json.dumps({"progress": progress}) + "\n"
        try:
            yield json.dumps({"url": await task.result()}) + "\n"
        except UploadError as e:
            yield json.dumps({"error": e.message}) + "\n"

    return StreamingResponse(events(), media_type="application/x-ndjson")


async def cancel_upload(upload_id: str, manager: UploadManager):
    if not manager.cancel(upload_id):
        return JSONResponse(
            content={"message": "Upload not found or already finished"},
            status_code=status.HTTP_404_NOT_FOUND
        )
    return JSONResponse(content={"message": "Upload cancelled", "uploadId": upload_id}, status_code=status.HTTP_200_OK)


async def download_file(file_id: str, uploads: UploadService):
    grid_out = await uploads.open_file(file_id)
    metadata = grid_out.metadata or {}

    async def chunks():
        while True:
            chunk = await grid_out.readchunk()
            if not chunk:
                break
            yield chunk

    return StreamingResponse(
        chunks(),
        media_type=metadata.get("contentType", "application/octet-stream"),
        headers={"Cache-Control": "public, max-age=86400"}
    )
