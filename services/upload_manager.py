from typing import Dict, Optional

from config.log_config import get_logger
from services.upload_service import UploadTask

logger = get_logger("upload_manager")


class UploadManager:
    def __init__(self):
        self.active_uploads: Dict[str, UploadTask] = {}  # upload_id -> UploadTask

    def track(self, task: UploadTask) -> UploadTask:
        self.active_uploads[task.upload_id] = task
        task.add_done_callback(self._forget)
        logger.debug(f"Tracking upload {task.upload_id} ({task.stored_name})")
        return task

    def _forget(self, task: UploadTask) -> None:
        self.active_uploads.pop(task.upload_id, None)

    def get(self, upload_id: str) -> Optional[UploadTask]:
        return self.active_uploads.get(upload_id)

    def cancel(self, upload_id: str) -> bool:
        task = self.active_uploads.get(upload_id)
        if not task:
            return False
        return task.cancel()

    def cancel_all(self) -> None:
        for task in list(self.active_uploads.values()):
            task.cancel()
