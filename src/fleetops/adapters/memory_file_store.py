"""In-memory file store — keeps uploads in a dict for tests and development."""

from uuid import uuid4

from fleetops.adapters.file_store_port import FileStorePort


class MemoryFileStore(FileStorePort):
    """File store that records uploads in memory."""

    def __init__(self, bucket: str = "fleetops-local"):
        self.bucket = bucket
        self.files: dict[str, dict] = {}

    def put(self, path: str, content: bytes, content_type: str, bucket: str | None = None) -> dict:
        record = {
            "file_id": str(uuid4()),
            "path": path,
            "bucket": bucket or self.bucket,
            "size": len(content),
            "content_type": content_type,
        }
        self.files[path] = {**record, "content": content}
        return record

    def get(self, path: str) -> bytes | None:
        stored = self.files.get(path)
        return stored["content"] if stored else None
