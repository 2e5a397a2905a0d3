"""
Evidence photo storage.

Photos are written to EVIDENCE_DIR and served by the API under
EVIDENCE_BASE_URL, so the URL stored on a payment looks like
``/evidence/1718000000000-k3j9x2a-recibo.jpg``.
"""

import random
import string
import time
from pathlib import Path, PurePath
from typing import Optional

from fastapi import Request
from loguru import logger

_SAFE_CHARS = set(string.ascii_letters + string.digits + "._-")


class EvidenceStorage:
    def __init__(self, directory, base_url: str = "/evidence"):
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def build_filename(original_name: str) -> str:
        """{timestamp_ms}-{random}-{original name}"""
        name = PurePath(original_name or "photo").name
        name = "".join(c if c in _SAFE_CHARS else "_" for c in name) or "photo"
        token = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
        return f"{int(time.time() * 1000)}-{token}-{name}"

    def path_for(self, name: str) -> Path:
        # never escape the evidence directory
        return self.directory / PurePath(name).name

    def public_url(self, name: str) -> str:
        return f"{self.base_url}/{name}"

    def upload(self, original_name: str, content: bytes) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        filename = self.build_filename(original_name)
        path = self.path_for(filename)
        # x: never overwrite an existing photo
        with open(path, "xb") as f:
            f.write(content)
        logger.info("Stored evidence photo {} ({} bytes)", filename, len(content))
        return self.public_url(filename)

    def remove(self, url_or_name: Optional[str]) -> bool:
        if not url_or_name:
            return False
        path = self.path_for(url_or_name.rsplit("/", 1)[-1])
        if not path.is_file():
            return False
        path.unlink()
        logger.info("Removed evidence photo {}", path.name)
        return True


def get_evidence_storage(request: Request) -> EvidenceStorage:
    return request.app.state.evidence_storage
