import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# ==================== CONFIGURATION ====================

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once from the environment (and .env)"""

    # Backing store
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "exam_platform"
    db_pool_size: int = 5

    # Exam-authoring API (GenExam)
    genexam_base_url: str = "https://api.genexam.ai"
    genexam_api_key: str = ""
    genexam_api_key_ar: str = ""
    genexam_api_header: str = "X-API-Key"
    genexam_api_header_ar: str = "X-API-Key"
    genexam_path_en: str = "/api/v1/query/generate-exam"
    genexam_path_ar: str = "/api/v1/ar/query/generate-exam"
    genexam_sandbox_path_en: str = "/api/v1/sandbox/query/generate-exam"
    genexam_sandbox_path_ar: str = "/api/v1/sandbox/ar/query/generate-exam"

    # Completion workflow endpoint
    workflow_base_url: str = "https://genexam.ai"
    workflow_key: str = ""

    http_timeout_seconds: int = 120

    # Object storage for generated documents
    storage_bucket: str = "exam-pdfs"
    storage_endpoint: Optional[str] = None
    storage_access_key: Optional[str] = None
    storage_secret_key: Optional[str] = None
    storage_region: str = "auto"
    storage_public_base_url: Optional[str] = None

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            db_host=os.getenv("DB_HOST", "localhost"),
            db_port=_env_int("DB_PORT", 3306),
            db_user=os.getenv("DB_USER", "root"),
            db_password=os.getenv("DB_PASSWORD", ""),
            db_name=os.getenv("DB_NAME", "exam_platform"),
            db_pool_size=_env_int("DB_POOL_SIZE", 5),
            genexam_base_url=os.getenv("GENEXAM_BASE_URL", cls.genexam_base_url),
            genexam_api_key=os.getenv("GENEXAM_API_KEY", ""),
            genexam_api_key_ar=os.getenv("GENEXAM_API_KEY_AR", ""),
            genexam_api_header=os.getenv("GENEXAM_API_HEADER", cls.genexam_api_header),
            genexam_api_header_ar=os.getenv("GENEXAM_API_HEADER_AR", cls.genexam_api_header_ar),
            genexam_path_en=os.getenv("GENEXAM_PATH_EN", cls.genexam_path_en),
            genexam_path_ar=os.getenv("GENEXAM_PATH_AR", cls.genexam_path_ar),
            genexam_sandbox_path_en=os.getenv("GENEXAM_SANDBOX_PATH_EN", cls.genexam_sandbox_path_en),
            genexam_sandbox_path_ar=os.getenv("GENEXAM_SANDBOX_PATH_AR", cls.genexam_sandbox_path_ar),
            workflow_base_url=os.getenv("WORKFLOW_BASE_URL", cls.workflow_base_url),
            workflow_key=os.getenv("WORKFLOW_KEY", ""),
            http_timeout_seconds=_env_int("HTTP_TIMEOUT_SECONDS", 120),
            storage_bucket=os.getenv("STORAGE_BUCKET", cls.storage_bucket),
            storage_endpoint=os.getenv("STORAGE_ENDPOINT") or None,
            storage_access_key=os.getenv("STORAGE_ACCESS_KEY") or None,
            storage_secret_key=os.getenv("STORAGE_SECRET_KEY") or None,
            storage_region=os.getenv("STORAGE_REGION", "auto"),
            storage_public_base_url=os.getenv("STORAGE_PUBLIC_BASE_URL") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @property
    def public_base_url(self) -> str:
        """Base of the public links handed out for cached documents"""
        if self.storage_public_base_url:
            return self.storage_public_base_url.rstrip("/")
        if self.storage_endpoint:
            return f"{self.storage_endpoint.rstrip('/')}/{self.storage_bucket}"
        return f"https://{self.storage_bucket}.s3.amazonaws.com"
