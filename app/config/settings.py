from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docpipe"
    db_username: str = "docpipe"
    db_password: str = "secret"

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    storage_root: str = "/app/files"
    max_upload_bytes: int = 10 * 1024 * 1024
    upload_chunk_bytes: int = 64 * 1024

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5

    step_max_attempts: int = 3
    step_backoff_multiplier_seconds: float = 0.5
    step_backoff_max_seconds: float = 8.0

    pdf_engine: str = "pdfplumber"

    model_provider: str = "openai"
    model_api_key: str = ""
    model_base_url: str = ""
    model_timeout_seconds: int = 30
    ocr_model_name: str = "gpt-4o-mini"
    embedding_model_name: str = "text-embedding-3-small"
    chat_model_name: str = "gpt-4o-mini"
    chat_temperature: float = 0.0

    embedding_min_text_chars: int = 10
    vector_snippet_chars: int = 1000
    search_content_max_chars: int = 100_000

    chroma_persist_dir: str = "./data/chromadb"
    chroma_collection: str = "docpipe_documents"

    rag_top_k: int = 5
    rag_context_max_chars: int = 16_000
    rag_source_snippet_chars: int = 200
