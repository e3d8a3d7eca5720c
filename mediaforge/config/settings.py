from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    upload_max_image_bytes: int = 5 * 1024 * 1024
    upload_max_document_bytes: int = 10 * 1024 * 1024
    upload_max_video_bytes: int = 50 * 1024 * 1024
    upload_max_audio_bytes: int = 20 * 1024 * 1024
    upload_max_other_bytes: int = 1 * 1024 * 1024

    image_min_dimension: int = 10
    image_max_dimension: int = 5000
    require_image_validation: bool = True
    require_malware_scan: bool = True
    content_scanner: str = "signature"

    image_output_format: str = "jpeg"
    image_quality: int = 80
    thumbnail_quality: int = 70
    optimize_max_width: int = 1920
    optimize_max_height: int = 1080

    codec_engine: str = "ffmpeg"
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    codec_timeout_seconds: int | None = None

    batch_max_workers: int = 1
    batch_input_dir: str = ""
    batch_output_dir: str = ""
    batch_media_type: str = "image"

    stream_chunk_size: int = 64 * 1024

    blob_store_url: str = "file:///app/media"
