from .uploader import API_BASE_URL, CloudinaryMediaUploader, extract_public_id, sign_params

__all__ = ["API_BASE_URL", "CloudinaryMediaUploader", "extract_public_id", "sign_params"]
