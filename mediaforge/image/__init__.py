from mediaforge.image.models import ImageMetadata
from mediaforge.image.processor import ImageProcessor, build_image_processor

__all__ = ["ImageMetadata", "ImageProcessor", "build_image_processor"]
