from mediaforge.validation.factory import FileValidatorFactory
from mediaforge.validation.models import UploadCandidate, ValidatedFile, ValidationPolicy
from mediaforge.validation.validator import FileValidator

__all__ = [
    "FileValidator",
    "FileValidatorFactory",
    "UploadCandidate",
    "ValidatedFile",
    "ValidationPolicy",
]
