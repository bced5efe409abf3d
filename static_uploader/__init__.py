from .config import UploaderConfig, load_config
from .coordinator import UploadCoordinator
from .dispatcher import UploadDispatcher
from .models import UploadFailure, UploadJob, UploadSuccess, UploadSummary
from .remote import RemoteObjectManager
from .reporter import ResultReporter
from .scanner import FileScanner, map_key
from .storage import ObjectStorage

__version__ = "0.1.0"

__all__ = [
    "UploaderConfig",
    "load_config",
    "UploadCoordinator",
    "UploadDispatcher",
    "UploadFailure",
    "UploadJob",
    "UploadSuccess",
    "UploadSummary",
    "RemoteObjectManager",
    "ResultReporter",
    "FileScanner",
    "map_key",
    "ObjectStorage",
]
