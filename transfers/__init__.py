"""
Two-phase file download handling
"""

from .coordinator import BinaryTransferCoordinator
from .materializer import DownloadWriter

__all__ = ["BinaryTransferCoordinator", "DownloadWriter"]
