"""
Data models and message types for the dashboard sync protocol
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any

from .exceptions import MessageDecodeError


def _require(data: Dict[str, Any], key: str, kind: str) -> Any:
    """Fetch a mandatory key from a payload dictionary"""
    if not isinstance(data, dict):
        raise MessageDecodeError(f"{kind} payload must be an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise MessageDecodeError(f"{kind} payload is missing '{key}'", details={"payload": data})
    return data[key]


def _require_list(data: Dict[str, Any], key: str, kind: str) -> List[Any]:
    value = _require(data, key, kind)
    if not isinstance(value, list):
        raise MessageDecodeError(f"{kind}.{key} must be a list", details={"payload": data})
    return value


class ActivityType(Enum):
    """Kinds of entries in the activity feed"""
    FILE_UPDATE = "file-update"
    FILE_DELETE = "file-delete"
    SYSTEM = "system"
    ERROR = "error"
    CONNECT = "connect"


@dataclass(frozen=True)
class StorageInfo:
    """A server-managed logical file collection"""
    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageInfo':
        return cls(
            id=str(_require(data, "id", "StorageInfo")),
            name=data.get("name") or ""
        )


@dataclass(frozen=True)
class FileMetadata:
    """Metadata of a single file inside a storage, keyed by path"""
    path: str
    size: int = 0
    modified: int = 0
    version: int = 0
    hash: str = ""
    is_deleted: bool = False
    last_modified_by: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileMetadata':
        return cls(
            path=str(_require(data, "path", "FileMetadata")),
            size=data.get("size") or 0,
            modified=data.get("modified") or 0,
            version=data.get("version") or 0,
            hash=data.get("hash") or "",
            is_deleted=bool(data.get("is_deleted", False)),
            last_modified_by=data.get("last_modified_by")
        )


@dataclass(frozen=True)
class ClientInfo:
    """A sync client attached to a storage"""
    id: str
    name: str = ""
    storage_id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientInfo':
        return cls(
            id=str(_require(data, "id", "ClientInfo")),
            name=data.get("name") or "",
            storage_id=data.get("storage_id") or ""
        )


@dataclass(frozen=True)
class Stats:
    """Aggregate usage snapshot, always replaced as a whole"""
    active_clients: int = 0
    total_files: int = 0
    client_details: List[ClientInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Stats':
        if not isinstance(data, dict):
            raise MessageDecodeError("Stats payload must be an object")
        details = data.get("client_details") or []
        if not isinstance(details, list):
            raise MessageDecodeError("Stats.client_details must be a list", details={"payload": data})
        return cls(
            active_clients=data.get("active_clients") or 0,
            total_files=data.get("total_files") or 0,
            client_details=[ClientInfo.from_dict(item) for item in details]
        )


@dataclass(frozen=True)
class ActivityEntry:
    """One line of the activity feed"""
    id: str
    type: ActivityType
    message: str
    user: str = "System"
    timestamp: float = 0.0

    @classmethod
    def create(cls, activity_type: ActivityType, message: str,
               user: str = "System", timestamp: Optional[float] = None) -> 'ActivityEntry':
        """Build an entry with a fresh id, stamped now unless a timestamp is given"""
        return cls(
            id=uuid.uuid4().hex[:8],
            type=activity_type,
            message=message,
            user=user,
            timestamp=timestamp or time.time()
        )


# Inbound protocol messages, one class per envelope variant

@dataclass(frozen=True)
class StorageListMessage:
    storages: List[StorageInfo]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'StorageListMessage':
        items = _require_list(payload, "storages", "StorageList")
        return cls(storages=[StorageInfo.from_dict(item) for item in items])


@dataclass(frozen=True)
class WelcomeMessage:
    storage_id: str
    files: List[FileMetadata]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'WelcomeMessage':
        storage_id = str(_require(payload, "storage_id", "Welcome"))
        items = payload.get("files") or []
        if not isinstance(items, list):
            raise MessageDecodeError("Welcome.files must be a list", details={"payload": payload})
        return cls(storage_id=storage_id, files=[FileMetadata.from_dict(item) for item in items])


@dataclass(frozen=True)
class StartTransferMessage:
    """Announces that the next binary frame carries `path`"""
    path: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'StartTransferMessage':
        return cls(path=str(_require(payload, "path", "StartTransfer")))


@dataclass(frozen=True)
class LogMessage:
    message: str
    level: str = "info"
    timestamp: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'LogMessage':
        return cls(
            message=str(_require(payload, "message", "Log")),
            level=payload.get("level") or "info",
            timestamp=payload.get("timestamp")
        )


@dataclass(frozen=True)
class StatsMessage:
    stats: Stats

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'StatsMessage':
        return cls(stats=Stats.from_dict(payload))


@dataclass(frozen=True)
class FileUpdateMessage:
    meta: FileMetadata

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'FileUpdateMessage':
        return cls(meta=FileMetadata.from_dict(_require(payload, "meta", "FileUpdate")))


@dataclass(frozen=True)
class DeleteFileMessage:
    path: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'DeleteFileMessage':
        return cls(path=str(_require(payload, "path", "DeleteFile")))


# Envelope key -> message class
INBOUND_MESSAGE_TYPES = {
    "StorageList": StorageListMessage,
    "Welcome": WelcomeMessage,
    "StartTransfer": StartTransferMessage,
    "Log": LogMessage,
    "Stats": StatsMessage,
    "FileUpdate": FileUpdateMessage,
    "DeleteFile": DeleteFileMessage,
}


class Command:
    """Outbound command names"""
    REGISTER_DASHBOARD = "RegisterDashboard"
    REQUEST_STORAGE_LIST = "RequestStorageList"
    REQUEST_FILE = "RequestFile"
    JOIN_STORAGE = "JoinStorage"
    CREATE_STORAGE = "CreateStorage"
    DELETE_STORAGE = "DeleteStorage"
    DELETE_FILE = "DeleteFile"


# Commands sent as a bare JSON string with no payload
BARE_COMMANDS = frozenset({Command.REGISTER_DASHBOARD, Command.REQUEST_STORAGE_LIST})
