"""Connection update parsing."""
from dataclasses import dataclass
from typing import Any, Mapping, Optional


class DisconnectReason:
    """Status codes reported with a closed connection."""
    
    CONNECTION_CLOSED = 428
    CONNECTION_LOST = 408
    CONNECTION_REPLACED = 440
    TIMED_OUT = 408
    LOGGED_OUT = 401
    BAD_SESSION = 500
    RESTART_REQUIRED = 515
    MULTIDEVICE_MISMATCH = 411
    FORBIDDEN = 403
    UNAVAILABLE_SERVICE = 503


def _get(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


@dataclass(frozen=True)
class ConnectionUpdate:
    """
    One ``connection.update`` notification.
    
    Attributes:
        connection: ``open``, ``connecting``, ``close`` or None
        status_code: Status code of the last disconnect, if any
        qr: Pairing string while waiting for a QR scan
    """
    connection: Optional[str] = None
    status_code: Optional[int] = None
    qr: Optional[str] = None
    
    @classmethod
    def from_event(cls, payload: Any) -> 'ConnectionUpdate':
        """
        Normalize a library payload.
        
        Accepts the nested form
        ``{'lastDisconnect': {'error': {'output': {'statusCode': 401}}}}``
        as well as flat ``status_code`` / ``statusCode`` keys, from either
        mappings or attribute objects.
        """
        if isinstance(payload, cls):
            return payload
        
        status = _get(payload, 'status_code')
        if status is None:
            status = _get(payload, 'statusCode')
        if status is None:
            last = _get(payload, 'lastDisconnect') or _get(payload, 'last_disconnect')
            error = _get(last, 'error')
            status = _get(_get(error, 'output'), 'statusCode')
            if status is None:
                status = _get(last, 'status_code')
        
        return cls(
            connection=_get(payload, 'connection'),
            status_code=int(status) if status is not None else None,
            qr=_get(payload, 'qr'),
        )
    
    @property
    def logged_out(self) -> bool:
        return self.status_code == DisconnectReason.LOGGED_OUT
