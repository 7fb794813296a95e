"""Messaging socket supervision."""
from .protocols import EventSource, MessagingSocket, SocketFactory
from .updates import ConnectionUpdate, DisconnectReason
from .supervisor import ConnectionSupervisor, load_socket_factory

__all__ = [
    'EventSource',
    'MessagingSocket',
    'SocketFactory',
    'ConnectionUpdate',
    'DisconnectReason',
    'ConnectionSupervisor',
    'load_socket_factory',
]
