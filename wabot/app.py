"""
Process orchestration.

``run`` is the whole lifetime of a bot process: bootstrap the session,
open the socket, serve HTTP until the socket gives up or the server stops.
"""
import asyncio
from typing import Optional

import uvicorn

from .bootstrap import SessionBootstrapper
from .context import AppContext
from .core.connection import ConnectionSupervisor, SocketFactory, load_socket_factory
from .core.logging import get_logger
from .core.settings import Settings
from .server import create_app

logger = get_logger('app')


async def start_socket(context: AppContext, factory: Optional[SocketFactory] = None) -> ConnectionSupervisor:
    """
    Create the supervisor and open the first socket.
    
    Raises:
        ConfigurationError: If no socket factory is configured
        SocketError: If the socket cannot be built
    """
    factory = factory or load_socket_factory(context.settings.socket_factory)
    supervisor = ConnectionSupervisor(
        context.settings,
        factory,
        store=context.store,
        events=context.events,
    )
    context.supervisor = supervisor
    await supervisor.start()
    return supervisor


async def run(settings: Settings, factory: Optional[SocketFactory] = None) -> str:
    """
    Run the bot until the connection supervisor or the HTTP server stops.
    
    Returns:
        Why the process is stopping
    """
    context = AppContext.create(settings)
    context.authenticated = await SessionBootstrapper(settings, context.store).initialize()
    
    app = create_app(context)
    server = uvicorn.Server(uvicorn.Config(
        app,
        host='0.0.0.0',
        port=settings.port,
        log_level=settings.log_level.lower(),
    ))
    
    supervisor = await start_socket(context, factory)
    
    serve_task = asyncio.ensure_future(server.serve())
    stopped_task = asyncio.ensure_future(supervisor.wait_stopped())
    logger.info(f"Server is running on port {settings.port}")
    
    try:
        done, _ = await asyncio.wait(
            {serve_task, stopped_task},
            return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        server.should_exit = True
        await context.close()
        await asyncio.gather(serve_task, return_exceptions=True)
        stopped_task.cancel()
    
    if stopped_task in done and not stopped_task.cancelled():
        return stopped_task.result()
    return 'server stopped'
