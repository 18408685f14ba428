from aiohttp import web

from .admin_routes import routes as admin_routes
from .session_routes import routes as session_routes
from .task_routes import routes as task_routes
from .user_routes import routes as user_routes


def get_all_routes() -> list[web.RouteTableDef]:
    return [user_routes, task_routes, admin_routes, session_routes]
