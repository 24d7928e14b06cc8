import pkgutil
from importlib import import_module
from pathlib import Path

from fastapi import APIRouter

from chatrelay.logging import logger

# Subpackages scanned for modules exposing a module-level `router`
ROUTER_PACKAGES = {
    "api.http": "api",
    "api.ws.consumers": "websocket consumer",
}

# Modules already announced, so rebuilding the app does not log them again
_announced: set[str] = set()


def collect_subrouters() -> APIRouter:
    """
    Build one router from every HTTP API module and WebSocket consumer.

    Adding an endpoint means dropping a module with a `router` into
    `api/http` or `api/ws/consumers`; nothing has to be registered by hand.
    """
    main_router = APIRouter()
    package_root = Path(__file__).parent

    for subpackage, kind in ROUTER_PACKAGES.items():
        package = f"{__package__}.{subpackage}"
        path = package_root.joinpath(*subpackage.split("."))

        for module_info in pkgutil.iter_modules([str(path)]):
            module = import_module(f"{package}.{module_info.name}")
            main_router.include_router(module.router)

            if module.__name__ not in _announced:
                logger.info(f'Register "{module_info.name}" {kind}')
                _announced.add(module.__name__)

    return main_router
