from __future__ import annotations

import logging
from typing import Awaitable, Callable, List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..orchestrator import BuildError, UnknownTypeError, ValidationError
from ..schemas import ApiResult, ControlRequest, CreateServerRequest, ServerTypeInfo
from ..services import ContainerService

router = APIRouter(tags=["containers"])

logger = logging.getLogger(__name__)


def get_service(request: Request) -> ContainerService:
    return request.app.state.service


def _respond(result: ApiResult) -> JSONResponse:
    status_code = 200 if result.success else 500
    return JSONResponse(status_code=status_code, content=result.model_dump())


def _reject(status_code: int, message: str, command: str = "") -> JSONResponse:
    result = ApiResult(success=False, command=command, message=message)
    return JSONResponse(status_code=status_code, content=result.model_dump())


async def _run(action: str, call: Callable[[], Awaitable[ApiResult]]) -> JSONResponse:
    try:
        return _respond(await call())
    except (ValidationError, UnknownTypeError) as exc:
        return _reject(400, str(exc))
    except BuildError as exc:
        logger.exception("Command template defect during %s", action)
        return _reject(500, f"Internal error building command: {exc}")
    except Exception as exc:
        logger.exception("Failed to %s", action)
        return _reject(500, str(exc))


@router.get("/types", response_model=List[ServerTypeInfo])
def api_server_types(service: ContainerService = Depends(get_service)) -> List[ServerTypeInfo]:
    """
    GET /api/types
    Server types that can be passed to /api/create.
    """
    return service.server_types()


@router.get("/containers", response_model=ApiResult)
async def api_list_containers(service: ContainerService = Depends(get_service)) -> JSONResponse:
    """
    GET /api/containers
    `docker ps -a` filtered to the images of the registered server types.
    """
    return await _run("list containers", service.list_containers)


@router.post("/create", response_model=ApiResult)
async def api_create(
    req: CreateServerRequest, service: ContainerService = Depends(get_service)
) -> JSONResponse:
    """
    POST /api/create
    Body: {type, name, port}
    Validation and unknown types answer 400 without touching the runtime.
    """
    return await _run("create container", lambda: service.create(req.type, req.name, req.port))


@router.post("/remove", response_model=ApiResult)
async def api_remove(
    req: ControlRequest, service: ContainerService = Depends(get_service)
) -> JSONResponse:
    return await _run("remove container", lambda: service.remove(req.id))


@router.post("/stop", response_model=ApiResult)
async def api_stop(
    req: ControlRequest, service: ContainerService = Depends(get_service)
) -> JSONResponse:
    return await _run("stop container", lambda: service.stop(req.id))


@router.post("/start", response_model=ApiResult)
async def api_start(
    req: ControlRequest, service: ContainerService = Depends(get_service)
) -> JSONResponse:
    return await _run("start container", lambda: service.start(req.id))


@router.post("/restart", response_model=ApiResult)
async def api_restart(
    req: ControlRequest, service: ContainerService = Depends(get_service)
) -> JSONResponse:
    """
    POST /api/restart
    Handed to the runtime as a single `restart`; works on stopped containers too.
    """
    return await _run("restart container", lambda: service.restart(req.id))
