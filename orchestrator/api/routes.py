"""
API routes for Orchestration Core

All handlers are coroutines so they run on the event loop that owns the
workspace and its scheduler timers.
"""
import dataclasses
from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from ..core.execution.engine import ALREADY_RUNNING
from ..core.execution.errors import GraphValidationError
from ..core.execution.triggers import InvalidIntervalError
from ..core.workspace import Workspace
from ..storage.base import TemplateNotFoundError

router = APIRouter()


def get_workspace(request: Request) -> Workspace:
    """Get Workspace from app state (injected by FastAPI)"""
    return request.app.state.workspace


# Request models
class GraphRequest(BaseModel):
    """A complete graph to load into the workspace"""
    id: Optional[str] = Field(default=None, description="Graph identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    nodes: List[Dict[str, Any]] = Field(default_factory=list, description="Nodes with id, type, state, position")
    connections: List[Dict[str, Any]] = Field(default_factory=list, description="Connections between node ports")


class NodeStatePatch(BaseModel):
    state: Dict[str, Any] = Field(..., description="Fields to merge into the node's state")


class AddNodeRequest(BaseModel):
    type: str = Field(..., description="Registered node type, e.g. 'GEMINI'")
    id: Optional[str] = None
    state: Dict[str, Any] = Field(default_factory=dict)
    position: Optional[Dict[str, float]] = None


class ConnectRequest(BaseModel):
    source_node: str
    source_output: str = "out"
    target_node: str
    target_input: str = "in"


class SettingsRequest(BaseModel):
    ai_supervisor_instruction: Optional[str] = None
    system_orchestrator_instruction: Optional[str] = None


class SaveTemplateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Template name (replaces a saved template of that name)")
    description: str = ""


def _graph_response(workspace: Workspace) -> Dict[str, Any]:
    graph = workspace.to_dict()
    graph['is_running'] = workspace.is_running
    graph['active_schedulers'] = workspace.triggers.active_node_ids()
    return graph


# Node types
@router.get("/node-types")
async def list_node_types(workspace: Workspace = Depends(get_workspace)):
    """Catalog of registered node types"""
    return {"node_types": workspace.registry.describe_all()}


# Graph
@router.get("/graph")
async def get_graph(workspace: Workspace = Depends(get_workspace)):
    return _graph_response(workspace)


@router.put("/graph")
async def put_graph(request: GraphRequest, workspace: Workspace = Depends(get_workspace)):
    """Replace the whole graph (stops every scheduler)"""
    data = request.model_dump(exclude_none=True)
    try:
        workspace.load_graph(data)
    except GraphValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _graph_response(workspace)


@router.patch("/graph/nodes/{node_id}")
async def patch_node(node_id: str, request: NodeStatePatch, workspace: Workspace = Depends(get_workspace)):
    try:
        state = workspace.update_node_state(node_id, request.state)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"node_id": node_id, "state": state}


@router.post("/graph/nodes", status_code=201)
async def add_node(request: AddNodeRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        node = workspace.add_node(request.type, request.state, request.position, node_id=request.id)
    except GraphValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return node.to_dict()


@router.delete("/graph/nodes/{node_id}")
async def delete_node(node_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.remove_node(node_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    return {"deleted": node_id}


@router.post("/graph/connections", status_code=201)
async def add_connection(request: ConnectRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        edge = workspace.connect(
            request.source_node, request.source_output, request.target_node, request.target_input
        )
    except GraphValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return edge.to_dict()


@router.delete("/graph/connections/{connection_id}")
async def delete_connection(connection_id: str, workspace: Workspace = Depends(get_workspace)):
    if not workspace.disconnect(connection_id):
        raise HTTPException(status_code=404, detail=f"Connection not found: {connection_id}")
    return {"deleted": connection_id}


# Execution
@router.post("/run")
async def run_graph(workspace: Workspace = Depends(get_workspace)):
    """Run the whole graph once and return every node's final state"""
    result = await workspace.run()
    if result['status'] == 'rejected':
        raise HTTPException(status_code=409, detail=ALREADY_RUNNING)
    return result


@router.get("/snapshot")
async def get_snapshot(workspace: Workspace = Depends(get_workspace)):
    """Latest node states, including those of a run still in flight"""
    return {
        "is_running": workspace.is_running,
        "current_node": workspace.engine.current_node,
        "active_schedulers": workspace.triggers.active_node_ids(),
        "states": workspace.snapshot(),
    }


@router.post("/schedulers/{node_id}/toggle")
async def toggle_scheduler(node_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        is_running = workspace.toggle_scheduler(node_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except (InvalidIntervalError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {
        "node_id": node_id,
        "isRunning": is_running,
        "intervalSeconds": workspace.triggers.interval_of(node_id),
    }


# Settings
@router.get("/settings")
async def get_settings(workspace: Workspace = Depends(get_workspace)):
    return workspace.global_config.to_dict()


@router.put("/settings")
async def put_settings(request: SettingsRequest, workspace: Workspace = Depends(get_workspace)):
    """Update the run-wide instructions (used from the next run on)"""
    changes = request.model_dump(exclude_none=True)
    workspace.global_config = dataclasses.replace(workspace.global_config, **changes)
    return workspace.global_config.to_dict()


# Templates
@router.get("/templates")
async def list_templates(workspace: Workspace = Depends(get_workspace)):
    return {"templates": workspace.list_templates()}


@router.post("/templates", status_code=201)
async def save_template(request: SaveTemplateRequest, workspace: Workspace = Depends(get_workspace)):
    """Save the current graph as a template"""
    try:
        return workspace.save_as_template(request.name, request.description)
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/templates/{name}/load")
async def load_template(name: str, workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.load_template(name)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GraphValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _graph_response(workspace)


@router.delete("/templates/{name}")
async def delete_template(name: str, workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.delete_template(name)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"deleted": name}
