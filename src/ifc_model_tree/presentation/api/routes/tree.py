"""Model Tree API Routes."""
import tempfile
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request, UploadFile
from pydantic import BaseModel

from ifc_model_tree.application.services.selection import format_property_value
from ifc_model_tree.application.services.tree_service import ModelTreeService
from ifc_model_tree.domain import IfcImportError, ValidationError
from ifc_model_tree.infrastructure.ifc.properties import open_model
from ifc_model_tree.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class LoadResponse(BaseModel):
    """Model load response schema."""

    status: str
    generation: int
    classification: str | None = None
    project: str | None = None
    node_count: int = 0


class SelectionResponse(BaseModel):
    """Selected element response schema."""

    element_id: int
    properties: dict[str, str]


def _service(request: Request) -> ModelTreeService:
    return request.app.state.tree_service


@router.post("/models")
async def load_model(request: Request, file: UploadFile) -> LoadResponse:
    """Load an IFC model and build its tree.

    Args:
        file: Uploaded IFC file

    Returns:
        Load status; "superseded" if a newer upload finished first
    """
    if not file.filename or not file.filename.lower().endswith(".ifc"):
        raise HTTPException(status_code=400, detail="File must be IFC format")

    service = _service(request)
    generation = service.begin_load()

    with tempfile.NamedTemporaryFile(delete=False, suffix=".ifc") as tmp:
        tmp.write(await file.read())
        tmp_path = Path(tmp.name)

    try:
        result, fetch = open_model(tmp_path, generation=generation)
        tree = await service.load(result, fetch, generation=generation)
    except (IfcImportError, ValidationError) as e:
        logger.warning("Model load failed", filename=file.filename, error=str(e))
        raise HTTPException(status_code=422, detail=str(e))
    finally:
        tmp_path.unlink(missing_ok=True)

    if tree is None:
        return LoadResponse(status="superseded", generation=generation)

    return LoadResponse(
        status="success",
        generation=generation,
        classification=type(result).__name__,
        project=tree.name,
        node_count=tree.count(),
    )


@router.get("/tree")
async def get_tree(request: Request, q: str = "") -> dict:
    """Get the model tree, optionally filtered.

    Args:
        q: Search query matched against node names and types

    Returns:
        Serialized tree (null when nothing matches)
    """
    service = _service(request)
    if service.current is None:
        raise HTTPException(status_code=404, detail="No model loaded")

    filtered = service.search(q)
    return {
        "query": q,
        "generation": service.current_generation,
        "tree": filtered.to_dict() if filtered is not None else None,
    }


@router.post("/selection/{element_id}")
async def select_element(request: Request, element_id: int) -> SelectionResponse:
    """Select an element and get its properties.

    Args:
        element_id: Express id of the element

    Returns:
        Display-formatted properties
    """
    service = _service(request)
    if service.current is None:
        raise HTTPException(status_code=404, detail="No model loaded")
    if element_id <= 0:
        raise HTTPException(status_code=400, detail="Node is not selectable")

    properties = await service.select(element_id)
    if properties is None:
        raise HTTPException(status_code=404, detail="Element not found")

    return SelectionResponse(
        element_id=element_id,
        properties={k: format_property_value(v) for k, v in properties.items()},
    )


@router.delete("/selection")
async def clear_selection(request: Request) -> dict:
    """Clear the current selection."""
    _service(request).clear_selection()
    return {"status": "cleared"}
