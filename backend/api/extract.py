"""POST /api/extract/rows and /api/extract/schema: run one extraction and report the script written."""
import logging
import shutil
import tempfile
import time
from pathlib import Path
from typing import Optional
from fastapi import APIRouter, HTTPException, Request

from config import settings
from core.db_connector import ConnectionManager
from core.exceptions import CircularDependencyError, CompositeForeignKeyError, ConnectionUnavailableError
from core.row_extractor import RowExtractor
from core.schema_extractor import SchemaExtractor
from models.connection import ConnectionRequest
from models.extraction import ExtractionResponse, RowExtractionRequest, SchemaExtractionRequest

router = APIRouter(prefix="/extract")
logger = logging.getLogger(__name__)


def _provider_for(request: Request, req: ConnectionRequest):
    try:
        return request.app.state.providers.get(req.db_type)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))


def _run_directory(requested: Optional[str], kind: str) -> Path:
    """
    A fresh directory for one run, under OUTPUT_DIR (or the requested
    subdirectory of it), so concurrent requests never share fragment files.
    """
    base = Path(settings.OUTPUT_DIR).resolve()
    parent = (base / requested).resolve() if requested else base
    if parent != base and base not in parent.parents:
        raise HTTPException(400, detail=f"output_dir must stay inside {base}")
    parent.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=f"{kind}-", dir=parent))


@router.post("/rows", response_model=ExtractionResponse)
def extract_rows(req: RowExtractionRequest, request: Request):
    provider = _provider_for(request, req)
    run_dir = _run_directory(req.output_dir, "rows")
    extractor = RowExtractor(
        provider,
        ConnectionManager(req),
        schema_name=req.schema_name or "",
        output_dir=str(run_dir),
    )
    t0 = time.time()
    try:
        ok = extractor.extract(req.table_name, req.where_filter, req.limit)
    except ConnectionUnavailableError as e:
        raise HTTPException(503, detail=e.message)
    except CompositeForeignKeyError as e:
        raise HTTPException(422, detail=e.message)
    finally:
        if extractor.destination is None:
            shutil.rmtree(run_dir, ignore_errors=True)

    if not ok:
        raise HTTPException(404, detail=f"Extraction from '{req.table_name}' failed: table or referenced column not found")
    logger.info("Row extraction from %s written to %s", req.table_name, extractor.destination)
    return ExtractionResponse(
        output_dir=str(run_dir),
        destination=str(extractor.destination),
        fragments_written=extractor.fragments_written,
        duration_seconds=round(time.time() - t0, 2),
        row_counts=extractor.row_counts,
        tables=list(extractor.row_counts),
    )


@router.post("/schema", response_model=ExtractionResponse)
def extract_schema(req: SchemaExtractionRequest, request: Request):
    provider = _provider_for(request, req)
    run_dir = _run_directory(req.output_dir, "schema")
    extractor = SchemaExtractor(
        provider,
        ConnectionManager(req),
        schema_name=req.schema_name or "",
        output_dir=str(run_dir),
    )
    t0 = time.time()
    try:
        extractor.extract()
    except ConnectionUnavailableError as e:
        raise HTTPException(503, detail=e.message)
    except CircularDependencyError as e:
        raise HTTPException(409, detail=e.message)
    except CompositeForeignKeyError as e:
        raise HTTPException(422, detail=e.message)
    finally:
        if extractor.destination is None:
            shutil.rmtree(run_dir, ignore_errors=True)

    logger.info("Schema DDL written to %s", extractor.destination)
    return ExtractionResponse(
        output_dir=str(run_dir),
        destination=str(extractor.destination),
        fragments_written=extractor.fragments_written,
        duration_seconds=round(time.time() - t0, 2),
        tables=extractor.tables,
    )
