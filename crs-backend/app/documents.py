from fastapi import APIRouter, UploadFile, File, Form, Request, Body
from fastapi import HTTPException
from fastapi.responses import Response
import hashlib
import logging
import os
from typing import Dict, List, Optional

from app.crs.diagnostics import describe_crs
from app.crs.model import parse_crs_member
from app.schemas import (
    ConsistencyReport,
    CrsDescription,
    CrsParseRequest,
    DocumentSummary,
    RoundtripRequest,
)
from geodoc.errors import GeoJsonError
from geodoc.model import GeoJsonDocument, GeometryType
from geodoc.reader import read
from geodoc.splitter import split_by_geometry_type
from geodoc.writer import to_geojson_obj, write
from qc.consistency import check_crs_roundtrip, restore_crs
from qc.sanity import summarize_document

logger = logging.getLogger(__name__)

router = APIRouter()

GEOJSON_MEDIA_TYPE = "application/geo+json"


def _max_bytes() -> int:
    return int(os.getenv("GEOJSON_MAX_BYTES", str(50 * 1024 * 1024)))


def _write_indent() -> Optional[int]:
    raw = os.getenv("GEOJSON_WRITE_INDENT")
    return int(raw) if raw else None


async def _load_input(file: Optional[UploadFile], path: Optional[str]) -> bytes:
    """Bytes of the uploaded file or of a server-side path; exactly one must be given."""
    if file and path:
        raise HTTPException(status_code=400, detail="Provide either 'file' or 'path', not both")
    if not file and not path:
        raise HTTPException(status_code=400, detail="No file or path provided")
    limit = _max_bytes()
    if file:
        content = await file.read(limit + 1)
        if not content:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")
    else:
        if not os.path.exists(path):
            raise HTTPException(status_code=404, detail=f"Path not found: {path}")
        if not os.path.isfile(path):
            raise HTTPException(status_code=400, detail=f"Not a regular file: {path}")
        try:
            with open(path, "rb") as f:
                content = f.read(limit + 1)
        except PermissionError:
            raise HTTPException(status_code=403, detail=f"Permission denied: {path}")
    if len(content) > limit:
        raise HTTPException(status_code=413, detail=f"GeoJSON larger than {limit} bytes")
    return content


def _read_or_422(content: bytes | str) -> GeoJsonDocument:
    try:
        doc = read(content)
    except GeoJsonError as e:
        logger.info("geojson rejected: %s", e)
        raise HTTPException(status_code=422, detail=e.to_dict())
    logger.info(
        "geojson parsed",
        extra={"feature_count": len(doc.features), "crs_kind": doc.crs.kind},
    )
    return doc


def _geojson_response(doc: GeoJsonDocument) -> Response:
    return Response(content=write(doc, indent=_write_indent()), media_type=GEOJSON_MEDIA_TYPE)


@router.post("/documents/read", response_model=DocumentSummary)
async def read_document(
    request: Request,
    file: UploadFile = File(None),
    path: str = Form(None),
) -> DocumentSummary:
    """Parse a GeoJSON FeatureCollection and summarize it (feature counts, geometry types, crs)."""
    content = await _load_input(file, path)

    cache = getattr(request.app.state, "cache", None)
    cache_key = f"summary:{hashlib.sha1(content).hexdigest()}"
    if cache:
        cached = await cache.get_json(cache_key)
        if cached:
            return DocumentSummary(**cached)

    summary = summarize_document(_read_or_422(content))
    if cache:
        await cache.set_json(cache_key, summary)
    return DocumentSummary(**summary)


@router.post("/documents/roundtrip")
async def roundtrip_document(file: UploadFile = File(None), path: str = Form(None)) -> Response:
    """Read then re-write a document; the crs member survives unchanged."""
    content = await _load_input(file, path)
    return _geojson_response(_read_or_422(content))


def _parse_types(types: Optional[str]) -> Optional[List[GeometryType]]:
    if not types:
        return None
    out: List[GeometryType] = []
    for token in types.split(","):
        token = token.strip()
        if not token:
            continue
        gtype = GeometryType.from_tag(token)
        if gtype is None:
            raise HTTPException(status_code=400, detail=f"Unknown geometry type: {token}")
        out.append(gtype)
    return out


@router.post("/documents/split")
async def split_document(
    file: UploadFile = File(None),
    path: str = Form(None),
    types: str = Form(None),
) -> Dict[str, Dict[str, dict]]:
    """Partition a multi-geometry document into one document per geometry type.

    Optional form field 'types' (comma separated, e.g. "Point,Polygon") limits
    the output to those types; requested types with no features come back as
    empty collections carrying the source crs.
    """
    content = await _load_input(file, path)
    wanted = _parse_types(types)
    doc = _read_or_422(content)
    parts = split_by_geometry_type(doc, types=wanted)
    return {"documents": {t.value: to_geojson_obj(d) for t, d in parts.items()}}


def _read_pair(payload: RoundtripRequest):
    return _read_or_422(payload.source), _read_or_422(payload.converted)


@router.post("/documents/crs_check", response_model=ConsistencyReport)
async def crs_check(payload: RoundtripRequest = Body(...)) -> ConsistencyReport:
    """Compare a document with its externally converted counterpart (crs, counts, geometry types)."""
    source, converted = _read_pair(payload)
    return ConsistencyReport(**check_crs_roundtrip(source, converted))


@router.post("/documents/restore_crs")
async def restore_document_crs(payload: RoundtripRequest = Body(...)) -> Response:
    """Return the converted document re-declaring the source document's crs."""
    source, converted = _read_pair(payload)
    return _geojson_response(restore_crs(converted, source.crs))


@router.post("/crs/parse", response_model=CrsDescription)
async def crs_parse(payload: CrsParseRequest = Body(...)) -> CrsDescription:
    try:
        crs = parse_crs_member(payload.crs)
    except GeoJsonError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return CrsDescription(**describe_crs(crs))
