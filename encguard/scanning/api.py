"""FastAPI routes exposing scan verdicts and tool status to the host pipeline."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from .models import ScanVerdict
from .orchestrator import EncryptedContentScanner


class ScanRequest(BaseModel):
    path: str
    filename: Optional[str] = None


def verdict_to_dict(verdict: ScanVerdict) -> Dict[str, Any]:
    return {
        "filename": verdict.filename,
        "action": verdict.action.value,
        "blocked": verdict.blocked,
        "status": verdict.status.value if verdict.status else None,
        "message": verdict.message,
        "notice": verdict.notice,
        "category": verdict.category.value if verdict.category else None,
        "resolved_extension": verdict.resolved_extension,
        "resolved_format": verdict.resolved_format,
        "started_at": verdict.started_at.isoformat() if verdict.started_at else None,
        "duration_seconds": verdict.duration_seconds,
    }


def create_scan_router(scanner: EncryptedContentScanner) -> APIRouter:
    """Create FastAPI router with encrypted content scanning endpoints."""

    router = APIRouter(prefix="/encryption", tags=["encryption"])

    @router.post("/scan")
    async def scan(request: ScanRequest) -> Dict[str, Any]:
        """Scan a file already stored on disk by the host."""
        verdict = await scanner.scan_file(request.path, request.filename)
        return verdict_to_dict(verdict)

    @router.get("/tools")
    async def get_tools() -> Dict[str, Any]:
        """Get availability status for the PDF inspection tools."""
        tools = scanner.tool_manager.check_all_tools()
        pdf = scanner.pdf_probe
        enabled = {src.tool_name: src.enabled for src in (pdf.primary, pdf.secondary)}
        return {
            "tools": {
                name: {
                    "display_name": info.display_name,
                    "installed": info.installed,
                    "enabled": enabled.get(name, False),
                    "path": str(info.path) if info.path else None,
                    "license": info.license,
                }
                for name, info in tools.items()
            },
            "configured": scanner.is_configured(),
        }

    @router.get("/scans")
    async def get_scans(limit: int = Query(10, ge=1, le=100)) -> Dict[str, Any]:
        """Get recent scan verdicts."""
        verdicts = scanner.get_recent_verdicts(limit)
        return {
            "scans": [verdict_to_dict(v) for v in verdicts],
            "count": len(verdicts),
        }

    return router
