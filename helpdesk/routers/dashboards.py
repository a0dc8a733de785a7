"""Role landing pages."""
from fastapi import APIRouter, Depends

from helpdesk.schemas.session import SessionPayload
from helpdesk.security import require_admin, require_department

router = APIRouter(tags=["dashboards"])


@router.get("/admin/dashboard")
def admin_dashboard(payload: SessionPayload = Depends(require_admin)) -> dict[str, object]:
    return {"dashboard": "admin", "user": payload.model_dump(mode="json")}


@router.get("/client/dashboard")
def client_dashboard(payload: SessionPayload = Depends(require_department)) -> dict[str, object]:
    return {
        "dashboard": "client",
        "department": payload.department,
        "user": payload.model_dump(mode="json"),
    }
