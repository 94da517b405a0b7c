from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    sessions = request.app.state.calendar_sessions
    return {"ok": True, "open_calendars": len(sessions)}
