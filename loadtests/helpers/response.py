"""Response error extraction for load test observability.

Marketplace responses a load test has to explain:

- 202 partial commit: {"order_id", "checkout_id", "stage", "message"}
- 403 authorization: {"error": "msg"}
- 400 validation: {"error": {"field": ["msg", ...]}}
- 409 invalid transition: {"error": {"status": ["msg"]}}
- 404 / 503: {"error": "msg"}
- 422 request body rejected by FastAPI: {"detail": [{"loc": [...], "msg": "..."}]}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def _field_errors(error: dict) -> str:
    return " | ".join(f"{k}: {', '.join(v) if isinstance(v, list) else v}" for k, v in error.items())


def extract_error_detail(response: Response) -> str:
    """Compact, human-readable error message for Locust failures and logs."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    if response.status_code == 202 and "stage" in body:
        return f"partial commit at {body['stage']} (order {body.get('order_id')}, checkout {body.get('checkout_id')})"

    if response.status_code == 403:
        return f"forbidden: {body.get('error', body)}"

    if response.status_code == 422 and isinstance(body.get("detail"), list):
        return " | ".join(
            f"{'.'.join(str(p) for p in err.get('loc', []))}: {err.get('msg', err)}" for err in body["detail"]
        )

    error = body.get("error")
    if isinstance(error, dict):
        return _field_errors(error)
    if error is not None:
        return str(error)

    return str(body)[:300]


def actor_headers(user_id: str, role: str = "customer") -> dict:
    return {"X-Actor-Id": user_id, "X-Actor-Role": role}
