"""Error extraction for load test failure messages.

The canteen API answers with either a Pydantic validation body
(``{"detail": [...]}``), an HTTPException body (``{"detail": "msg"}``) or a
domain error body (``{"error": {"field": ["msg"]}}``).
"""

from requests import Response


def error_detail(response: Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return (response.text or "")[:300] or "(empty response body)"

    detail = body.get("detail")
    if isinstance(detail, list):
        return " | ".join(f"{'.'.join(str(p) for p in e.get('loc', []))}: {e.get('msg')}" for e in detail)
    if detail:
        return str(detail)

    error = body.get("error")
    if isinstance(error, dict):
        return " | ".join(f"{field}: {', '.join(map(str, msgs))}" for field, msgs in error.items())
    return str(error or body)[:300]
