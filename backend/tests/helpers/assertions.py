"""Assertions shared by API tests."""

from __future__ import annotations

from typing import Any


def assert_problem(response: Any, status: int, detail: str | None = None) -> dict[str, Any]:
    """Assert ``response`` is an RFC 7807 problem with ``status``.

    Parameters
    ----------
    response:
        Flask test client response.
    status:
        Expected HTTP status code.
    detail:
        When given, the exact ``detail`` expected in the body.

    Returns
    -------
    dict
        The decoded problem document for further checks.
    """
    assert response.status_code == status, response.get_data(as_text=True)
    assert response.mimetype == "application/problem+json"
    body = response.get_json()
    assert body["status"] == status
    if detail is not None:
        assert body["detail"] == detail
    return body
