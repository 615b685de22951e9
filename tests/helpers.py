from typing import Any, Dict, Optional

import httpx

ADDRESS = "http://127.0.0.1:8200"
API_URL = ADDRESS + "/v1"
ROOT_TOKEN = "hvs.root-token"


def vault_response(
    data: Optional[Dict[str, Any]] = None,
    *,
    auth: Optional[Dict[str, Any]] = None,
    wrap_info: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={
            "request_id": "6a7c5b1e-0000-4000-8000-000000000001",
            "lease_id": "",
            "renewable": False,
            "lease_duration": 0,
            "data": data,
            "wrap_info": wrap_info,
            "warnings": None,
            "auth": auth,
        },
    )


def error_response(status_code: int, *errors: str) -> httpx.Response:
    return httpx.Response(status_code, json={"errors": list(errors)})


def auth_payload(client_token: str) -> Dict[str, Any]:
    return {
        "client_token": client_token,
        "accessor": "accessor-1",
        "policies": ["default"],
        "token_policies": ["default"],
        "metadata": {"role_name": "my-role"},
        "lease_duration": 3600,
        "renewable": True,
        "entity_id": "e1",
        "token_type": "service",
        "orphan": True,
    }


def wrap_info_payload(token: str, creation_path: str) -> Dict[str, Any]:
    return {
        "token": token,
        "accessor": "wrap-accessor",
        "ttl": 60,
        "creation_time": "2025-06-01T10:00:00.000000Z",
        "creation_path": creation_path,
        "wrapped_accessor": "wrapped-accessor",
    }
