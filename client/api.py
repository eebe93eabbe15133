# client/api.py
import httpx
import logging
from typing import Optional

import config

logger = logging.getLogger(__name__)


class StudentApi:
    """HTTP client for the four student operations.

    Every method returns the decoded response envelope regardless of status
    code; only transport failures raise (as ``httpx.HTTPError``).
    """

    def __init__(self, base_url: str = None, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(base_url=base_url or config.API_BASE_URL)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self.client.aclose()

    async def list_students(self, search: str = "", page: int = None, limit: int = None) -> dict:
        params = {}
        if search:
            params["search"] = search
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = limit
        response = await self.client.get("/get", params=params)
        return self._envelope(response)

    async def add_student(self, payload: dict) -> dict:
        response = await self.client.post("/add", json=payload)
        return self._envelope(response)

    async def edit_student(self, student_id: str, payload: dict) -> dict:
        response = await self.client.put("/edit", json={"id": student_id, **payload})
        return self._envelope(response)

    async def delete_student(self, student_id: str) -> dict:
        response = await self.client.delete("/delete", params={"id": student_id})
        return self._envelope(response)

    @staticmethod
    def _envelope(response: httpx.Response) -> dict:
        try:
            return response.json()
        except ValueError:
            logger.error(f"Non-JSON response ({response.status_code}) from {response.request.url}")
            return {"success": False, "error": f"Unexpected response ({response.status_code})"}
